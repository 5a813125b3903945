"""
Candidate sources.

Only the interface is part of the propagation core; MonoenergeticSource is
a minimal point source used by the engine and the example scripts.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.particle_mass import NuclearMassTable
from uhecr_mc.core.particle_state import ParticleState


class Source(ABC):
    """Produces fully initialized candidates."""

    @abstractmethod
    def produce_candidate(self) -> Candidate:
        """Return a new candidate ready to enter the module chain."""


class MonoenergeticSource(Source):
    """Point source emitting one particle type at fixed energy and direction."""

    def __init__(self, pid: int, energy: float,
                 position: Sequence[float] = (0.0, 0.0, 0.0),
                 direction: Sequence[float] = (-1.0, 0.0, 0.0),
                 redshift: float = 0.0,
                 mass_table: Optional[NuclearMassTable] = None):
        """
        Parameters:
            pid: Particle id
            energy: Energy [J]
            position: Source position [m]
            direction: Emission direction (normalized automatically)
            redshift: Source redshift
            mass_table: Nuclear mass table attached to produced states
        """
        self.pid = pid
        self.energy = energy
        self.position = tuple(position)
        self.direction = tuple(direction)
        self.redshift = redshift
        self.mass_table = mass_table

    def produce_candidate(self) -> Candidate:
        state = ParticleState(self.pid, self.energy, self.position, self.direction,
                              mass_table=self.mass_table)
        return Candidate(state, redshift=self.redshift)
