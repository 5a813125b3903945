"""
Single particle state: identity, energy, position, direction.
"""

import copy
from typing import Optional, Sequence

import numpy as np

from uhecr_mc import units
from uhecr_mc.core import particle_id
from uhecr_mc.core.particle_mass import NuclearMassTable, particle_mass


class ParticleState:
    """
    State of a particle at one point of its trajectory.

    Mass, charge and rigidity are derived from the particle id. Nucleus
    masses other than p and n need a NuclearMassTable.
    """

    def __init__(self, pid: int = particle_id.nucleus_id(1, 1),
                 energy: float = 0.0,
                 position: Sequence[float] = (0.0, 0.0, 0.0),
                 direction: Sequence[float] = (-1.0, 0.0, 0.0),
                 mass_table: Optional[NuclearMassTable] = None):
        """
        Initialize a particle state.

        Parameters:
            pid: Particle id (see particle_id)
            energy: Total energy [J]
            position: (x, y, z) position [m]
            direction: (dx, dy, dz) direction (normalized internally)
            mass_table: Nuclear mass table for nuclei heavier than A=1
        """
        self.id = pid
        self.mass_table = mass_table
        self.energy = energy
        self.position = position
        self.direction = direction

    @property
    def energy(self) -> float:
        return self._energy

    @energy.setter
    def energy(self, value: float):
        # negative energies are unphysical; clamp at zero
        self._energy = max(float(value), 0.0)

    @property
    def position(self) -> np.ndarray:
        return self._position

    @position.setter
    def position(self, value: Sequence[float]):
        self._position = np.array(value, dtype=np.float64)

    @property
    def direction(self) -> np.ndarray:
        return self._direction

    @direction.setter
    def direction(self, value: Sequence[float]):
        dir_array = np.array(value, dtype=np.float64)
        norm = np.linalg.norm(dir_array)
        self._direction = dir_array / norm if norm > 0 else dir_array

    @property
    def charge_number(self) -> int:
        return particle_id.charge_number(self.id)

    @property
    def mass_number(self) -> int:
        return particle_id.mass_number(self.id)

    @property
    def charge(self) -> float:
        """Electric charge [C]."""
        return self.charge_number * units.eplus

    @property
    def mass(self) -> float:
        """Rest mass [kg]."""
        return particle_mass(self.id, self.mass_table)

    def is_nucleus(self) -> bool:
        return particle_id.is_nucleus(self.id)

    def get_rigidity(self) -> float:
        """
        Rigidity E/(Z e) [V].

        Neutral particles have infinite rigidity.
        """
        Z = self.charge_number
        if Z == 0:
            return np.inf
        return self.energy / abs(self.charge)

    def get_lorentz_factor(self) -> float:
        return self.energy / (self.mass * units.c_squared)

    def get_velocity(self) -> np.ndarray:
        """Velocity vector [m/s]; massless particles move at c."""
        m = self.mass
        if m == 0:
            return self.direction * units.c_light
        gamma = self.get_lorentz_factor()
        beta = np.sqrt(max(0.0, 1.0 - 1.0 / gamma**2)) if gamma >= 1 else 0.0
        return self.direction * beta * units.c_light

    def get_momentum(self) -> np.ndarray:
        """Momentum vector [kg m/s] (ultra-relativistic approximation E/c)."""
        return self.direction * (self.energy / units.c_light)

    def copy(self) -> "ParticleState":
        # mass table is shared, arrays are copied
        new = copy.copy(self)
        new._position = self._position.copy()
        new._direction = self._direction.copy()
        return new

    def __repr__(self) -> str:
        return (f"ParticleState(id={self.id}, E={self.energy / units.EeV:.4g} EeV, "
                f"pos={self.position / units.Mpc} Mpc, dir={self.direction})")
