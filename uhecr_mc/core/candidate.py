"""
Candidate: the mutable record of one simulated particle.

A candidate carries its current and initial particle state, trajectory
bookkeeping, free-form string tags and the secondaries it produced.
It is terminated by deactivation, never by deletion, so that tags stay
readable after rejection.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np

from uhecr_mc.core.particle_state import ParticleState


class Candidate:
    """
    Cosmic-ray candidate.

    Example:
        c = Candidate(ParticleState(nucleus_id(1, 1), 10 * EeV))
        c.limit_next_step(1 * Mpc)
        c.set_property('Rejected', 'MinimumEnergy')
        c.deactivate()
    """

    def __init__(self, state: Optional[ParticleState] = None,
                 redshift: float = 0.0,
                 trajectory_length: float = 0.0):
        """
        Initialize a candidate.

        Parameters:
            state: Initial particle state (copied into current/initial/previous)
            redshift: Redshift at creation
            trajectory_length: Length already travelled [m]
        """
        if state is None:
            state = ParticleState()
        self.current = state
        self.initial = state.copy()
        self.previous = state.copy()

        self.redshift = redshift
        self.trajectory_length = trajectory_length
        self.current_step = 0.0
        self.next_step = np.inf
        self.active = True

        self.properties: Dict[str, str] = {}
        self.secondaries: List["Candidate"] = []
        self.rng: Optional[np.random.Generator] = None

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    def is_active(self) -> bool:
        return self.active

    def set_active(self, active: bool):
        self.active = bool(active)

    def deactivate(self):
        """Terminate the candidate; state and tags remain readable."""
        self.active = False

    # ------------------------------------------------------------------
    # Trajectory bookkeeping
    # ------------------------------------------------------------------

    def get_trajectory_length(self) -> float:
        return self.trajectory_length

    def set_trajectory_length(self, length: float):
        self.trajectory_length = length

    def get_redshift(self) -> float:
        return self.redshift

    def set_redshift(self, z: float):
        self.redshift = z

    def get_current_step(self) -> float:
        """Length of the step just taken [m]."""
        return self.current_step

    def set_current_step(self, step: float):
        self.current_step = step

    def get_next_step(self) -> float:
        return self.next_step

    def set_next_step(self, step: float):
        """Reset the next-step bound (used by propagation at each step)."""
        self.next_step = step

    def limit_next_step(self, step: float):
        """Shrink the next-step bound to min(current bound, step); never grows."""
        self.next_step = min(self.next_step, step)

    # ------------------------------------------------------------------
    # Random numbers
    # ------------------------------------------------------------------

    def set_random_generator(self, rng: np.random.Generator):
        self.rng = rng

    def get_random_generator(self) -> np.random.Generator:
        """
        Generator used by stochastic modules for this candidate.

        Propagation drivers assign one per primary so that results do not
        depend on scheduling; an unseeded generator is created otherwise.
        """
        if self.rng is None:
            self.rng = np.random.default_rng()
        return self.rng

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def set_property(self, key: str, value: str):
        self.properties[key] = str(value)

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.properties.get(key, default)

    def has_property(self, key: str) -> bool:
        return key in self.properties

    def remove_property(self, key: str) -> bool:
        """Remove a tag; returns False if it was not set."""
        return self.properties.pop(key, None) is not None

    # ------------------------------------------------------------------
    # Secondaries
    # ------------------------------------------------------------------

    def add_secondary(self, secondary=None, *, pid: Optional[int] = None,
                      energy: Optional[float] = None,
                      position: Optional[Sequence[float]] = None) -> "Candidate":
        """
        Attach a secondary candidate.

        Either pass a ready Candidate, or pid and energy to create one at
        the current position (or the given position) with this candidate's
        redshift, trajectory length and direction. The created secondary's
        initial state is the parent's current state. A secondary without its own
        random generator shares the parent's.

        Returns:
            The secondary candidate
        """
        if secondary is None:
            if pid is None or energy is None:
                raise TypeError("add_secondary needs a Candidate or pid and energy")

            secondary = Candidate(self.current.copy(), redshift=self.redshift,
                                  trajectory_length=self.trajectory_length)
            secondary.current.id = pid
            secondary.current.energy = energy
            if position is not None:
                secondary.current.position = position
            secondary.previous = secondary.current.copy()

        if secondary.rng is None:
            secondary.rng = self.rng
        self.secondaries.append(secondary)
        return secondary

    def clear_secondaries(self):
        self.secondaries.clear()

    def __repr__(self) -> str:
        return (f"Candidate(active={self.active}, length={self.trajectory_length:.4g} m, "
                f"z={self.redshift}, current={self.current!r})")
