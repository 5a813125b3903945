"""
Rectilinear propagation.
"""

from uhecr_mc import units
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.module import Module
from uhecr_mc.errors import ConfigurationError


class SimplePropagation(Module):
    """
    Moves the candidate along its direction.

    The step is the candidate's next-step bound clamped to
    [min_step, max_step]. After moving, the bound is reset to max_step so
    that later modules can only shrink it.
    """

    def __init__(self, min_step: float = 0.1 * units.kpc, max_step: float = 1000 * units.Mpc):
        """
        Parameters:
            min_step: Minimum step [m]
            max_step: Maximum step [m]
        """
        if min_step < 0 or max_step < min_step:
            raise ConfigurationError(f"Invalid step range: [{min_step}, {max_step}]")
        self.min_step = min_step
        self.max_step = max_step

    def process(self, candidate: Candidate) -> None:
        candidate.previous = candidate.current.copy()

        step = min(max(candidate.get_next_step(), self.min_step), self.max_step)
        candidate.set_current_step(step)
        candidate.current.position = candidate.current.position + step * candidate.current.direction
        candidate.set_trajectory_length(candidate.get_trajectory_length() + step)

        candidate.set_next_step(self.max_step)

    def get_description(self) -> str:
        return (f"SimplePropagation: step between {self.min_step / units.kpc} kpc "
                f"and {self.max_step / units.kpc} kpc")
