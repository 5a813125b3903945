"""
Break conditions: termination predicates with the uniform reject protocol.

Each condition tests one quantity of the candidate (trajectory length,
energy, rigidity, redshift, charge number) and, when the predicate is
violated, tags the candidate, optionally deactivates it and invokes the
chained reject action (see AbstractCondition). Length-type conditions
otherwise limit the next step so that the boundary is hit exactly.
"""

from typing import List, Sequence

import numpy as np

from uhecr_mc import units
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.module import AbstractCondition


class MaximumTrajectoryLength(AbstractCondition):
    """
    Rejects candidates that travelled max_length or more.

    With observer positions, candidates that can no longer reach any
    observer within the remaining length are rejected early.
    """

    def __init__(self, max_length: float = np.inf):
        """
        Parameters:
            max_length: Maximum trajectory length [m]
        """
        super().__init__()
        self.max_length = max_length
        self.observer_positions: List[np.ndarray] = []

    def set_maximum_trajectory_length(self, length: float):
        self.max_length = length

    def get_maximum_trajectory_length(self) -> float:
        return self.max_length

    def add_observer_position(self, position: Sequence[float]):
        self.observer_positions.append(np.array(position, dtype=np.float64))

    def get_observer_positions(self) -> List[np.ndarray]:
        return self.observer_positions

    def process(self, candidate: Candidate) -> None:
        length = candidate.get_trajectory_length()
        position = candidate.current.position

        if self.observer_positions:
            in_range = False
            for observer in self.observer_positions:
                distance = np.linalg.norm(position - observer)
                if distance + length < self.max_length:
                    in_range = True
            if not in_range:
                self.reject(candidate)
                return

        if length >= self.max_length:
            self.reject(candidate)
        else:
            candidate.limit_next_step(self.max_length - length)

    def get_description(self) -> str:
        s = (f"Maximum trajectory length: {self.max_length / units.Mpc} Mpc, "
             f"{self._describe_reject()}")
        s += "\n  Observer positions: \n"
        for observer in self.observer_positions:
            s += f"    - {observer / units.Mpc} Mpc\n"
        return s


class MinimumEnergy(AbstractCondition):
    """Rejects candidates with energy below min_energy."""

    def __init__(self, min_energy: float = 0.0):
        """
        Parameters:
            min_energy: Minimum energy [J]
        """
        super().__init__()
        self.min_energy = min_energy

    def set_minimum_energy(self, energy: float):
        self.min_energy = energy

    def get_minimum_energy(self) -> float:
        return self.min_energy

    def process(self, candidate: Candidate) -> None:
        if candidate.current.energy < self.min_energy:
            self.reject(candidate)

    def get_description(self) -> str:
        return (f"Minimum energy: {self.min_energy / units.EeV} EeV, "
                f"{self._describe_reject()}")


class MinimumRigidity(AbstractCondition):
    """Rejects candidates with rigidity E/(Z e) below min_rigidity."""

    def __init__(self, min_rigidity: float = 0.0):
        """
        Parameters:
            min_rigidity: Minimum rigidity [V]
        """
        super().__init__()
        self.min_rigidity = min_rigidity

    def set_minimum_rigidity(self, min_rigidity: float):
        self.min_rigidity = min_rigidity

    def get_minimum_rigidity(self) -> float:
        return self.min_rigidity

    def process(self, candidate: Candidate) -> None:
        if candidate.current.get_rigidity() < self.min_rigidity:
            self.reject(candidate)

    def get_description(self) -> str:
        return (f"Minimum rigidity: {self.min_rigidity / units.EeV} EeV, "
                f"{self._describe_reject()}")


class MinimumRedshift(AbstractCondition):
    """Rejects candidates with redshift <= z_min."""

    def __init__(self, z_min: float = 0.0):
        super().__init__()
        self.z_min = z_min

    def set_minimum_redshift(self, z: float):
        self.z_min = z

    def get_minimum_redshift(self) -> float:
        return self.z_min

    def process(self, candidate: Candidate) -> None:
        if candidate.get_redshift() > self.z_min:
            return
        self.reject(candidate)

    def get_description(self) -> str:
        return f"Minimum redshift: {self.z_min}, {self._describe_reject()}"


class MinimumChargeNumber(AbstractCondition):
    """Rejects candidates with charge number <= min_charge_number."""

    def __init__(self, min_charge_number: int = 0):
        super().__init__()
        self.min_charge_number = min_charge_number

    def set_minimum_charge_number(self, charge_number: int):
        self.min_charge_number = charge_number

    def get_minimum_charge_number(self) -> int:
        return self.min_charge_number

    def process(self, candidate: Candidate) -> None:
        if candidate.current.charge_number > self.min_charge_number:
            return
        self.reject(candidate)

    def get_description(self) -> str:
        return (f"Minimum charge number: {self.min_charge_number}, "
                f"{self._describe_reject()}")


class MinimumEnergyPerParticleId(AbstractCondition):
    """
    Minimum energy with per-particle-id thresholds.

    The first matching id (in insertion order) decides; ids without an
    entry use min_energy_others.
    """

    def __init__(self, min_energy_others: float = 0.0):
        """
        Parameters:
            min_energy_others: Threshold for unlisted ids [J]
        """
        super().__init__()
        self.min_energy_others = min_energy_others
        self.particle_ids: List[int] = []
        self.min_energies: List[float] = []

    def add(self, pid: int, energy: float):
        self.particle_ids.append(pid)
        self.min_energies.append(energy)

    def set_minimum_energy_others(self, energy: float):
        self.min_energy_others = energy

    def get_minimum_energy_others(self) -> float:
        return self.min_energy_others

    def process(self, candidate: Candidate) -> None:
        pid = candidate.current.id
        energy = candidate.current.energy

        for listed_id, min_energy in zip(self.particle_ids, self.min_energies):
            if pid == listed_id:
                if energy < min_energy:
                    self.reject(candidate)
                return

        if energy < self.min_energy_others:
            self.reject(candidate)

    def get_description(self) -> str:
        s = f"Minimum energy for non-specified particles: {self.min_energy_others / units.eV} eV"
        for pid, energy in zip(self.particle_ids, self.min_energies):
            s += f"  for particle {pid} : {energy / units.eV} eV"
        return f"{s}, {self._describe_reject()}"


class DetectionLength(AbstractCondition):
    """
    Flags candidates when their trajectory length crosses detection_length.

    The candidate is flagged only in the step that crosses the length; the
    next step is limited so the crossing lands exactly on it.
    """

    def __init__(self, detection_length: float = 0.0):
        """
        Parameters:
            detection_length: Detection length [m]
        """
        super().__init__()
        self.detection_length = detection_length

    def set_detection_length(self, length: float):
        self.detection_length = length

    def get_detection_length(self) -> float:
        return self.detection_length

    def process(self, candidate: Candidate) -> None:
        length = candidate.get_trajectory_length()
        step = candidate.get_current_step()

        if length >= self.detection_length:
            if length - step < self.detection_length:
                self.reject(candidate)
        else:
            candidate.limit_next_step(self.detection_length - length)

    def get_description(self) -> str:
        return (f"Detection length: {self.detection_length / units.kpc} kpc, "
                f"{self._describe_reject()}")
