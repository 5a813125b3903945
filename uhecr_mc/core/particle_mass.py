"""
Nuclear mass table.

The table is loaded once, before any candidate processing, and handed to
the components that need nucleus masses. File format (nuclear_mass.txt):

    # Z N mass[kg]
    1 0 1.67262e-27
    ...

Entries with zero mass are treated as absent.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import numpy as np

from uhecr_mc import units
from uhecr_mc.core import particle_id
from uhecr_mc.errors import DataLookupError, TableLoadError
from uhecr_mc.io.tables import get_data_path, load_columns

logger = logging.getLogger(__name__)


class NuclearMassTable:
    """Immutable (Z, N) → mass [kg] lookup."""

    def __init__(self, masses: Dict[Tuple[int, int], float]):
        """
        Parameters:
            masses: Mapping (Z, N) → mass [kg]
        """
        self._masses = {key: float(m) for key, m in masses.items() if m > 0}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "NuclearMassTable":
        """Load a three-column 'Z N mass' table."""
        data = load_columns(path, 3)
        if np.any(data[:, 2] < 0):
            raise TableLoadError(f"Negative mass in {Path(path).name}")

        masses = {}
        for Z, N, mass in data:
            masses[(int(Z), int(N))] = mass

        logger.debug("Loaded %d nuclear masses from %s", len(masses), path)
        return cls(masses)

    @classmethod
    def load_default(cls, data_dir: Optional[Union[str, Path]] = None) -> "NuclearMassTable":
        """Load nuclear_mass.txt from the data directory (see get_data_path)."""
        return cls.from_file(get_data_path("nuclear_mass.txt", data_dir))

    def __len__(self) -> int:
        return len(self._masses)

    def __contains__(self, key: Tuple[int, int]) -> bool:
        return key in self._masses

    def mass(self, Z: int, N: int) -> float:
        """
        Mass of nucleus (Z, N) [kg].

        Raises:
            DataLookupError: Entry absent
        """
        try:
            return self._masses[(Z, N)]
        except KeyError:
            raise DataLookupError(
                f"Nucleus not found in mass table: Z={Z}, N={N}", key=(Z, N)
            ) from None

    def nucleus_mass(self, pid: int) -> float:
        """
        Mass of a nucleus given its id [kg].

        Raises:
            DataLookupError: Entry absent, carries the offending id
        """
        A, Z = particle_id.decode(pid)
        N = A - Z
        if (Z, N) not in self._masses:
            raise DataLookupError(f"Nucleus not found in mass table: id={pid}", key=pid)
        return self._masses[(Z, N)]


def particle_mass(pid: int, table: Optional[NuclearMassTable] = None) -> float:
    """
    Rest mass of any supported particle [kg].

    Protons and neutrons do not need a table. Other nuclei need one.

    Raises:
        DataLookupError: Nucleus mass not available
    """
    if particle_id.is_nucleus(pid):
        A, Z = particle_id.decode(pid)
        if A == 1 and Z == 1:
            return units.mass_proton
        if A == 1 and Z == 0:
            return units.mass_neutron
        if table is None:
            raise DataLookupError(
                f"No nuclear mass table available for id={pid}", key=pid
            )
        return table.nucleus_mass(pid)

    if abs(pid) == particle_id.ELECTRON:
        return units.mass_electron
    return 0.0
