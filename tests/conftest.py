import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from uhecr_mc import units
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.particle_id import nucleus_id
from uhecr_mc.core.particle_state import ParticleState


def write_table(path: Path, values, header: str = "") -> Path:
    """Write a newline-delimited numeric table."""
    lines = [f"# {header}"] if header else []
    lines += [repr(float(v)) for v in np.ravel(values)]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def proton() -> Candidate:
    state = ParticleState(nucleus_id(1, 1), 10 * units.EeV)
    return Candidate(state)


@pytest.fixture
def field_energies() -> np.ndarray:
    # photon energies [J], 1e-4 - 1 eV
    return np.logspace(-4, 0, 9) * units.eV


@pytest.fixture
def field_dir(tmp_path, field_energies) -> Path:
    """
    Synthetic redshift-dependent field 'TestField':
    density(E, z) = 1e6 * (1 + z) for z in (0, 1, 2).
    """
    redshifts = np.array([0.0, 1.0, 2.0])
    density = 1e6 * np.outer(np.ones_like(field_energies), 1.0 + redshifts)
    write_table(tmp_path / "TestField_photonEnergy.txt", field_energies, "energy [J]")
    write_table(tmp_path / "TestField_photonDensity.txt", density, "E dn/dE [1/m^3]")
    write_table(tmp_path / "TestField_redshift.txt", redshifts, "z")
    write_table(tmp_path / "FlatField_photonEnergy.txt", field_energies)
    write_table(tmp_path / "FlatField_photonDensity.txt", np.full(len(field_energies), 5e5))
    return tmp_path


@pytest.fixture
def mass_table_file(tmp_path) -> Path:
    path = tmp_path / "nuclear_mass.txt"
    path.write_text(
        "# Z N mass[kg]\n"
        "2 2 6.6447e-27\n"
        "6 6 1.9921e-26\n"
        "26 30 9.2859e-26\n"
    )
    return path
