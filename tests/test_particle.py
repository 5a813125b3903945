"""Tests for particle ids, masses and ParticleState."""

import numpy as np
import pytest

from uhecr_mc import units
from uhecr_mc.core import particle_id
from uhecr_mc.core.particle_id import nucleus_id
from uhecr_mc.core.particle_mass import NuclearMassTable, particle_mass
from uhecr_mc.core.particle_state import ParticleState
from uhecr_mc.errors import ConfigurationError, DataLookupError, TableLoadError


class TestParticleId:
    def test_encoding(self):
        assert nucleus_id(1, 1) == 1000010010
        assert nucleus_id(56, 26) == 1000260560

    def test_decode_is_inverse(self):
        for A, Z in [(1, 0), (1, 1), (4, 2), (56, 26), (238, 92)]:
            assert particle_id.decode(nucleus_id(A, Z)) == (A, Z)

    @pytest.mark.parametrize("A, Z", [(-1, 0), (1, -1), (2, 3)])
    def test_invalid_nucleus(self, A, Z):
        with pytest.raises(ConfigurationError):
            nucleus_id(A, Z)

    def test_charge_numbers(self):
        assert particle_id.charge_number(nucleus_id(56, 26)) == 26
        assert particle_id.charge_number(particle_id.ELECTRON) == -1
        assert particle_id.charge_number(particle_id.POSITRON) == 1
        assert particle_id.charge_number(particle_id.PHOTON) == 0

    def test_leptons_are_not_nuclei(self):
        assert not particle_id.is_nucleus(particle_id.ELECTRON)
        assert particle_id.mass_number(particle_id.PHOTON) == 0
        with pytest.raises(ConfigurationError):
            particle_id.decode(particle_id.PHOTON)

    def test_from_name(self):
        assert particle_id.particle_id_from_name('Fe-56') == nucleus_id(56, 26)
        with pytest.raises(ConfigurationError):
            particle_id.particle_id_from_name('unobtainium')


class TestNuclearMassTable:
    def test_lookup_returns_table_value(self, mass_table_file):
        table = NuclearMassTable.from_file(mass_table_file)
        assert len(table) == 3
        assert table.nucleus_mass(nucleus_id(12, 6)) == pytest.approx(1.9921e-26)
        assert table.mass(26, 30) == pytest.approx(9.2859e-26)

    def test_missing_entry_raises_with_id(self, mass_table_file):
        table = NuclearMassTable.from_file(mass_table_file)
        pid = nucleus_id(16, 8)
        with pytest.raises(DataLookupError) as exc_info:
            table.nucleus_mass(pid)
        assert exc_info.value.key == pid

    def test_zero_mass_is_absent(self):
        table = NuclearMassTable({(2, 2): 6.6e-27, (3, 3): 0.0})
        assert (3, 3) not in table
        with pytest.raises(DataLookupError):
            table.mass(3, 3)

    def test_negative_mass_rejected(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("2 2 -1.0\n")
        with pytest.raises(TableLoadError):
            NuclearMassTable.from_file(path)

    def test_packaged_table(self):
        table = NuclearMassTable.load_default()
        assert table.nucleus_mass(nucleus_id(4, 2)) == pytest.approx(6.6447e-27, rel=1e-4)

    def test_nucleons_need_no_table(self):
        assert particle_mass(nucleus_id(1, 1)) == units.mass_proton
        assert particle_mass(nucleus_id(1, 0)) == units.mass_neutron
        assert particle_mass(particle_id.POSITRON) == units.mass_electron
        assert particle_mass(particle_id.PHOTON) == 0.0

    def test_heavy_nucleus_without_table(self):
        with pytest.raises(DataLookupError):
            particle_mass(nucleus_id(56, 26))


class TestParticleState:
    def test_direction_is_normalized(self):
        state = ParticleState(direction=(3.0, 0.0, 4.0))
        assert np.linalg.norm(state.direction) == pytest.approx(1.0)
        np.testing.assert_allclose(state.direction, [0.6, 0.0, 0.8])

    def test_energy_clamped_at_zero(self):
        state = ParticleState(energy=1.0)
        state.energy = -5.0
        assert state.energy == 0.0

    def test_rigidity(self):
        state = ParticleState(nucleus_id(56, 26), 26 * units.EeV)
        assert state.get_rigidity() == pytest.approx(1e18)

    def test_neutral_rigidity_is_infinite(self):
        state = ParticleState(nucleus_id(1, 0), units.EeV)
        assert state.get_rigidity() == np.inf

    def test_lorentz_factor(self):
        E = 1e3 * units.mass_proton * units.c_squared
        state = ParticleState(nucleus_id(1, 1), E)
        assert state.get_lorentz_factor() == pytest.approx(1e3)
        assert np.linalg.norm(state.get_velocity()) == pytest.approx(units.c_light, rel=1e-6)

    def test_copy_is_independent(self):
        state = ParticleState(position=(1.0, 2.0, 3.0))
        clone = state.copy()
        clone.position = (0.0, 0.0, 0.0)
        clone.energy = 7.0
        np.testing.assert_array_equal(state.position, [1.0, 2.0, 3.0])
        assert state.energy == 0.0
