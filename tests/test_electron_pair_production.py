"""Tests for continuous electron-pair production losses."""

import numpy as np
import pytest

from uhecr_mc import units
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.particle_id import ELECTRON, PHOTON, nucleus_id
from uhecr_mc.core.particle_state import ParticleState
from uhecr_mc.errors import ConfigurationError
from uhecr_mc.modules.electron_pair_production import ElectronPairProduction
from uhecr_mc.physics.loss_table import InteractionLossTable

from conftest import write_table

FLAT_RATE = 1e15 * units.eV / units.Mpc


@pytest.fixture(scope="module")
def cmb_epp():
    return ElectronPairProduction("CMB")


@pytest.fixture
def flat_epp():
    table = InteractionLossTable(np.array([1e15, 1e23]) * units.eV, [FLAT_RATE, FLAT_RATE])
    return ElectronPairProduction(table=table)


def make_candidate(pid, energy, step, redshift=0.0):
    c = Candidate(ParticleState(pid, energy), redshift=redshift)
    c.set_current_step(step)
    return c


def test_unknown_field():
    with pytest.raises(ConfigurationError):
        ElectronPairProduction("URB")


def test_proton_loses_energy(cmb_epp):
    E = 10 * units.EeV
    c = make_candidate(nucleus_id(1, 1), E, 10 * units.Mpc)
    cmb_epp.process(c)
    assert 0.9 * E < c.current.energy < E
    assert c.get_next_step() < np.inf


@pytest.mark.parametrize("pid", [nucleus_id(1, 0), PHOTON, ELECTRON])
def test_neutral_and_leptons_unchanged(cmb_epp, pid):
    E = 10 * units.EeV
    c = make_candidate(pid, E, 10 * units.Mpc)
    cmb_epp.process(c)
    assert c.current.energy == E
    assert c.get_next_step() == np.inf


def test_loss_proportional_to_step(flat_epp):
    E = 1e19 * units.eV
    c = make_candidate(nucleus_id(1, 1), E, 2 * units.Mpc)
    flat_epp.process(c)
    assert E - c.current.energy == pytest.approx(2 * FLAT_RATE * units.Mpc)


def test_charge_squared_scaling(flat_epp):
    E = 56e19 * units.eV
    c = make_candidate(nucleus_id(56, 26), E, units.Mpc)
    flat_epp.process(c)
    assert E - c.current.energy == pytest.approx(26**2 * FLAT_RATE * units.Mpc)


def test_redshift_scaling(flat_epp):
    E = 1e19 * units.eV
    c = make_candidate(nucleus_id(1, 1), E, units.Mpc, redshift=1.0)
    flat_epp.process(c)
    assert E - c.current.energy == pytest.approx(4 * FLAT_RATE * units.Mpc)


def test_step_limited_to_fraction_of_loss_length(flat_epp):
    E = 1e19 * units.eV
    c = make_candidate(nucleus_id(1, 1), E, 0.0)
    flat_epp.process(c)
    assert c.current.energy == E
    assert c.get_next_step() == pytest.approx(0.1 * E / FLAT_RATE)


def test_energy_floor():
    table = InteractionLossTable(np.array([1e15, 1e23]) * units.eV, [1e30, 1e30])
    epp = ElectronPairProduction(table=table, energy_floor=1e3 * units.eV)
    c = make_candidate(nucleus_id(1, 1), 1e19 * units.eV, units.Mpc)
    epp.process(c)
    assert c.current.energy == pytest.approx(1e3 * units.eV)


def test_default_floor_is_one_ev():
    table = InteractionLossTable(np.array([1e15, 1e23]) * units.eV, [1e30, 1e30])
    epp = ElectronPairProduction(table=table)
    c = make_candidate(nucleus_id(1, 1), 1e19 * units.eV, units.Mpc)
    epp.process(c)
    assert c.current.energy == pytest.approx(units.eV)
    assert c.current.energy > 0


def test_from_files(tmp_path):
    e_file = write_table(tmp_path / "energy.txt", [1e15, 1e23])
    r_file = write_table(tmp_path / "loss-rate.txt", [1e15, 1e15])
    epp = ElectronPairProduction.from_files(e_file, r_file)
    assert epp.get_description() == "ElectronPairProduction: custom"
    c = make_candidate(nucleus_id(1, 1), 1e19 * units.eV, units.Mpc)
    epp.process(c)
    assert 1e19 * units.eV - c.current.energy == pytest.approx(1e15 * units.eV)
