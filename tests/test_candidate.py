"""Tests for Candidate bookkeeping, tags and secondaries."""

import numpy as np
import pytest

from uhecr_mc import units
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.particle_id import PHOTON, nucleus_id
from uhecr_mc.core.particle_state import ParticleState


def test_initial_is_snapshot(proton):
    proton.current.energy = 1 * units.EeV
    proton.current.position = (1.0, 0.0, 0.0)
    assert proton.initial.energy == pytest.approx(10 * units.EeV)
    np.testing.assert_array_equal(proton.initial.position, [0.0, 0.0, 0.0])


def test_limit_next_step_only_shrinks(proton):
    assert proton.get_next_step() == np.inf
    proton.limit_next_step(5.0)
    proton.limit_next_step(8.0)
    assert proton.get_next_step() == 5.0
    proton.limit_next_step(2.0)
    assert proton.get_next_step() == 2.0


def test_deactivate(proton):
    assert proton.is_active()
    proton.deactivate()
    assert not proton.is_active()
    proton.set_active(True)
    assert proton.is_active()


class TestProperties:
    def test_last_write_wins(self, proton):
        proton.set_property("Rejected", "A")
        proton.set_property("Rejected", "B")
        assert proton.get_property("Rejected") == "B"

    def test_missing_property(self, proton):
        assert not proton.has_property("Rejected")
        assert proton.get_property("Rejected") is None
        assert proton.get_property("Rejected", "none") == "none"

    def test_remove_property(self, proton):
        proton.set_property("key", "value")
        assert proton.remove_property("key")
        assert not proton.remove_property("key")
        assert not proton.has_property("key")


class TestSecondaries:
    def test_secondary_inherits_parent(self, proton):
        proton.current.position = (1.0, 2.0, 3.0)
        proton.set_redshift(0.5)
        proton.set_trajectory_length(42.0)

        secondary = proton.add_secondary(pid=PHOTON, energy=1 * units.EeV)

        assert proton.secondaries == [secondary]
        assert secondary.current.id == PHOTON
        assert secondary.current.energy == pytest.approx(1 * units.EeV)
        np.testing.assert_array_equal(secondary.current.position, [1.0, 2.0, 3.0])
        assert secondary.get_redshift() == 0.5
        assert secondary.get_trajectory_length() == 42.0
        # initial state is the parent's state at creation
        assert secondary.initial.id == nucleus_id(1, 1)
        assert secondary.initial.energy == pytest.approx(10 * units.EeV)

    def test_secondary_does_not_alias_parent(self, proton):
        secondary = proton.add_secondary(pid=PHOTON, energy=1.0)
        secondary.current.position = (9.0, 9.0, 9.0)
        np.testing.assert_array_equal(proton.current.position, [0.0, 0.0, 0.0])

    def test_add_ready_candidate(self, proton):
        child = Candidate(ParticleState(nucleus_id(4, 2), units.EeV))
        assert proton.add_secondary(child) is child
        proton.clear_secondaries()
        assert proton.secondaries == []

    def test_missing_arguments(self, proton):
        with pytest.raises(TypeError):
            proton.add_secondary(pid=PHOTON)

    def test_secondary_shares_random_generator(self, proton):
        rng = np.random.default_rng(5)
        proton.set_random_generator(rng)
        secondary = proton.add_secondary(pid=PHOTON, energy=1.0)
        assert secondary.get_random_generator() is rng


def test_random_generator_created_on_demand(proton):
    rng = proton.get_random_generator()
    assert isinstance(rng, np.random.Generator)
    assert proton.get_random_generator() is rng
