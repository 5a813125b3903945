"""Tests for the sequential and parallel propagation drivers."""

import numpy as np
import pytest

from uhecr_mc import units
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.module import Module, ModuleList
from uhecr_mc.core.particle_id import nucleus_id
from uhecr_mc.core.particle_state import ParticleState
from uhecr_mc.core.source import MonoenergeticSource
from uhecr_mc.errors import ConfigurationError
from uhecr_mc.modules import MaximumTrajectoryLength, MinimumEnergy, SimplePropagation
from uhecr_mc.physics.photon_sampling import PhotonFieldSampling
from uhecr_mc.transport.engine import PropagationEngine


@pytest.fixture
def chain():
    return ModuleList([
        SimplePropagation(1 * units.kpc, 10 * units.Mpc),
        MaximumTrajectoryLength(35 * units.Mpc),
        MinimumEnergy(1 * units.EeV),
    ])


@pytest.fixture
def source():
    return MonoenergeticSource(nucleus_id(1, 1), 10 * units.EeV)


def test_run_sequential(chain, source):
    engine = PropagationEngine(chain, seed=1)
    stats = engine.run(source, 5, verbose=False)
    assert stats['n_candidates'] == 5
    assert stats['n_active'] == 0
    assert stats['total_steps'] == 5 * 4
    assert stats['rejected'] == {"MaximumTrajectoryLength": 5}
    np.testing.assert_allclose(engine.get_trajectory_lengths(), 35 * units.Mpc)
    np.testing.assert_allclose(engine.get_final_energies(), 10 * units.EeV)


def test_run_from_candidates(chain):
    low = Candidate(ParticleState(nucleus_id(1, 1), 0.5 * units.EeV))
    high = Candidate(ParticleState(nucleus_id(1, 1), 5 * units.EeV))
    engine = PropagationEngine(chain)
    engine.run([low, high], verbose=False)
    assert engine.get_rejection_counts() == {"MinimumEnergy": 1, "MaximumTrajectoryLength": 1}


def test_source_needs_count(chain, source):
    with pytest.raises(ConfigurationError):
        PropagationEngine(chain).run(source, verbose=False)


def test_seeds_are_reproducible(chain):
    a = PropagationEngine(chain, seed=42)._seeds(8)
    b = PropagationEngine(chain, seed=42)._seeds(8)
    assert a == b
    assert len(set(a)) == 8


def test_parallel_matches_sequential(chain, source):
    sequential = PropagationEngine(chain, seed=3)
    sequential.run(source, 6, verbose=False)

    parallel = PropagationEngine(chain, seed=3)
    stats = parallel.run_parallel(source, 6, n_processes=2, verbose=False)

    assert stats['n_candidates'] == 6
    np.testing.assert_allclose(parallel.get_trajectory_lengths(),
                               sequential.get_trajectory_lengths())
    assert parallel.get_rejection_counts() == sequential.get_rejection_counts()


class SampleTargetPhoton(Module):
    """Tags each candidate with the CMB photon energy sampled on its last step."""

    def __init__(self):
        self.sampler = PhotonFieldSampling(bg_flag=1, seed=0)

    def process(self, candidate):
        eps = self.sampler.sample_eps(True, candidate.current.energy, 0.0,
                                      rng=candidate.get_random_generator())
        candidate.set_property("TargetPhoton", repr(eps))


@pytest.fixture
def stochastic_chain():
    return ModuleList([
        SimplePropagation(1 * units.kpc, 10 * units.Mpc),
        SampleTargetPhoton(),
        MaximumTrajectoryLength(35 * units.Mpc),
    ])


@pytest.fixture
def uhecr_source():
    return MonoenergeticSource(nucleus_id(1, 1), 100 * units.EeV)


def _target_photons(engine):
    return [c.get_property("TargetPhoton") for c in engine.candidates]


def test_stochastic_run_is_reproducible(stochastic_chain, uhecr_source):
    first = PropagationEngine(stochastic_chain, seed=3)
    first.run(uhecr_source, 6, verbose=False)
    second = PropagationEngine(stochastic_chain, seed=3)
    second.run(uhecr_source, 6, verbose=False)

    assert _target_photons(first) == _target_photons(second)
    assert len(set(_target_photons(first))) > 1
    assert all(float(eps) > 0 for eps in _target_photons(first))


def test_stochastic_parallel_matches_sequential(stochastic_chain, uhecr_source):
    sequential = PropagationEngine(stochastic_chain, seed=3)
    sequential.run(uhecr_source, 6, verbose=False)

    parallel = PropagationEngine(stochastic_chain, seed=3)
    parallel.run_parallel(uhecr_source, 6, n_processes=2, verbose=False)

    assert _target_photons(parallel) == _target_photons(sequential)
