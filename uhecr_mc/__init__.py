"""
UHECR_MC: Ultra-High-Energy Cosmic-Ray Propagation Monte Carlo

Propagates cosmic-ray nuclei through extragalactic photon backgrounds
with a composable chain of processing modules.

Modules:
    core: Particle state, candidates, module chain, sources
    physics: Photon fields, photo-pion sampling, energy-loss tables
    modules: Propagation, interactions, break conditions
    transport: Sequential and multiprocess propagation drivers
    io: Table loading
"""

__version__ = "0.1.0"

from uhecr_mc.core.particle_state import ParticleState
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.module import ModuleList
from uhecr_mc.physics.photon_field import TabularPhotonField, CMB
from uhecr_mc.physics.photon_sampling import PhotonFieldSampling
from uhecr_mc.transport.engine import PropagationEngine

__all__ = [
    "ParticleState",
    "Candidate",
    "ModuleList",
    "TabularPhotonField",
    "CMB",
    "PhotonFieldSampling",
    "PropagationEngine",
]
