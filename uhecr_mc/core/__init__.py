"""Core module: particle state, candidates, module chain."""

from uhecr_mc.core.particle_state import ParticleState
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.module import Module, ModuleList, AbstractCondition
from uhecr_mc.core.particle_mass import NuclearMassTable
from uhecr_mc.core.source import Source, MonoenergeticSource

__all__ = [
    "ParticleState",
    "Candidate",
    "Module",
    "ModuleList",
    "AbstractCondition",
    "NuclearMassTable",
    "Source",
    "MonoenergeticSource",
]
