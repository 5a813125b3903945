"""Modules: propagation, interactions, break conditions."""

from uhecr_mc.modules.break_condition import (
    MaximumTrajectoryLength,
    MinimumEnergy,
    MinimumRigidity,
    MinimumRedshift,
    MinimumChargeNumber,
    MinimumEnergyPerParticleId,
    DetectionLength,
)
from uhecr_mc.modules.electron_pair_production import ElectronPairProduction
from uhecr_mc.modules.propagation import SimplePropagation

__all__ = [
    "MaximumTrajectoryLength",
    "MinimumEnergy",
    "MinimumRigidity",
    "MinimumRedshift",
    "MinimumChargeNumber",
    "MinimumEnergyPerParticleId",
    "DetectionLength",
    "ElectronPairProduction",
    "SimplePropagation",
]
