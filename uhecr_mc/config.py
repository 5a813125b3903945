"""
Simulation configuration.

A run is described by a small YAML file:

    seed: 42
    n_candidates: 1000
    particle_id: proton        # name or integer id
    energy: 100.0              # EeV
    max_trajectory_length: 1000.0  # Mpc
    min_energy: 1.0            # EeV
    min_step: 0.001            # Mpc
    max_step: 10.0             # Mpc
    pair_production: CMB       # CMB, IRB, CMB_IRB or null
    max_steps: null
    data_dir: null

Energies are given in EeV and lengths in Mpc; SimulationConfig stores them
in SI units.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

import yaml

from uhecr_mc import units
from uhecr_mc.core.module import ModuleList
from uhecr_mc.core.particle_id import nucleus_id, particle_id_from_name
from uhecr_mc.core.particle_mass import NuclearMassTable
from uhecr_mc.core.source import MonoenergeticSource
from uhecr_mc.errors import ConfigurationError
from uhecr_mc.modules.break_condition import MaximumTrajectoryLength, MinimumEnergy
from uhecr_mc.modules.electron_pair_production import PHOTON_FIELDS, ElectronPairProduction
from uhecr_mc.modules.propagation import SimplePropagation

logger = logging.getLogger(__name__)

# Keys given in EeV and Mpc in the YAML file
_ENERGY_KEYS = ('energy', 'min_energy')
_LENGTH_KEYS = ('max_trajectory_length', 'min_step', 'max_step')

__all__ = ["SimulationConfig", "build_module_list", "build_source"]


@dataclass
class SimulationConfig:
    """Parameters of one propagation run (SI units)."""

    data_dir: Optional[str] = None
    seed: Optional[int] = None
    n_candidates: int = 1000
    particle_id: int = 1000010010
    energy: float = 100 * units.EeV
    max_trajectory_length: float = 1000 * units.Mpc
    min_energy: float = 1 * units.EeV
    min_step: float = 1 * units.kpc
    max_step: float = 10 * units.Mpc
    pair_production: Optional[str] = 'CMB'
    max_steps: Optional[int] = None

    def __post_init__(self):
        self.validate()

    def validate(self):
        """
        Check value ranges.

        Raises:
            ConfigurationError: Invalid value
        """
        if self.n_candidates < 1:
            raise ConfigurationError(f"n_candidates must be positive, got {self.n_candidates}")
        if self.energy <= 0:
            raise ConfigurationError(f"energy must be positive, got {self.energy}")
        if self.min_energy < 0:
            raise ConfigurationError(f"min_energy must be non-negative, got {self.min_energy}")
        if self.max_trajectory_length <= 0:
            raise ConfigurationError("max_trajectory_length must be positive")
        if self.min_step < 0 or self.max_step < self.min_step:
            raise ConfigurationError(f"Invalid step range: [{self.min_step}, {self.max_step}]")
        if self.pair_production is not None and self.pair_production not in PHOTON_FIELDS:
            raise ConfigurationError(f"Unknown pair_production field '{self.pair_production}'. "
                                     f"Available: {PHOTON_FIELDS}")
        if self.max_steps is not None and self.max_steps < 1:
            raise ConfigurationError(f"max_steps must be positive, got {self.max_steps}")

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationConfig":
        """Build from a mapping in YAML units (EeV, Mpc)."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        values = dict(data)
        pid = values.get('particle_id')
        if isinstance(pid, str):
            values['particle_id'] = particle_id_from_name(pid)

        try:
            for key in _ENERGY_KEYS:
                if key in values:
                    values[key] = float(values[key]) * units.EeV
            for key in _LENGTH_KEYS:
                if key in values:
                    values[key] = float(values[key]) * units.Mpc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid numeric configuration value: {exc}") from exc

        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SimulationConfig":
        """
        Load configuration from a YAML file.

        Raises:
            ConfigurationError: Missing file, invalid YAML or invalid values
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")

        logger.debug("Loaded configuration %s", path)
        return cls.from_dict(data)


def build_module_list(config: SimulationConfig) -> ModuleList:
    """
    Wire the module chain for a configuration.

    Order: propagation, interactions, break conditions.
    """
    chain = ModuleList(max_steps=config.max_steps)
    chain.add(SimplePropagation(config.min_step, config.max_step))
    if config.pair_production is not None:
        chain.add(ElectronPairProduction(config.pair_production, data_dir=config.data_dir))
    chain.add(MaximumTrajectoryLength(config.max_trajectory_length))
    chain.add(MinimumEnergy(config.min_energy))
    return chain


def build_source(config: SimulationConfig) -> MonoenergeticSource:
    """Point source for the configured primary; loads the mass table for heavy nuclei."""
    mass_table = None
    if config.particle_id not in (nucleus_id(1, 1), nucleus_id(1, 0)):
        mass_table = NuclearMassTable.load_default(config.data_dir)
    return MonoenergeticSource(config.particle_id, config.energy, mass_table=mass_table)
