"""
Electron-pair production as a continuous energy loss.

Charged nuclei lose energy to e+e- pairs on background photons. The loss
is deterministic: a precomputed proton loss-rate table is interpolated at
the energy per nucleon and scaled by Z^2. Photon fields are taken to evolve
like the CMB.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from uhecr_mc import units
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.module import Module
from uhecr_mc.errors import ConfigurationError
from uhecr_mc.physics.loss_table import InteractionLossTable
from uhecr_mc.physics.photon_field import CMB, TabularPhotonField

logger = logging.getLogger(__name__)

# Built-in field combinations
PHOTON_FIELDS = ('CMB', 'IRB', 'CMB_IRB')
IRB_MODEL = 'IRB_Kneiske04'


class ElectronPairProduction(Module):
    """
    Continuous energy loss by electron-pair production.

    Example:
        epp = ElectronPairProduction('CMB')
        custom = ElectronPairProduction.from_files('energy.txt', 'loss-rate.txt')
    """

    def __init__(self, photon_field: Optional[str] = 'CMB',
                 data_dir: Optional[Union[str, Path]] = None,
                 table: Optional[InteractionLossTable] = None,
                 energy_floor: float = 1 * units.eV,
                 limit: float = 0.1):
        """
        Parameters:
            photon_field: 'CMB', 'IRB' or 'CMB_IRB' (ignored when table is given)
            data_dir: Data directory for the IRB model
            table: Precomputed proton loss table (custom configuration)
            energy_floor: Energy is never reduced below this value [J]
            limit: Limit the next step to this fraction of the loss length

        Raises:
            ConfigurationError: Unknown photon field selection
        """
        self.energy_floor = energy_floor
        self.limit = limit

        if table is not None:
            self.photon_field = 'custom'
            self.table = table
        else:
            if photon_field not in PHOTON_FIELDS:
                raise ConfigurationError(f"Unknown photon field '{photon_field}'. "
                                         f"Available: {PHOTON_FIELDS}")
            self.photon_field = photon_field
            self.table = InteractionLossTable.from_photon_fields(
                self._fields(photon_field, data_dir)
            )

        logger.debug("ElectronPairProduction configured with %s (%d table points)",
                     self.photon_field, len(self.table))

    @staticmethod
    def _fields(selection: str, data_dir):
        if selection == 'CMB':
            return [CMB()]
        if selection == 'IRB':
            return [TabularPhotonField(IRB_MODEL, data_dir)]
        return [CMB(), TabularPhotonField(IRB_MODEL, data_dir)]

    @classmethod
    def from_files(cls, energy_path: Union[str, Path], loss_rate_path: Union[str, Path],
                   **kwargs) -> "ElectronPairProduction":
        """Custom configuration from energy [eV] and loss-rate [eV/Mpc] files."""
        table = InteractionLossTable.from_files(energy_path, loss_rate_path)
        return cls(table=table, **kwargs)

    def energy_loss_rate(self, candidate: Candidate) -> float:
        """Current loss rate dE/dx of the candidate [J/m]; 0 for neutral particles."""
        state = candidate.current
        if not state.is_nucleus():
            return 0.0
        Z = state.charge_number
        if Z < 1:
            return 0.0

        A = state.mass_number
        z = candidate.get_redshift()
        energy_per_nucleon = state.energy / A * (1.0 + z)
        rate = self.table.loss_rate(energy_per_nucleon)
        return Z * Z * rate * (1.0 + z)**2

    def process(self, candidate: Candidate) -> None:
        dEdx = self.energy_loss_rate(candidate)
        if dEdx <= 0:
            return

        energy = candidate.current.energy
        dE = dEdx * candidate.get_current_step()
        candidate.current.energy = max(energy - dE, min(energy, self.energy_floor))

        candidate.limit_next_step(self.limit * candidate.current.energy / dEdx)

    def get_description(self) -> str:
        return f"ElectronPairProduction: {self.photon_field}"
