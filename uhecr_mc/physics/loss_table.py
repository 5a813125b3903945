"""
Continuous energy-loss tables.

An InteractionLossTable maps particle energy to an energy-loss rate dE/dx
and is queried by power-law (log-log) interpolation. Queries outside the
table clamp to the edge values.

Tables are either loaded from two aligned files or computed from photon
fields for electron-pair production (Bethe-Heitler) of protons:

    -dE/dx = alpha r_e^2 (m_e c^2)^2 Z^2 * integral_2^inf dk n(k m_e c^2 / 2G) phi(k) / k^2

with the Lorentz factor G and phi(k) from the Chodorowski et al. fit.

References:
    - Blumenthal, Phys. Rev. D 1, 1596 (1970)
    - Chodorowski, Zdziarski & Sikora, ApJ 400, 181 (1992)
"""

import logging
import warnings
from pathlib import Path
from typing import Iterable, Optional, Union

import numba
import numpy as np
from scipy.integrate import quad

from uhecr_mc import units
from uhecr_mc.errors import ConfigurationError, DomainWarning
from uhecr_mc.io.tables import is_strictly_increasing, load_grid
from uhecr_mc.physics.photon_field import PhotonField

logger = logging.getLogger(__name__)

_ME_C2 = units.mass_electron * units.c_squared
_MP_C2 = units.mass_proton * units.c_squared


@numba.njit(fastmath=True, cache=True)
def power_law_interpolate(x_array: np.ndarray, y_array: np.ndarray, x: float) -> float:
    """
    Binary search + power-law interpolation.

    Uses log-log power-law interpolation:
        y(x) = y1 * (x/x1)^a
    where:
        a = log(y2/y1) / log(x2/x1)

    Falls back to linear interpolation when a bracketing value is zero.
    Clamps to the edge values outside the table.

    Parameters:
        x_array: Sorted array of x values
        y_array: Corresponding y values
        x: Point to interpolate

    Returns:
        Interpolated y value
    """
    n = len(x_array)

    # Binary search for interval
    ir = np.searchsorted(x_array, x)

    # Bounds checking
    if ir <= 0:
        return y_array[0]
    elif ir >= n:
        return y_array[-1]

    if y_array[ir] * y_array[ir-1] > 0:
        a = np.log(y_array[ir] / y_array[ir-1]) / \
            np.log(x_array[ir] / x_array[ir-1])
        result = y_array[ir] * (x / x_array[ir])**a
    else:
        t = (x - x_array[ir-1]) / (x_array[ir] - x_array[ir-1])
        result = y_array[ir-1] + t * (y_array[ir] - y_array[ir-1])

    return result


@numba.njit(cache=True)
def chodorowski_phi(kappa: float) -> float:
    """
    Fit of the pair-production energy-loss function phi(kappa).

    Parameters:
        kappa: Photon energy in the nucleus rest frame [m_e c^2]

    Returns:
        phi (zero below the threshold kappa = 2)
    """
    if kappa <= 2.0:
        return 0.0

    if kappa < 25.0:
        c1 = 0.8048
        c2 = 0.1459
        c3 = 1.137e-3
        c4 = -3.879e-6
        k = kappa - 2.0
        return np.pi / 12.0 * k**4 / (1.0 + c1 * k + c2 * k**2 + c3 * k**3 + c4 * k**4)

    d0 = -86.07
    d1 = 50.96
    d2 = -14.45
    d3 = 8.0 / 3.0
    f1 = 2.910
    f2 = 78.35
    f3 = 1837.0
    lk = np.log(kappa)
    num = d0 + d1 * lk + d2 * lk**2 + d3 * lk**3
    den = 1.0 - (f1 / kappa + f2 / kappa**2 + f3 / kappa**3)
    return kappa * num / den


class InteractionLossTable:
    """
    Immutable energy → loss-rate table.

    Example:
        table = InteractionLossTable.from_photon_fields([CMB()])
        dEdx = table.loss_rate(10 * EeV)    # [J/m]
    """

    def __init__(self, energies: np.ndarray, loss_rates: np.ndarray):
        """
        Parameters:
            energies: Strictly increasing energies [J]
            loss_rates: Non-negative loss rates dE/dx [J/m]

        Raises:
            ConfigurationError: Invalid or misaligned grids
        """
        energies = np.array(energies, dtype=np.float64)
        loss_rates = np.array(loss_rates, dtype=np.float64)

        if len(energies) != len(loss_rates):
            raise ConfigurationError(f"Energy and loss-rate grids differ in length: "
                                     f"{len(energies)} vs {len(loss_rates)}")
        if len(energies) < 2:
            raise ConfigurationError("Loss table needs at least two points")
        if not is_strictly_increasing(energies) or energies[0] <= 0:
            raise ConfigurationError("Loss table energies must be positive and strictly increasing")
        if np.any(loss_rates < 0):
            raise ConfigurationError("Loss rates must be non-negative")

        energies.setflags(write=False)
        loss_rates.setflags(write=False)
        self.energies = energies
        self.loss_rates = loss_rates

    @classmethod
    def from_files(cls, energy_path: Union[str, Path], loss_rate_path: Union[str, Path],
                   energy_unit: float = units.eV,
                   loss_rate_unit: float = units.eV / units.Mpc) -> "InteractionLossTable":
        """
        Load a table from two aligned single-column files.

        Parameters:
            energy_path: Energies, in energy_unit (default eV)
            loss_rate_path: Loss rates, in loss_rate_unit (default eV/Mpc)
        """
        energies = load_grid(energy_path) * energy_unit
        loss_rates = load_grid(loss_rate_path) * loss_rate_unit
        logger.debug("Loaded loss table %s / %s (%d points)",
                     energy_path, loss_rate_path, len(energies))
        return cls(energies, loss_rates)

    @classmethod
    def from_photon_fields(cls, fields: Iterable[PhotonField],
                           energies: Optional[np.ndarray] = None) -> "InteractionLossTable":
        """
        Compute the proton pair-production loss rate for a set of fields.

        Parameters:
            fields: Photon fields, summed
            energies: Proton energies [J] (default 1e15 - 1e23 eV, 20/decade)
        """
        if energies is None:
            energies = np.logspace(15, 23, 161) * units.eV
        fields = list(fields)
        if not fields:
            raise ConfigurationError("At least one photon field is required")

        rates = np.array([
            sum(pair_production_loss_rate(field, E) for field in fields)
            for E in energies
        ])
        logger.debug("Computed pair-production loss table for %s",
                     "+".join(f.get_field_name() for f in fields))
        return cls(energies, rates)

    def loss_rate(self, energy):
        """
        Interpolated loss rate dE/dx [J/m].

        Parameters:
            energy: Energy [J] (scalar or array); clamped to the table range
        """
        e = np.asarray(energy, dtype=np.float64)
        if np.any(e < self.energies[0]) or np.any(e > self.energies[-1]):
            warnings.warn("Loss-table query outside tabulated energy range; "
                          "clamping to the table edge", DomainWarning, stacklevel=2)

        if e.ndim == 0:
            return power_law_interpolate(self.energies, self.loss_rates, float(e))

        return np.array([power_law_interpolate(self.energies, self.loss_rates, x)
                         for x in e.ravel()]).reshape(e.shape)

    @property
    def energy_range(self):
        return float(self.energies[0]), float(self.energies[-1])

    def __len__(self) -> int:
        return len(self.energies)


def pair_production_loss_rate(field: PhotonField, energy: float, z: float = 0.0) -> float:
    """
    Pair-production energy-loss rate of a proton [J/m].

    Parameters:
        field: Photon field (needs get_minimum/maximum_photon_energy)
        energy: Proton energy [J]
        z: Redshift at which the field density is evaluated
    """
    gamma = energy / _MP_C2
    eps_min = field.get_minimum_photon_energy()
    eps_max = field.get_maximum_photon_energy()

    # kappa = 2 gamma eps / (m_e c^2), threshold kappa = 2
    log_k_lo = np.log(max(2.0, 2.0 * gamma * eps_min / _ME_C2))
    log_k_hi = np.log(2.0 * gamma * eps_max / _ME_C2)
    if log_k_hi <= log_k_lo:
        return 0.0

    def integrand(log_k):
        kappa = np.exp(log_k)
        eps = kappa * _ME_C2 / (2.0 * gamma)
        # E dn/dE -> dn/dE
        n = field.get_photon_density(eps, z) / eps
        return n * chodorowski_phi(kappa) / kappa

    integral, _ = quad(integrand, log_k_lo, log_k_hi, limit=200)
    return units.alpha_finestructure * units.r_electron**2 * _ME_C2**2 * integral
