"""
Background photon fields.

A photon field returns the comoving spectral photon density

    E dn/dE  [1/m^3]

as a function of photon energy E [J] and redshift z. Multiply by (1+z)^3
for the physical density of tabulated fields.

Variants:
    - TabularPhotonField: interpolated from data files
      (<name>_photonEnergy.txt, <name>_photonDensity.txt, optional
      <name>_redshift.txt)
    - BlackbodyPhotonField: Planck spectrum at fixed temperature (CMB)

References:
    - Kneiske et al., A&A 413, 807 (2004)
    - Gilmore et al., MNRAS 422, 3189 (2012)
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import numpy as np
from scipy.integrate import trapezoid

from uhecr_mc import units
from uhecr_mc.errors import ConfigurationError
from uhecr_mc.io.tables import get_data_path, is_strictly_increasing, load_grid

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]

# Named tabulated datasets and whether they come with a redshift grid
TABULATED_FIELDS = {
    'IRB_Kneiske04': True,
    'IRB_Stecker05': True,
    'IRB_Franceschini08': True,
    'IRB_Finke10': True,
    'IRB_Dominguez11': True,
    'IRB_Gilmore12': True,
    'IRB_Stecker16_upper': True,
    'IRB_Stecker16_lower': True,
}


class PhotonField(ABC):
    """Abstract photon field."""

    def __init__(self, field_name: str = "AbstractPhotonField",
                 is_redshift_dependent: bool = False):
        self.field_name = field_name
        self.is_redshift_dependent = is_redshift_dependent

    @abstractmethod
    def get_photon_density(self, e_photon: ArrayLike, z: float = 0.0) -> ArrayLike:
        """
        Comoving spectral photon density.

        Parameters:
            e_photon: Photon energy [J] (scalar or array)
            z: Redshift

        Returns:
            E dn/dE [1/m^3], zero outside the field's support
        """

    def get_redshift_scaling(self, z: float) -> float:
        """Overall comoving density scaling relative to z = 0."""
        return 1.0

    def has_redshift_dependence(self) -> bool:
        return self.is_redshift_dependent

    def get_field_name(self) -> str:
        return self.field_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.field_name}')"


class TabularPhotonField(PhotonField):
    """
    Photon field interpolated from tabulated data.

    Density lookup is linear in log(E) between the bracketing energy grid
    points and linear in z between bracketing redshifts; redshifts outside
    the tabulated range are clamped.
    """

    def __init__(self, field_name: str, data_dir: Optional[Union[str, Path]] = None,
                 is_redshift_dependent: bool = True):
        """
        Load a tabulated photon field.

        Parameters:
            field_name: Dataset name, prefix of the data files
            data_dir: Directory with the data files (see get_data_path)
            is_redshift_dependent: Use the redshift grid if present

        Raises:
            ConfigurationError: Missing files or inconsistent grids
        """
        super().__init__(field_name, is_redshift_dependent)

        energy_file = get_data_path(f"{field_name}_photonEnergy.txt", data_dir)
        density_file = get_data_path(f"{field_name}_photonDensity.txt", data_dir)
        redshift_file = get_data_path(f"{field_name}_redshift.txt", data_dir)

        photon_energies = load_grid(energy_file)
        photon_density = load_grid(density_file)

        redshifts = None
        if self.is_redshift_dependent:
            if redshift_file.exists() or redshift_file.with_suffix('.npy').exists():
                redshifts = load_grid(redshift_file)
            else:
                logger.debug("No redshift grid for %s, treating as redshift-independent",
                             field_name)
                self.is_redshift_dependent = False

        self._init_arrays(photon_energies, photon_density, redshifts)

    @classmethod
    def from_arrays(cls, field_name: str, photon_energies: np.ndarray,
                    photon_density: np.ndarray,
                    redshifts: Optional[np.ndarray] = None) -> "TabularPhotonField":
        """Build a field from in-memory grids (density flattened energy-major)."""
        field = cls.__new__(cls)
        PhotonField.__init__(field, field_name, redshifts is not None)
        field._init_arrays(np.array(photon_energies, dtype=np.float64),
                           np.array(photon_density, dtype=np.float64),
                           None if redshifts is None else np.array(redshifts, dtype=np.float64))
        return field

    def _init_arrays(self, photon_energies: np.ndarray, photon_density: np.ndarray,
                     redshifts: Optional[np.ndarray]):
        if len(photon_energies) < 2:
            raise ConfigurationError(f"{self.field_name}: need at least two energy points")
        if not is_strictly_increasing(photon_energies):
            raise ConfigurationError(f"{self.field_name}: photon energies must be strictly increasing")
        if photon_energies[0] <= 0:
            raise ConfigurationError(f"{self.field_name}: photon energies must be positive")
        if np.any(photon_density < 0):
            raise ConfigurationError(f"{self.field_name}: photon densities must be non-negative")

        n_e = len(photon_energies)
        if redshifts is not None:
            if not is_strictly_increasing(redshifts):
                raise ConfigurationError(f"{self.field_name}: redshifts must be strictly increasing")
            n_z = len(redshifts)
            if len(photon_density) != n_e * n_z:
                raise ConfigurationError(
                    f"{self.field_name}: density grid has {len(photon_density)} values, "
                    f"expected {n_e} x {n_z} = {n_e * n_z}"
                )
            density = photon_density.reshape(n_e, n_z)
        else:
            if len(photon_density) != n_e:
                raise ConfigurationError(
                    f"{self.field_name}: density grid has {len(photon_density)} values, "
                    f"expected {n_e}"
                )
            density = photon_density.reshape(n_e, 1)

        self.photon_energies = photon_energies
        self.photon_density = density
        self.redshifts = redshifts
        self._log_energies = np.log(photon_energies)

        # read-only after construction
        for arr in (self.photon_energies, self.photon_density, self._log_energies):
            arr.setflags(write=False)

        self.redshift_scalings = None
        if redshifts is not None:
            self._init_redshift_scaling()

    def _init_redshift_scaling(self):
        """Density integral over log10(E) per tabulated redshift, relative to the first."""
        log10_e = np.log10(self.photon_energies)
        integrals = trapezoid(self.photon_density, x=log10_e, axis=0)
        n0 = integrals[0]
        if n0 <= 0:
            raise ConfigurationError(
                f"{self.field_name}: zero photon density at the first tabulated redshift"
            )
        self.redshift_scalings = integrals / n0
        self.redshift_scalings.setflags(write=False)

    def _density_column(self, z: float) -> np.ndarray:
        if self.redshifts is None or not self.is_redshift_dependent:
            return self.photon_density[:, 0]

        zs = self.redshifts
        if len(zs) == 1:
            return self.photon_density[:, 0]

        z = min(max(z, zs[0]), zs[-1])
        j = int(np.searchsorted(zs, z, side='right')) - 1
        j = min(max(j, 0), len(zs) - 2)
        w = (z - zs[j]) / (zs[j + 1] - zs[j])
        return (1.0 - w) * self.photon_density[:, j] + w * self.photon_density[:, j + 1]

    def get_photon_density(self, e_photon: ArrayLike, z: float = 0.0) -> ArrayLike:
        e = np.asarray(e_photon, dtype=np.float64)
        inside = (e >= self.photon_energies[0]) & (e <= self.photon_energies[-1])

        with np.errstate(divide='ignore', invalid='ignore'):
            log_e = np.log(np.where(inside, e, self.photon_energies[0]))

        density = np.interp(log_e, self._log_energies, self._density_column(z))
        density = np.where(inside, density, 0.0)

        if density.ndim == 0:
            return float(density)
        return density

    def get_redshift_scaling(self, z: float) -> float:
        if not self.is_redshift_dependent or self.redshift_scalings is None:
            return 1.0
        return float(np.interp(z, self.redshifts, self.redshift_scalings))

    def get_minimum_photon_energy(self) -> float:
        return float(self.photon_energies[0])

    def get_maximum_photon_energy(self) -> float:
        return float(self.photon_energies[-1])


class BlackbodyPhotonField(PhotonField):
    """Planck spectrum at a fixed temperature, scaled by (1+z)^3."""

    def __init__(self, field_name: str, blackbody_temperature: float):
        """
        Parameters:
            field_name: Field name
            blackbody_temperature: Temperature [K]
        """
        super().__init__(field_name, False)
        self.blackbody_temperature = blackbody_temperature

    def get_photon_density(self, e_photon: ArrayLike, z: float = 0.0) -> ArrayLike:
        e = np.asarray(e_photon, dtype=np.float64)
        kT = units.k_boltzmann * self.blackbody_temperature

        with np.errstate(over='ignore', divide='ignore', invalid='ignore'):
            density = 8.0 * np.pi * (e / (units.h_planck * units.c_light))**3 / np.expm1(e / kT)
        density = np.where(e > 0, density, 0.0) * (1.0 + z)**3
        density = np.nan_to_num(density, nan=0.0, posinf=0.0)

        if density.ndim == 0:
            return float(density)
        return density

    def get_total_density(self, z: float = 0.0) -> float:
        """Analytic photon number density 16 pi zeta(3) (kT/hc)^3 [1/m^3]."""
        kT = units.k_boltzmann * self.blackbody_temperature
        return 16.0 * np.pi * units.zeta3 * (kT / (units.h_planck * units.c_light))**3 * (1.0 + z)**3

    def get_minimum_photon_energy(self) -> float:
        return 1e-4 * units.k_boltzmann * self.blackbody_temperature

    def get_maximum_photon_energy(self) -> float:
        return 50.0 * units.k_boltzmann * self.blackbody_temperature


class CMB(BlackbodyPhotonField):
    """Cosmic microwave background, T = 2.73 K."""

    def __init__(self):
        super().__init__("CMB", 2.73)


def photon_field_from_name(name: str, data_dir: Optional[Union[str, Path]] = None) -> PhotonField:
    """
    Create a named photon field.

    Parameters:
        name: 'CMB' or one of TABULATED_FIELDS
        data_dir: Data directory for tabulated fields

    Raises:
        ConfigurationError: Unknown name
    """
    if name == 'CMB':
        return CMB()
    if name in TABULATED_FIELDS:
        return TabularPhotonField(name, data_dir, TABULATED_FIELDS[name])
    raise ConfigurationError(f"Unknown photon field '{name}'. "
                             f"Available: {['CMB'] + list(TABULATED_FIELDS.keys())}")
