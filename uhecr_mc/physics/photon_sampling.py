"""
Monte Carlo sampling of the background photon energy in nucleon-photon
interactions.

Reimplementation of SOPHIA's sample_eps. Units follow SOPHIA internally
(photon energy eps in eV, nucleon energy in GeV, s in GeV^2, densities in
1/(eV cm^3)); sample_eps converts to and from SI (J) at the boundary.

References:
    - Mücke et al., Comput. Phys. Commun. 124, 290 (2000) (SOPHIA)
"""

import logging
from collections import OrderedDict
from pathlib import Path
from typing import Optional, Union

import numpy as np
from scipy.optimize import minimize_scalar

from uhecr_mc import units
from uhecr_mc.errors import ConfigurationError
from uhecr_mc.physics import photopion
from uhecr_mc.physics.photon_field import PhotonField, TabularPhotonField

logger = logging.getLogger(__name__)

CMB_TEMPERATURE = 2.73  # K

# 1 / (pi^2 (hbar c)^3) with hbar c in eV cm; SOPHIA's blackbody prefactor
_HBAR_C_EV_CM = units.h_bar * units.c_light / units.eV / units.centimeter
_BLACKBODY_PREFACTOR = 1.0 / (np.pi**2 * _HBAR_C_EV_CM**3)

_KT_CMB_EV = units.k_boltzmann * CMB_TEMPERATURE / units.eV


class PhotonFieldSampling:
    """
    Samples the energy of the background photon a nucleon interacts with.

    Background selection (SOPHIA convention):
        1: CMB (analytic blackbody, T = 2.73 K)
        2: IRB_Kneiske04 (tabulated; injected or loaded from data_dir)

    Example:
        sampler = PhotonFieldSampling(bg_flag=1, seed=42)
        eps = sampler.sample_eps(True, 100 * EeV, 0.0)   # [J]
    """

    SUPPORTED_FLAGS = (1, 2)

    # log grid of s - S_MIN [GeV^2] for the cumulative functs integral
    _X_GRID = np.concatenate(([0.0], np.logspace(-7, 12, 1901)))

    # rejection sampling controls
    max_attempts = 1_000_000
    batch_size = 64
    envelope_headroom = 1.05
    envelope_grid_points = 200
    envelope_cache_size = 256

    def __init__(self, bg_flag: int = 1, photon_field: Optional[PhotonField] = None,
                 data_dir: Optional[Union[str, Path]] = None,
                 seed: Optional[int] = None):
        """
        Initialize the sampler.

        Parameters:
            bg_flag: Background field selection (1: CMB, 2: IRB_Kneiske04)
            photon_field: Tabulated field to use with bg_flag=2
            data_dir: Data directory for loading IRB_Kneiske04
            seed: Seed of the default random generator

        Raises:
            ConfigurationError: Unsupported flag, or field given for the CMB
        """
        if bg_flag not in self.SUPPORTED_FLAGS:
            raise ConfigurationError(f"Unsupported background flag {bg_flag}. "
                                     f"Available: {self.SUPPORTED_FLAGS}")
        self.bg_flag = bg_flag

        if bg_flag == 1:
            if photon_field is not None:
                raise ConfigurationError("bg_flag=1 uses the analytic CMB; "
                                         "do not pass a photon field")
            self.photon_field = None
        else:
            if photon_field is None:
                photon_field = TabularPhotonField("IRB_Kneiske04", data_dir)
            if not hasattr(photon_field, "get_minimum_photon_energy"):
                raise ConfigurationError("bg_flag=2 needs a field with a finite energy support")
            self.photon_field = photon_field

        self.rng = np.random.default_rng(seed)

        nodes, weights = np.polynomial.legendre.leggauss(8)
        self._functs_integral = {
            on_proton: photopion.functs_integral_table(self._X_GRID, on_proton, nodes, weights)
            for on_proton in (True, False)
        }
        self._envelope_cache = OrderedDict()

    # ------------------------------------------------------------------
    # SOPHIA building blocks
    # ------------------------------------------------------------------

    def crossection(self, eps_prime: float, on_proton: bool) -> float:
        """Nucleon-photon cross section [microbarn] at rest-frame energy [GeV]."""
        return photopion.cross_section(eps_prime, on_proton)

    def functs(self, s: float, on_proton: bool) -> float:
        """(s - m^2) * sigma [GeV^2 microbarn] at s [GeV^2]."""
        return photopion.functs(s, on_proton)

    def get_photon_density(self, eps, z_in: float = 0.0):
        """
        Physical spectral photon density dn/deps [1/(eV cm^3)].

        Parameters:
            eps: Photon energy [eV] (scalar or array)
            z_in: Redshift
        """
        eps = np.asarray(eps, dtype=np.float64)

        if self.bg_flag == 1:
            kT = _KT_CMB_EV * (1.0 + z_in)
            with np.errstate(over='ignore', divide='ignore', invalid='ignore'):
                density = _BLACKBODY_PREFACTOR * eps * eps / np.expm1(eps / kT)
            density = np.where(eps > 0, np.nan_to_num(density, nan=0.0, posinf=0.0), 0.0)
        else:
            # E dn/dE [1/m^3] comoving -> dn/deps [1/(eV cm^3)] physical
            e_dn_de = self.photon_field.get_photon_density(eps * units.eV, z_in)
            with np.errstate(divide='ignore', invalid='ignore'):
                density = np.where(eps > 0, e_dn_de / eps * 1e-6, 0.0)
            density = density * (1.0 + z_in)**3

        if density.ndim == 0:
            return float(density)
        return density

    def prob_eps(self, eps, on_proton: bool, E_in: float, z_in: float):
        """
        Unnormalized probability of interacting with a photon of energy eps.

        Parameters:
            eps: Photon energy [eV] (scalar or array)
            on_proton: Proton (True) or neutron (False)
            E_in: Nucleon energy [GeV]
            z_in: Redshift

        Returns:
            n(eps)/eps^2 * integral(functs, S_MIN, s_max) / (8 beta E^2)
        """
        eps = np.asarray(eps, dtype=np.float64)
        mass = photopion.nucleon_mass_gev(on_proton)
        gamma = E_in / mass
        if gamma <= 1.0:
            result = np.zeros_like(eps)
            return float(result) if result.ndim == 0 else result
        beta = np.sqrt(1.0 - 1.0 / gamma / gamma)

        density = np.asarray(self.get_photon_density(eps, z_in))
        s_max = mass * mass + 2.0 * eps * E_in * (1.0 + beta) / 1e9
        s_integral = np.interp(s_max - photopion.S_MIN, self._X_GRID,
                               self._functs_integral[bool(on_proton)])

        with np.errstate(divide='ignore', invalid='ignore'):
            prob = density / eps / eps * s_integral / 8.0 / beta / E_in / E_in * 1e18 * 1e-30
        prob = np.where((s_max > photopion.S_MIN) & (density > 0), prob, 0.0)

        if prob.ndim == 0:
            return float(prob)
        return prob

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def _eps_bounds(self, on_proton: bool, E_in: float, z_in: float):
        """Sampling interval [eV]: pion threshold up to the field's support."""
        mass = photopion.nucleon_mass_gev(on_proton)
        Pp = np.sqrt(max(E_in * E_in - mass * mass, 0.0))
        eps_threshold = 1e9 * (photopion.S_MIN - mass * mass) / 2.0 / (E_in + Pp)

        if self.bg_flag == 1:
            kT = _KT_CMB_EV * (1.0 + z_in)
            field_min, field_max = 1e-4 * kT, 50.0 * kT
        else:
            field_min = self.photon_field.get_minimum_photon_energy() / units.eV
            field_max = self.photon_field.get_maximum_photon_energy() / units.eV

        return max(eps_threshold, field_min), field_max

    def _weight(self, eps, on_proton: bool, E_in: float, z_in: float):
        # proposals are log-uniform, so the target density carries a factor eps
        return eps * self.prob_eps(eps, on_proton, E_in, z_in)

    def _envelope(self, on_proton: bool, E_in: float, z_in: float,
                  eps_lo: float, eps_hi: float) -> float:
        key = (bool(on_proton), E_in, z_in)
        if key in self._envelope_cache:
            self._envelope_cache.move_to_end(key)
            return self._envelope_cache[key]

        eps_grid = np.geomspace(eps_lo, eps_hi, self.envelope_grid_points)
        w_grid = self._weight(eps_grid, on_proton, E_in, z_in)
        i_max = int(np.argmax(w_grid))
        w_max = float(w_grid[i_max])

        if w_max > 0:
            lo = np.log(eps_grid[max(i_max - 1, 0)])
            hi = np.log(eps_grid[min(i_max + 1, len(eps_grid) - 1)])
            if hi > lo:
                res = minimize_scalar(
                    lambda t: -self._weight(np.exp(t), on_proton, E_in, z_in),
                    bounds=(lo, hi), method='bounded'
                )
                w_max = max(w_max, -float(res.fun))

        envelope = w_max * self.envelope_headroom
        logger.debug("Envelope for E=%.3e GeV, z=%.3f, proton=%s: %.4e",
                     E_in, z_in, on_proton, envelope)

        self._envelope_cache[key] = envelope
        if len(self._envelope_cache) > self.envelope_cache_size:
            self._envelope_cache.popitem(last=False)
        return envelope

    def sample_eps(self, on_proton: bool, E_in: float, z_in: float,
                   rng: Optional[np.random.Generator] = None) -> float:
        """
        Sample the energy of the interacting background photon.

        Parameters:
            on_proton: Proton (True) or neutron (False)
            E_in: Nucleon energy [J]
            z_in: Redshift
            rng: Random generator (defaults to the sampler's own)

        Returns:
            Photon energy [J]; 0 if no photon can interact
        """
        rng = self.rng if rng is None else rng
        E_gev = E_in / units.GeV

        mass = photopion.nucleon_mass_gev(on_proton)
        if E_gev <= mass:
            return 0.0

        eps_lo, eps_hi = self._eps_bounds(on_proton, E_gev, z_in)
        if eps_lo >= eps_hi:
            return 0.0

        envelope = self._envelope(on_proton, E_gev, z_in, eps_lo, eps_hi)
        if envelope <= 0:
            return 0.0

        log_ratio = np.log(eps_hi / eps_lo)
        attempts = 0
        while attempts < self.max_attempts:
            eps = eps_lo * np.exp(rng.random(self.batch_size) * log_ratio)
            w = self._weight(eps, on_proton, E_gev, z_in)

            if np.any(w > envelope):
                logger.warning("Envelope exceeded in sample_eps (E=%.3e GeV, z=%.3f): "
                               "%.4e > %.4e", E_gev, z_in, float(np.max(w)), envelope)

            accepted = np.flatnonzero(rng.random(self.batch_size) * envelope < w)
            if accepted.size:
                return float(eps[accepted[0]]) * units.eV
            attempts += self.batch_size

        logger.error("No photon accepted after %d attempts in sample_eps "
                     "(E=%.3e GeV, z=%.3f); check the photon field's energy range",
                     attempts, E_gev, z_in)
        return 0.0
