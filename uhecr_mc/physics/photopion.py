"""
Nucleon-photon (photo-pion) cross-section kernels.

Reimplements the SOPHIA parameterization of the total photo-hadronic cross
section: nine Breit-Wigner baryon resonances, the direct single and double
pion channels, fragmentation and the multipion/diffractive continuum.
Naming and working units follow SOPHIA to ease comparisons:

    eps_prime  photon energy in the nucleon rest frame [GeV]
    s          squared centre-of-mass energy [GeV^2]
    sigma      cross section [microbarn]

References:
    - Mücke et al., Comput. Phys. Commun. 124, 290 (2000) (SOPHIA)
    - Rachen, PhD thesis, Univ. Bonn (1996)
"""

import numba
import numpy as np

from uhecr_mc import units

MASS_PROTON_GEV = units.mass_proton * units.c_squared / units.GeV
MASS_NEUTRON_GEV = units.mass_neutron * units.c_squared / units.GeV

# Lowest s for pion production in a head-on collision [GeV^2]
S_MIN = 1.1646

# Resonance parameters: first 9 entries proton, last 9 neutron
AMRES = np.array([1.231, 1.440, 1.515, 1.525, 1.675, 1.680, 1.690, 1.895, 1.950,
                  1.231, 1.440, 1.515, 1.525, 1.675, 1.675, 1.690, 1.895, 1.950])
BGAMMA = np.array([5.6, 0.5, 4.6, 2.5, 1.0, 2.1, 2.0, 0.2, 1.0,
                   6.1, 0.3, 4.0, 2.5, 0.0, 0.2, 2.0, 0.2, 1.0])
WIDTH = np.array([0.11, 0.35, 0.11, 0.1, 0.16, 0.125, 0.29, 0.35, 0.3,
                  0.11, 0.35, 0.11, 0.1, 0.16, 0.150, 0.29, 0.35, 0.3])
RATIOJ = np.array([1., 0.5, 1., 0.5, 0.5, 1.5, 1., 1.5, 2.,
                   1., 0.5, 1., 0.5, 0.5, 1.5, 1., 1.5, 2.])
# squared nucleon masses: [neutron, proton]
AM2 = np.array([0.882792, 0.880351])


@numba.njit(cache=True)
def nucleon_mass_gev(on_proton: bool) -> float:
    if on_proton:
        return MASS_PROTON_GEV
    return MASS_NEUTRON_GEV


@numba.njit(cache=True)
def Pl(x: float, xth: float, xmax: float, alpha: float) -> float:
    """
    Power-law threshold shape of the direct pion channels.

    Zero below xth, peaks at xmax, falls as x^-alpha above.
    """
    if xth > x:
        return 0.0
    a = alpha * xmax / xth
    prod1 = ((x - xth) / (xmax - xth))**(a - alpha)
    prod2 = (x / xmax)**(-a)
    return prod1 * prod2


@numba.njit(cache=True)
def Ef(x: float, th: float, w: float) -> float:
    """Linear turn-on window: 0 below th, 1 above th + w."""
    wth = w + th
    if x <= th:
        return 0.0
    elif x < wth:
        return (x - th) / w
    return 1.0


@numba.njit(cache=True)
def breit_wigner(sigma_0: float, gamma: float, dmm: float,
                 eps_prime: float, on_proton: bool) -> float:
    """
    Breit-Wigner cross section of one resonance.

    Parameters:
        sigma_0: Peak normalization [microbarn]
        gamma: Resonance width [GeV]
        dmm: Resonance mass [GeV]
        eps_prime: Rest-frame photon energy [GeV]
        on_proton: Proton (True) or neutron (False) target

    Returns:
        Cross section [microbarn]
    """
    m = nucleon_mass_gev(on_proton)
    s = m * m + 2.0 * m * eps_prime
    if s < S_MIN:
        return 0.0
    gam2s = gamma * gamma * s
    return sigma_0 * (s / eps_prime / eps_prime) * gam2s / ((s - dmm * dmm)**2 + gam2s)


@numba.njit(cache=True)
def cross_section(eps_prime: float, on_proton: bool) -> float:
    """
    Total nucleon-photon cross section [microbarn].

    Parameters:
        eps_prime: Photon energy in the nucleon rest frame [GeV]
        on_proton: Proton (True) or neutron (False) target
    """
    if eps_prime <= 0.0:
        return 0.0

    m = nucleon_mass_gev(on_proton)
    s = m * m + 2.0 * m * eps_prime
    if s < S_MIN:
        return 0.0
    idx = 0 if on_proton else 9
    am2 = AM2[1] if on_proton else AM2[0]

    # resonances and direct channel (below 10 GeV only)
    cross_res = 0.0
    cross_dir = 0.0
    if eps_prime <= 10.0:
        for i in range(9):
            sig0 = 4.893089117 / am2 * RATIOJ[i + idx] * BGAMMA[i + idx]
            bw = breit_wigner(sig0, WIDTH[i + idx], AMRES[i + idx], eps_prime, on_proton)
            if i == 0:
                cross_res += bw * Ef(eps_prime, 0.152, 0.17)
            else:
                cross_res += bw * Ef(eps_prime, 0.152, 0.38)

        # single pion production
        cross_dir1 = 92.7 * Pl(eps_prime, 0.152, 0.25, 2.0)
        if 0.1 < eps_prime < 0.6:
            cross_dir1 += (40.0 * np.exp(-(eps_prime - 0.29)**2 / 0.002)
                           - 15.0 * np.exp(-(eps_prime - 0.37)**2 / 0.002))
        # double pion production
        cross_dir2 = 37.7 * Pl(eps_prime, 0.4, 0.6, 2.0)
        cross_dir = cross_dir1 + cross_dir2

    # fragmentation
    if on_proton:
        cross_frag2 = 80.3 * Ef(eps_prime, 0.5, 0.1) * s**(-0.34)
    else:
        cross_frag2 = 60.2 * Ef(eps_prime, 0.5, 0.1) * s**(-0.34)

    # multipion production and diffractive scattering
    cs_multidiff = 0.0
    if eps_prime > 0.85:
        ss1 = (eps_prime - 0.85) / 0.69
        if on_proton:
            ss2 = 29.3 * s**(-0.34) + 59.3 * s**0.095
        else:
            ss2 = 26.4 * s**(-0.34) + 59.3 * s**0.095
        cs_multidiff = (1.0 - np.exp(-ss1)) * ss2
        cs_multi = 0.89 * cs_multidiff
        cross_diffr = 0.11 * cs_multidiff

        ss1 = (eps_prime - 0.85)**0.75 / 0.64
        ss2 = 74.1 * eps_prime**(-0.44) + 62.0 * s**0.08
        cs_tmp = 0.96 * (1.0 - np.exp(-ss1)) * ss2
        cross_diffr1 = 0.14 * cs_tmp
        cross_diffr2 = 0.013 * cs_tmp

        cs_delta = cross_frag2 - (cross_diffr1 + cross_diffr2 - cross_diffr)
        if cs_delta < 0.0:
            cross_frag2 = 0.0
            cs_multi += cs_delta
        else:
            cross_frag2 = cs_delta

        cross_diffr = cross_diffr1 + cross_diffr2
        cs_multidiff = cs_multi + cross_diffr

    return cross_res + cross_dir + cs_multidiff + cross_frag2


@numba.njit(cache=True)
def functs(s: float, on_proton: bool) -> float:
    """
    Invariant (s - m^2) * sigma(s) [GeV^2 microbarn].

    Parameters:
        s: Squared centre-of-mass energy [GeV^2]
        on_proton: Proton (True) or neutron (False) target
    """
    m = nucleon_mass_gev(on_proton)
    factor = s - m * m
    eps_prime = factor / 2.0 / m
    return factor * cross_section(eps_prime, on_proton)


@numba.njit(cache=True)
def functs_integral_table(x_grid: np.ndarray, on_proton: bool,
                          nodes: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """
    Cumulative integral of functs from S_MIN to S_MIN + x.

    Each grid interval is integrated with Gauss-Legendre quadrature.

    Parameters:
        x_grid: Increasing offsets s - S_MIN [GeV^2], starting at 0
        on_proton: Proton (True) or neutron (False) target
        nodes: Gauss-Legendre nodes on [-1, 1]
        weights: Gauss-Legendre weights

    Returns:
        Cumulative integral at each grid point [GeV^4 microbarn]
    """
    n = len(x_grid)
    table = np.zeros(n)
    for k in range(1, n):
        a = S_MIN + x_grid[k - 1]
        b = S_MIN + x_grid[k]
        half = 0.5 * (b - a)
        mid = 0.5 * (a + b)
        acc = 0.0
        for j in range(len(nodes)):
            acc += weights[j] * functs(mid + half * nodes[j], on_proton)
        table[k] = table[k - 1] + half * acc
    return table


# ============================================================================
# Example usage
# ============================================================================

if __name__ == "__main__":
    print("Photo-pion cross section (proton target):")
    for eps in [0.15, 0.2, 0.3, 0.5, 1.0, 10.0, 100.0]:
        print(f"  eps' = {eps:7.2f} GeV: sigma = {cross_section(eps, True):8.2f} mubarn")
