"""
Units and physical constants.

All quantities are stored in SI units internally (J, m, s, kg, K).
Multiply by a unit to convert into internal units, divide to convert out:

    energy = 10 * EeV
    print(energy / EeV)
"""

import numpy as np

# SI base
meter = 1.0
second = 1.0
kilogram = 1.0
kelvin = 1.0
joule = 1.0
coulomb = 1.0
volt = 1.0

# Length
centimeter = 0.01 * meter
kilometer = 1e3 * meter
au = 149597870700.0 * meter
parsec = 3.0856775807e16 * meter
kpc = 1e3 * parsec
Mpc = 1e6 * parsec
Gpc = 1e9 * parsec

# Fundamental constants (CODATA 2018)
eplus = 1.602176634e-19 * coulomb
c_light = 2.99792458e8 * meter / second
c_squared = c_light * c_light
h_planck = 6.62607015e-34 * joule * second
h_bar = h_planck / (2.0 * np.pi)
k_boltzmann = 1.380649e-23 * joule / kelvin
alpha_finestructure = 7.2973525693e-3
r_electron = 2.8179403262e-15 * meter
barn = 1e-28 * meter**2
mubarn = 1e-6 * barn

# Energy
eV = eplus * volt
keV = 1e3 * eV
MeV = 1e6 * eV
GeV = 1e9 * eV
TeV = 1e12 * eV
PeV = 1e15 * eV
EeV = 1e18 * eV
ZeV = 1e21 * eV

# Masses
amu = 1.66053906660e-27 * kilogram
mass_proton = 1.67262192369e-27 * kilogram
mass_neutron = 1.67492749804e-27 * kilogram
mass_electron = 9.1093837015e-31 * kilogram

# Riemann zeta(3), used for blackbody number densities
zeta3 = 1.2020569031595942
