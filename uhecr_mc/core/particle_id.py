"""
Particle identity codes.

Nuclei use the PDG 2006 ion convention:

    id = 1000000000 + 10000 * Z + 10 * A

Leptons and photons use plain PDG codes (11 electron, -11 positron,
12/14/16 neutrinos, 22 photon).
"""

from typing import Tuple

from uhecr_mc.errors import ConfigurationError

NUCLEUS_OFFSET = 1000000000

ELECTRON = 11
POSITRON = -11
PHOTON = 22
NEUTRINOS = (12, -12, 14, -14, 16, -16)

# Common species by name (A, Z)
PARTICLE_NAMES = {
    'proton': (1, 1),
    'neutron': (1, 0),
    'H-1': (1, 1),
    'deuteron': (2, 1),
    'H-2': (2, 1),
    'He-3': (3, 2),
    'He-4': (4, 2),
    'alpha': (4, 2),
    'Li-7': (7, 3),
    'C-12': (12, 6),
    'N-14': (14, 7),
    'O-16': (16, 8),
    'Ne-20': (20, 10),
    'Mg-24': (24, 12),
    'Si-28': (28, 14),
    'Fe-56': (56, 26),
}


def nucleus_id(A: int, Z: int) -> int:
    """
    Encode a nucleus id.

    Parameters:
        A: Mass number
        Z: Charge number

    Returns:
        Particle id
    """
    if A < 0:
        raise ConfigurationError(f"Mass number cannot be negative: A={A}")
    if Z < 0:
        raise ConfigurationError(f"Charge number cannot be negative: Z={Z}")
    if A < Z:
        raise ConfigurationError(f"Charge number cannot exceed mass number: A={A}, Z={Z}")
    return NUCLEUS_OFFSET + 10000 * Z + 10 * A


def is_nucleus(pid: int) -> bool:
    """True if the id encodes a nucleus (including p and n)."""
    return pid >= NUCLEUS_OFFSET


def charge_number_from_nucleus_id(pid: int) -> int:
    return (pid // 10000) % 1000


def mass_number_from_nucleus_id(pid: int) -> int:
    return (pid // 10) % 1000


def decode(pid: int) -> Tuple[int, int]:
    """Decode a nucleus id into (A, Z)."""
    if not is_nucleus(pid):
        raise ConfigurationError(f"Not a nucleus id: {pid}")
    return mass_number_from_nucleus_id(pid), charge_number_from_nucleus_id(pid)


def charge_number(pid: int) -> int:
    """
    Charge number of any supported particle.

    Nuclei return Z, electrons -1, positrons +1, photons and neutrinos 0.
    """
    if is_nucleus(pid):
        return charge_number_from_nucleus_id(pid)
    if pid == ELECTRON:
        return -1
    if pid == POSITRON:
        return 1
    return 0


def mass_number(pid: int) -> int:
    """Mass number; 0 for leptons and photons."""
    if is_nucleus(pid):
        return mass_number_from_nucleus_id(pid)
    return 0


def particle_id_from_name(name: str) -> int:
    """Parse 'C-12' → 1000060120"""
    if name not in PARTICLE_NAMES:
        raise ConfigurationError(f"Unknown particle '{name}'. "
                                 f"Available: {list(PARTICLE_NAMES.keys())}")
    A, Z = PARTICLE_NAMES[name]
    return nucleus_id(A, Z)
