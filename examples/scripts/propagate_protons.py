"""
Proton Propagation - Simple Example

Propagates ultra-high-energy protons from a point source through the CMB
with continuous electron-pair production losses and reports the energy
after a fixed distance.

Expected behaviour for 100 EeV protons over 1 Gpc (pair production only):
    - Energy loss length of order 1 Gpc at 10-100 EeV
    - No candidate below the 1 EeV minimum energy
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from uhecr_mc import units
from uhecr_mc.config import SimulationConfig, build_module_list, build_source
from uhecr_mc.transport.engine import PropagationEngine


def propagate(config: SimulationConfig, parallel: bool = False, n_processes: int = None):
    """
    Run one configuration and summarize the final energies.

    Parameters:
        config: Simulation configuration
        parallel: Use the multiprocess driver
        n_processes: Number of worker processes (default: cpu_count)

    Returns:
        Final energies [EeV]
    """
    print(f"\n{'='*70}")
    print(f"Proton Propagation")
    print(f"{'='*70}")
    print(f"  Particle id: {config.particle_id}")
    print(f"  Energy: {config.energy / units.EeV} EeV")
    print(f"  Distance: {config.max_trajectory_length / units.Mpc} Mpc")
    print(f"  Pair production: {config.pair_production}")
    print(f"  Candidates: {config.n_candidates:,}")
    print(f"{'='*70}\n")

    engine = PropagationEngine(build_module_list(config), seed=config.seed)
    source = build_source(config)

    if parallel:
        stats = engine.run_parallel(source, config.n_candidates, n_processes=n_processes)
    else:
        stats = engine.run(source, config.n_candidates)

    energies = engine.get_final_energies() / units.EeV

    print(f"\n{'='*70}")
    print(f"Results:")
    print(f"{'='*70}")
    print(f"  Mean final energy: {np.mean(energies):.2f} EeV")
    print(f"  Min / max: {np.min(energies):.2f} / {np.max(energies):.2f} EeV")
    print(f"  Total steps: {stats['total_steps']:,}")
    for reason, count in stats['rejected'].items():
        print(f"  {reason}: {count}")
    print(f"{'='*70}\n")

    return energies


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument('config', nargs='?',
                        default=Path(__file__).parent.parent / 'config' / 'proton_cmb.yaml')
    parser.add_argument('--parallel', action='store_true')
    parser.add_argument('-j', '--processes', type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    propagate(SimulationConfig.from_yaml(args.config), args.parallel, args.processes)
