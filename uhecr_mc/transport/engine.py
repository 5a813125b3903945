"""
Propagation driver for cosmic-ray candidates.

Integrates:
    - Candidate production from a Source
    - Step-by-step processing through a ModuleList
    - Secondary scheduling (depth-first, after the parent's step)
    - Per-candidate multiprocessing

Each candidate is propagated independently from creation to termination,
so the sequential and the parallel driver produce the same final states for
the same seed.
"""

import logging
import time
from collections import Counter
from typing import Iterable, List, Optional, Union

import numpy as np
from tqdm import tqdm

from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.module import ModuleList
from uhecr_mc.core.source import Source
from uhecr_mc.errors import ConfigurationError

logger = logging.getLogger(__name__)


# Global module chain for each worker process
_worker_modules = None
_worker_recursive = True


def _init_worker(modules: ModuleList, recursive: bool):
    """Initialize worker process with the shared module chain."""
    global _worker_modules, _worker_recursive
    _worker_modules = modules
    _worker_recursive = recursive


def _propagate_worker(work_item):
    """
    Worker function for parallel propagation.

    Uses the module chain shipped once per worker process through the pool
    initializer, so tables are not pickled per candidate.

    Parameters:
        work_item: Tuple of (index, candidate, seed)

    Returns:
        Tuple of (index, propagated candidate, number of steps)
    """
    index, candidate, seed = work_item

    candidate.set_random_generator(np.random.default_rng(seed))
    n_steps = _worker_modules.run(candidate, recursive=_worker_recursive)
    return index, candidate, n_steps


class PropagationEngine:
    """
    Main driver for Monte Carlo propagation.

    Handles:
        - Candidate production
        - Sequential and per-candidate parallel propagation
        - Run statistics (steps, rejection tags)

    Example:
        chain = ModuleList([SimplePropagation(1 * kpc, 10 * Mpc),
                            MaximumTrajectoryLength(100 * Mpc)])
        engine = PropagationEngine(chain, seed=42)
        stats = engine.run(MonoenergeticSource(nucleus_id(1, 1), 10 * EeV), 1000)
    """

    def __init__(self, modules: ModuleList, seed: Optional[int] = None,
                 recursive: bool = True):
        """
        Initialize propagation engine.

        Parameters:
            modules: Module chain applied at every step
            seed: Root seed for the per-candidate random generators
            recursive: Propagate secondaries as well
        """
        self.modules = modules
        self.seed = seed
        self.recursive = recursive
        self.candidates: List[Candidate] = []

    def _produce(self, source: Union[Source, Iterable[Candidate]],
                 count: Optional[int]) -> List[Candidate]:
        if isinstance(source, Source):
            if count is None:
                raise ConfigurationError("count is required when running from a source")
            return [source.produce_candidate() for _ in range(count)]
        candidates = list(source)
        if count is not None:
            candidates = candidates[:count]
        return candidates

    def _seeds(self, n: int) -> List[int]:
        """One independent integer seed per candidate."""
        children = np.random.SeedSequence(self.seed).spawn(n)
        return [int(child.generate_state(1)[0]) for child in children]

    def run(self, source: Union[Source, Iterable[Candidate]], count: Optional[int] = None,
            verbose: bool = True) -> dict:
        """
        Propagate candidates sequentially.

        Parameters:
            source: Source or iterable of candidates
            count: Number of candidates (required for a Source)
            verbose: Print progress information

        Returns:
            Dictionary with run statistics
        """
        candidates = self._produce(source, count)
        seeds = self._seeds(len(candidates))

        if verbose:
            print(f"\nPropagating {len(candidates)} candidates...")
            print(self.modules.get_description())

        start_time = time.time()
        total_steps = 0
        for candidate, seed in tqdm(zip(candidates, seeds), total=len(candidates),
                                    disable=not verbose, desc="Propagating"):
            candidate.set_random_generator(np.random.default_rng(seed))
            total_steps += self.modules.run(candidate, recursive=self.recursive)
        elapsed = time.time() - start_time

        self.candidates = candidates
        return self._finish(total_steps, elapsed, verbose)

    def run_parallel(self, source: Union[Source, Iterable[Candidate]],
                     count: Optional[int] = None, n_processes: Optional[int] = None,
                     verbose: bool = True) -> dict:
        """
        Propagate candidates in parallel using multiprocessing.

        Each candidate is propagated independently from creation to
        termination; results are collected in production order.

        Parameters:
            source: Source or iterable of candidates
            count: Number of candidates (required for a Source)
            n_processes: Number of parallel processes (default: cpu_count)
            verbose: Print progress information

        Returns:
            Dictionary with run statistics
        """
        import multiprocessing as mp

        if n_processes is None:
            n_processes = mp.cpu_count()

        candidates = self._produce(source, count)
        seeds = self._seeds(len(candidates))
        work_items = [(i, c, s) for i, (c, s) in enumerate(zip(candidates, seeds))]

        if verbose:
            print(f"\nParallel propagation: {len(candidates)} candidates on {n_processes} cores")
            print(self.modules.get_description())

        start_time = time.time()

        results = [None] * len(candidates)
        total_steps = 0
        with mp.Pool(n_processes, initializer=_init_worker,
                     initargs=(self.modules, self.recursive)) as pool:
            for index, candidate, n_steps in tqdm(pool.imap_unordered(_propagate_worker, work_items),
                                                  total=len(work_items), disable=not verbose,
                                                  desc="Propagating"):
                results[index] = candidate
                total_steps += n_steps

        elapsed = time.time() - start_time

        self.candidates = results
        return self._finish(total_steps, elapsed, verbose)

    def _finish(self, total_steps: int, elapsed: float, verbose: bool) -> dict:
        n = len(self.candidates)
        rate = n / elapsed if elapsed > 0 else float('inf')
        rejected = self.get_rejection_counts()

        if verbose:
            print(f"\nPropagation complete:")
            print(f"  Time: {elapsed:.1f}s")
            print(f"  Rate: {rate:.0f} candidates/sec")
            print(f"  Total steps: {total_steps:,}")
            for reason, number in rejected.items():
                print(f"  {reason}: {number}")

        logger.info("Propagated %d candidates in %d steps (%.1fs)", n, total_steps, elapsed)

        return {
            'n_candidates': n,
            'n_active': sum(c.is_active() for c in self.candidates),
            'total_steps': total_steps,
            'elapsed_time': elapsed,
            'candidates_per_sec': rate,
            'rejected': rejected,
        }

    def get_rejection_counts(self, key: str = "Rejected") -> dict:
        """Count final candidates per value of the given tag."""
        counts = Counter(c.get_property(key) for c in self.candidates if c.has_property(key))
        return dict(counts)

    def get_final_energies(self) -> np.ndarray:
        """Final energies of the propagated primaries [J]."""
        return np.array([c.current.energy for c in self.candidates])

    def get_trajectory_lengths(self) -> np.ndarray:
        """Trajectory lengths of the propagated primaries [m]."""
        return np.array([c.get_trajectory_length() for c in self.candidates])


# ============================================================================
# Example Usage
# ============================================================================

if __name__ == "__main__":
    from uhecr_mc import units
    from uhecr_mc.core.particle_id import nucleus_id
    from uhecr_mc.core.source import MonoenergeticSource
    from uhecr_mc.modules import (ElectronPairProduction, MaximumTrajectoryLength,
                                  MinimumEnergy, SimplePropagation)

    print("\n" + "="*70)
    print("Propagation Engine Test")
    print("="*70)

    chain = ModuleList()
    chain.add(SimplePropagation(1 * units.kpc, 10 * units.Mpc))
    chain.add(ElectronPairProduction('CMB'))
    chain.add(MaximumTrajectoryLength(1000 * units.Mpc))
    chain.add(MinimumEnergy(1 * units.EeV))

    engine = PropagationEngine(chain, seed=42)
    source = MonoenergeticSource(nucleus_id(1, 1), 100 * units.EeV)
    stats = engine.run(source, 100, verbose=True)

    energies = engine.get_final_energies() / units.EeV
    print(f"\nMean final energy: {energies.mean():.2f} EeV")

    print("\n" + "="*70)
    print("Test complete!")
    print("="*70 + "\n")
