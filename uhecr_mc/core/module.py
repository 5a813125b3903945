"""
Processing modules and the module chain.

A Module is one unit of work applied to a Candidate per propagation step.
A ModuleList applies its modules in the configured order; it does not stop
early when a module deactivates the candidate, so later modules (e.g.
observers) still see rejection tags.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Optional, Union

from tqdm import tqdm

from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.source import Source
from uhecr_mc.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Module(ABC):
    """Base class of all processing modules."""

    _description: Optional[str] = None

    @abstractmethod
    def process(self, candidate: Candidate) -> None:
        """Apply this module to the candidate for one step."""

    def get_description(self) -> str:
        """Human-readable summary, used for logging and config echo."""
        if self._description is not None:
            return self._description
        return type(self).__name__

    def set_description(self, description: str):
        self._description = description

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.get_description()}>"


class AbstractCondition(Module):
    """
    Base for break conditions: predicate plus the reject protocol.

    On rejection the candidate is tagged reject_flag_key → reject_flag_value,
    deactivated if make_rejected_inactive is set, and handed to the
    reject_action module if one is configured.
    """

    def __init__(self):
        self.reject_flag_key = "Rejected"
        self.reject_flag_value = type(self).__name__
        self.make_rejected_inactive = True
        self.reject_action: Optional[Module] = None

    def set_reject_flag(self, key: str, value: str):
        self.reject_flag_key = key
        self.reject_flag_value = value

    def set_make_rejected_inactive(self, make_inactive: bool):
        self.make_rejected_inactive = make_inactive

    def on_reject(self, action: Optional[Module]):
        """Chain a module invoked on every rejected candidate."""
        self.reject_action = action

    def reject(self, candidate: Candidate):
        candidate.set_property(self.reject_flag_key, self.reject_flag_value)

        if self.make_rejected_inactive:
            candidate.deactivate()

        if self.reject_action is not None:
            self.reject_action.process(candidate)

    def _describe_reject(self) -> str:
        s = (f"Flag: '{self.reject_flag_key}' -> '{self.reject_flag_value}', "
             f"MakeInactive: {'yes' if self.make_rejected_inactive else 'no'}")
        if self.reject_action is not None:
            s += f", Action: {self.reject_action.get_description()}"
        return s


class ModuleList(Module):
    """
    Ordered chain of modules.

    Example:
        chain = ModuleList()
        chain.add(SimplePropagation(1 * kpc, 1 * Mpc))
        chain.add(MaximumTrajectoryLength(100 * Mpc))
        chain.run(candidate)
    """

    STEP_BUDGET_KEY = "StepBudget"

    def __init__(self, modules: Optional[Iterable[Module]] = None,
                 max_steps: Optional[int] = None):
        """
        Parameters:
            modules: Initial modules, in order
            max_steps: Per-candidate step cap for run() (None = unlimited)
        """
        self.modules: List[Module] = list(modules) if modules is not None else []
        self.max_steps = max_steps

    def add(self, module: Module) -> "ModuleList":
        self.modules.append(module)
        return self

    def remove(self, index: int) -> Module:
        return self.modules.pop(index)

    def __len__(self) -> int:
        return len(self.modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(self.modules)

    def __getitem__(self, index: int) -> Module:
        return self.modules[index]

    def process(self, candidate: Candidate) -> None:
        for module in self.modules:
            module.process(candidate)

    def run(self, candidate: Candidate, recursive: bool = True) -> int:
        """
        Propagate a candidate until it is inactive or the step cap is hit.

        With recursive=True, secondaries created during a step are
        propagated depth-first right after that step and then detached
        from the parent.

        Returns:
            Number of steps taken by this candidate (secondaries excluded)
        """
        n_steps = 0
        while candidate.is_active():
            if self.max_steps is not None and n_steps >= self.max_steps:
                candidate.set_property(self.STEP_BUDGET_KEY, "exhausted")
                break

            self.process(candidate)
            n_steps += 1

            if recursive and candidate.secondaries:
                secondaries = list(candidate.secondaries)
                candidate.clear_secondaries()
                for secondary in secondaries:
                    self.run(secondary, recursive=True)

        return n_steps

    def run_many(self, candidates: Union[Iterable[Candidate], Source],
                 count: Optional[int] = None, recursive: bool = True,
                 show_progress: bool = False) -> List[Candidate]:
        """
        Propagate many candidates sequentially.

        Parameters:
            candidates: Iterable of candidates, or a Source
            count: Number of candidates to draw from a Source
            recursive: Propagate secondaries as well
            show_progress: Display a progress bar

        Returns:
            The propagated primary candidates
        """
        if isinstance(candidates, Source):
            if count is None:
                raise ConfigurationError("count is required when running from a source")
            source = candidates
            candidates = (source.produce_candidate() for _ in range(count))

        results = []
        for candidate in tqdm(candidates, total=count, disable=not show_progress,
                              desc="Propagating"):
            self.run(candidate, recursive=recursive)
            results.append(candidate)

        logger.debug("Propagated %d candidates", len(results))
        return results

    def get_description(self) -> str:
        lines = ["ModuleList"]
        for module in self.modules:
            lines.append(f"  {module.get_description()}")
        return "\n".join(lines)
