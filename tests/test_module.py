"""Tests for Module, ModuleList and the reject protocol."""

import pytest

from uhecr_mc import units
from uhecr_mc.core.candidate import Candidate
from uhecr_mc.core.module import AbstractCondition, Module, ModuleList
from uhecr_mc.core.particle_id import PHOTON, nucleus_id
from uhecr_mc.core.particle_state import ParticleState
from uhecr_mc.core.source import MonoenergeticSource, Source
from uhecr_mc.errors import ConfigurationError


class Recorder(Module):
    """Appends (name, candidate energy) to a shared log."""

    def __init__(self, name, log):
        self.name = name
        self.log = log

    def process(self, candidate):
        self.log.append((self.name, candidate.current.energy))


class StopAfter(Module):
    def __init__(self, n):
        self.n = n
        self.calls = 0

    def process(self, candidate):
        self.calls += 1
        if self.calls >= self.n:
            candidate.deactivate()


class Splitter(Module):
    """Emits one photon secondary on the first step of a nucleus."""

    def process(self, candidate):
        if candidate.current.id != PHOTON and not candidate.has_property("split"):
            candidate.set_property("split", "yes")
            candidate.add_secondary(pid=PHOTON, energy=1.0)
        candidate.deactivate()


class AlwaysReject(AbstractCondition):
    def process(self, candidate):
        self.reject(candidate)


def test_module_is_abstract():
    with pytest.raises(TypeError):
        Module()


def test_description_default_and_override():
    module = StopAfter(1)
    assert module.get_description() == "StopAfter"
    module.set_description("stops")
    assert module.get_description() == "stops"


class TestModuleList:
    def test_order_and_no_short_circuit(self, proton):
        log = []
        chain = ModuleList([Recorder("a", log), StopAfter(1), Recorder("b", log)])
        chain.process(proton)
        assert [name for name, _ in log] == ["a", "b"]
        assert not proton.is_active()

    def test_sequence_protocol(self):
        first, second = StopAfter(1), StopAfter(2)
        chain = ModuleList().add(first).add(second)
        assert len(chain) == 2
        assert chain[1] is second
        assert list(chain) == [first, second]
        assert chain.remove(0) is first
        assert len(chain) == 1

    def test_run_until_inactive(self, proton):
        chain = ModuleList([StopAfter(5)])
        assert chain.run(proton) == 5
        assert not proton.is_active()

    def test_step_budget(self, proton):
        chain = ModuleList([StopAfter(100)], max_steps=3)
        assert chain.run(proton) == 3
        assert proton.is_active()
        assert proton.get_property(ModuleList.STEP_BUDGET_KEY) == "exhausted"

    def test_secondaries_run_and_detached(self, proton):
        chain = ModuleList([Splitter()])
        chain.run(proton)
        assert proton.secondaries == []

    def test_secondaries_kept_without_recursion(self, proton):
        chain = ModuleList([Splitter()])
        chain.run(proton, recursive=False)
        assert len(proton.secondaries) == 1
        assert proton.secondaries[0].is_active()

    def test_run_many_from_source(self):
        source = MonoenergeticSource(nucleus_id(1, 1), units.EeV)
        results = ModuleList([StopAfter(1)]).run_many(source, count=4)
        assert len(results) == 4
        assert all(c.initial.energy == units.EeV for c in results)

    def test_run_many_from_custom_source(self):
        class FixedSource(Source):
            def produce_candidate(self):
                return Candidate(ParticleState(nucleus_id(4, 2), 2 * units.EeV))

        results = ModuleList([StopAfter(1)]).run_many(FixedSource(), count=3)
        assert [c.current.id for c in results] == [nucleus_id(4, 2)] * 3

    def test_run_many_source_needs_count(self):
        source = MonoenergeticSource(nucleus_id(1, 1), units.EeV)
        with pytest.raises(ConfigurationError):
            ModuleList().run_many(source)

    def test_description_lists_modules(self):
        chain = ModuleList([StopAfter(1)])
        assert "StopAfter" in chain.get_description()


class TestRejectProtocol:
    def test_default_flag(self, proton):
        AlwaysReject().process(proton)
        assert proton.get_property("Rejected") == "AlwaysReject"
        assert not proton.is_active()

    def test_custom_flag_and_keep_active(self, proton):
        condition = AlwaysReject()
        condition.set_reject_flag("Stop", "here")
        condition.set_make_rejected_inactive(False)
        condition.process(proton)
        assert proton.get_property("Stop") == "here"
        assert proton.is_active()

    def test_reject_action_called(self, proton):
        log = []
        condition = AlwaysReject()
        condition.on_reject(Recorder("action", log))
        condition.process(proton)
        assert log == [("action", proton.current.energy)]
        assert "Action: Recorder" in condition._describe_reject()

    def test_reject_is_idempotent(self, proton):
        condition = AlwaysReject()
        condition.process(proton)
        tags = dict(proton.properties)
        condition.process(proton)
        assert proton.properties == tags
        assert not proton.is_active()
