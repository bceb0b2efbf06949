from __future__ import annotations

import threading
from pathlib import Path

import pytest

from contracts.errors import (
    FrozenFieldError,
    PhaseError,
    ResolutionCycleError,
    UnresolvedFieldError,
)
from extensions.portal import ServiceBuilderExtension
from extensions.registry import ExtensionRegistry
from orchestrator.project import Project
from properties.bag import PropertyBag
from properties.phase import BuildPhase, PhaseGate
from properties.resolver import LazyResolver


def _setup(tmp_path: Path):
    phase = PhaseGate()
    registry = ExtensionRegistry("proj", phase)
    project = Project("proj", tmp_path)
    extension = registry.create("servicebuilder", ServiceBuilderExtension, project)
    bag = PropertyBag("generateService")
    bag.declare("service_input_file", convert=Path)
    bag.bind(
        "service_input_file",
        extension="servicebuilder",
        fallback=lambda scope: Path("/fallback/service.xml"),
    )
    return phase, LazyResolver(registry, phase), extension, bag


def test_explicit_value_wins_over_extension_and_fallback(tmp_path):
    phase, resolver, extension, bag = _setup(tmp_path)
    extension.set("service_input_file", "/ext/service.xml")
    bag.set("service_input_file", "/explicit/service.xml")
    phase.close()
    assert resolver.resolve(bag, "service_input_file") == Path("/explicit/service.xml")


def test_extension_wins_over_fallback(tmp_path):
    phase, resolver, extension, bag = _setup(tmp_path)
    extension.set("service_input_file", "/ext/service.xml")
    phase.close()
    assert resolver.resolve(bag, "service_input_file") == Path("/ext/service.xml")


def test_fallback_used_when_nothing_else_is_set(tmp_path):
    phase, resolver, _, bag = _setup(tmp_path)
    phase.close()
    assert resolver.resolve(bag, "service_input_file") == Path("/fallback/service.xml")


def test_extension_value_set_after_task_declaration_is_seen(tmp_path):
    phase, resolver, extension, bag = _setup(tmp_path)
    bag.declare("late")
    # the extension is configured only after the bag was fully declared and bound
    extension.set("service_input_file", "/late/service.xml")
    phase.close()
    assert resolver.resolve(bag, "service_input_file") == Path("/late/service.xml")


def test_clearing_explicit_value_restores_lower_sources(tmp_path):
    phase, resolver, extension, bag = _setup(tmp_path)
    extension.set("service_input_file", "/ext/service.xml")
    bag.set("service_input_file", "/explicit/service.xml")
    bag.set("service_input_file", None)
    phase.close()
    assert resolver.resolve(bag, "service_input_file") == Path("/ext/service.xml")


def test_resolution_before_barrier_is_rejected(tmp_path):
    phase, resolver, _, bag = _setup(tmp_path)
    assert phase.phase is BuildPhase.DECLARING
    with pytest.raises(PhaseError):
        resolver.resolve(bag, "service_input_file")


def test_extension_is_read_only_after_barrier(tmp_path):
    phase, _, extension, _ = _setup(tmp_path)
    phase.close()
    with pytest.raises(PhaseError):
        extension.set("service_input_file", "/too/late.xml")


def test_barrier_closes_once():
    phase = PhaseGate()
    assert phase.close() is True
    assert phase.close() is False
    assert phase.phase is BuildPhase.RESOLVING


def test_fallback_runs_once_and_value_is_frozen(tmp_path):
    phase = PhaseGate()
    resolver = LazyResolver(ExtensionRegistry("proj", phase), phase)
    calls = []
    bag = PropertyBag("task")
    bag.declare("value")
    bag.bind("value", fallback=lambda scope: calls.append(1) or "computed")
    phase.close()

    assert resolver.resolve(bag, "value") == "computed"
    assert resolver.resolve(bag, "value") == "computed"
    assert calls == [1]
    assert bag.is_resolved("value")
    with pytest.raises(FrozenFieldError):
        bag.set("value", "other")


def test_concurrent_first_reads_compute_once(tmp_path):
    phase = PhaseGate()
    resolver = LazyResolver(ExtensionRegistry("proj", phase), phase)
    calls = []
    bag = PropertyBag("task")
    bag.declare("value")
    bag.bind("value", fallback=lambda scope: calls.append(1) or object())
    phase.close()

    results = []
    threads = [
        threading.Thread(target=lambda: results.append(resolver.resolve(bag, "value")))
        for _ in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert len({id(item) for item in results}) == 1


def test_required_field_without_sources_raises():
    phase = PhaseGate()
    resolver = LazyResolver(ExtensionRegistry("proj", phase), phase)
    bag = PropertyBag("deploy")
    bag.declare("auto_deploy_dir")
    phase.close()
    with pytest.raises(UnresolvedFieldError) as excinfo:
        resolver.resolve(bag, "auto_deploy_dir")
    assert excinfo.value.owner == "deploy"
    assert excinfo.value.field == "auto_deploy_dir"


def test_optional_field_without_sources_is_none():
    phase = PhaseGate()
    resolver = LazyResolver(ExtensionRegistry("proj", phase), phase)
    bag = PropertyBag("generateService")
    bag.declare("jalopy_input_file", required=False, convert=Path)
    phase.close()
    assert resolver.resolve(bag, "jalopy_input_file") is None


def test_fallback_may_read_sibling_fields():
    phase = PhaseGate()
    resolver = LazyResolver(ExtensionRegistry("proj", phase), phase)
    bag = PropertyBag("buildThumbnail")
    bag.declare("diffs_dir", convert=Path)
    bag.declare("original_file", convert=Path)
    bag.set("diffs_dir", "/theme/diffs")
    bag.bind("original_file", fallback=lambda scope: scope.field("diffs_dir") / "screenshot.png")
    phase.close()
    assert resolver.resolve(bag, "original_file") == Path("/theme/diffs/screenshot.png")


def test_cyclic_fallbacks_are_reported():
    phase = PhaseGate()
    resolver = LazyResolver(ExtensionRegistry("proj", phase), phase)
    bag = PropertyBag("task")
    bag.declare("a")
    bag.declare("b")
    bag.bind("a", fallback=lambda scope: scope.field("b"))
    bag.bind("b", fallback=lambda scope: scope.field("a"))
    phase.close()
    with pytest.raises(ResolutionCycleError) as excinfo:
        resolver.resolve(bag, "a")
    assert excinfo.value.chain == ["a", "b", "a"]
    assert not bag.is_resolved("a")


def test_unknown_field_and_duplicate_declaration():
    bag = PropertyBag("task")
    bag.declare("a")
    with pytest.raises(ValueError):
        bag.declare("a")
    with pytest.raises(KeyError):
        bag.set("missing", 1)


def test_snapshot_is_read_only(tmp_path):
    phase, resolver, _, bag = _setup(tmp_path)
    phase.close()
    resolver.resolve_all(bag)
    snapshot = bag.snapshot()
    assert snapshot["service_input_file"] == Path("/fallback/service.xml")
    with pytest.raises(TypeError):
        snapshot["service_input_file"] = Path("/other")  # type: ignore[index]
