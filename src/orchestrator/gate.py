"""Pre-execution predicates deciding whether a task still has work to do."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Union

PathSource = Union[str, Path, Callable[[Mapping[str, Any]], Any]]


def always_run(snapshot: Mapping[str, Any]) -> bool:
    return True


always_run.description = "always"  # type: ignore[attr-defined]


def _locate(source: PathSource, snapshot: Mapping[str, Any]) -> Path | None:
    if isinstance(source, Path):
        return source
    if isinstance(source, str):
        value = snapshot.get(source)
    else:
        value = source(snapshot)
    return Path(value) if value is not None else None


def presence_gate(source: PathSource, derived: PathSource) -> Callable[[Mapping[str, Any]], bool]:
    """Run only if ``source`` exists and ``derived`` does not.

    Each argument is a literal :class:`Path`, the name of a resolved field,
    or a callable computing the path from the resolved values.  There is no
    timestamp comparison: once the derived artifact exists the gate stays
    closed until it is removed.
    """

    def gate(snapshot: Mapping[str, Any]) -> bool:
        source_path = _locate(source, snapshot)
        derived_path = _locate(derived, snapshot)
        if source_path is None or not source_path.exists():
            return False
        return derived_path is None or not derived_path.exists()

    gate.description = "source present and derived artifact absent"  # type: ignore[attr-defined]
    return gate


def should_run(predicate: Callable[[Mapping[str, Any]], bool] | None, snapshot: Mapping[str, Any]) -> bool:
    if predicate is None:
        return True
    return bool(predicate(snapshot))


def describe(predicate: Callable[..., Any] | None) -> str:
    return str(getattr(predicate, "description", "gate predicate returned false"))


__all__ = ["always_run", "describe", "presence_gate", "should_run"]
