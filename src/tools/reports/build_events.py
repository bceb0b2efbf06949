"""Aggregation helpers for JSONL build event logs."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Iterable, Mapping

__all__ = ["aggregate"]


def _load_events(paths: Iterable[Path]) -> Iterable[Mapping[str, object]]:
    for path in paths:
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            yield json.loads(line)


def aggregate(paths: Iterable[Path], *, top: int = 5) -> Mapping[str, object]:
    """Summarise task outcomes and tool invocations across event files."""

    states = Counter()
    failures = Counter()
    tools = Counter()
    provisioned = Counter()
    for event in _load_events(paths):
        name = str(event.get("event", ""))
        if name.startswith("task.") and name != "task.declared":
            states[str(event.get("state", "unknown"))] += 1
            if event.get("state") == "failed":
                failures[str(event.get("task", "unknown"))] += 1
        elif name == "invocation.completed":
            tools[str(event.get("tool", "unknown"))] += 1
        elif name == "provisioning.completed":
            provisioned[str(event.get("dependency_set", "unknown"))] += 1

    return {
        "task_states": dict(sorted(states.items())),
        "top_failures": failures.most_common(top),
        "invocations": dict(sorted(tools.items())),
        "provisioned": dict(sorted(provisioned.items())),
    }
