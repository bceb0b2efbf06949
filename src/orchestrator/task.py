"""Task descriptors, action contexts and results for the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from contracts.errors import ExecutionGateSkip
from properties.bag import PropertyBag


class TaskState(str, Enum):
    DECLARED = "declared"
    DEFAULTS_WIRED = "defaults-wired"
    GATED = "gated"
    EXECUTED = "executed"
    SKIPPED = "skipped"
    FAILED = "failed"
    BLOCKED = "blocked"


TERMINAL_STATES = frozenset({TaskState.EXECUTED, TaskState.SKIPPED, TaskState.FAILED, TaskState.BLOCKED})


@dataclass
class ActionContext:
    """Everything a task action may touch while it runs.

    Actions never see their :class:`TaskDescriptor`; they get the bag,
    the resolver that reads it and the collaborators of the build.
    """

    task: str
    bag: PropertyBag
    resolver: Any
    project: Any
    dependency_sets: Any
    invoker: Any
    artifact_resolver: Any
    packager: Any

    def value(self, name: str) -> Any:
        return self.resolver.resolve(self.bag, name)

    def values(self) -> Dict[str, Any]:
        return self.resolver.resolve_all(self.bag)

    def classpath(self, name: str = "classpath") -> List[Path]:
        """Resolve a classpath-like field to concrete files."""

        value = self.value(name)
        if value is None:
            return []
        if hasattr(value, "files"):
            return value.files(self.artifact_resolver)
        return [Path(item) for item in value]


class TaskAction(Protocol):
    def declare_fields(self, bag: PropertyBag) -> None:
        """Declare the inputs this action reads."""

    def execute(self, context: ActionContext) -> Any:
        """Perform the task's work; raise a ``BuildError`` on failure."""


Gate = Callable[[Mapping[str, Any]], bool]


@dataclass
class TaskDescriptor:
    """Unit of work owned by the orchestrator."""

    name: str
    action: Any
    bag: PropertyBag
    gate: Gate
    depends_on: List[str] = field(default_factory=list)
    description: str = ""
    group: Optional[str] = None
    state: TaskState = TaskState.DECLARED


@dataclass
class TaskResult:
    """Outcome of one task in a build run."""

    task: str
    state: TaskState
    output: Any = None
    error: Optional[str] = None
    exception: Optional[BaseException] = None
    skip: Optional[ExecutionGateSkip] = None
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "task": self.task,
            "state": self.state.value,
            "duration_ms": self.duration_ms,
        }
        if self.output is not None:
            payload["output"] = str(self.output)
        if self.error is not None:
            payload["error"] = self.error
        if self.skip is not None:
            payload["skip_reason"] = self.skip.reason
        return payload


@dataclass
class BuildReport:
    results: List[TaskResult]

    def failed_tasks(self) -> List[str]:
        return [result.task for result in self.results if result.state is TaskState.FAILED]

    def by_name(self, name: str) -> TaskResult:
        for result in self.results:
            if result.task == name:
                return result
        raise KeyError(f"Task '{name}' did not take part in this build")

    @property
    def ok(self) -> bool:
        return not self.failed_tasks()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "tasks": [result.to_dict() for result in self.results],
        }


__all__ = [
    "ActionContext",
    "BuildReport",
    "Gate",
    "TERMINAL_STATES",
    "TaskAction",
    "TaskDescriptor",
    "TaskResult",
    "TaskState",
]
