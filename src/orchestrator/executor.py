"""Executor interfaces for running ordered tasks."""

from __future__ import annotations

from typing import Callable, List, Protocol, Sequence

from .task import TaskDescriptor, TaskResult

RunTask = Callable[[TaskDescriptor], TaskResult]


class Executor(Protocol):
    """Abstract execution backend."""

    def submit(self, tasks: Sequence[TaskDescriptor], run: RunTask) -> List[TaskResult]:
        """Run a batch of tasks already sorted in dependency order."""

    def barrier(self) -> None:
        """Wait until all enqueued work is finished."""

    def shutdown(self) -> None:
        """Tear down resources allocated by the executor."""


class SequentialExecutor:
    """Deterministic executor processing tasks serially in the given order."""

    def submit(self, tasks: Sequence[TaskDescriptor], run: RunTask) -> List[TaskResult]:
        return [run(task) for task in tasks]

    def barrier(self) -> None:
        return None

    def shutdown(self) -> None:
        return None


__all__ = ["Executor", "RunTask", "SequentialExecutor"]
