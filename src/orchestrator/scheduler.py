"""Dependency-ordered scheduling of declared tasks."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence

from contracts.errors import TaskGraphError

from .executor import Executor, RunTask, SequentialExecutor
from .task import TaskDescriptor, TaskResult


class Scheduler:
    """Deterministic task scheduler with sequential policy by default."""

    def __init__(self, executor: Executor | None = None) -> None:
        self.executor = executor or SequentialExecutor()

    def build_task_graph(
        self,
        tasks: Mapping[str, TaskDescriptor],
        targets: Optional[Iterable[str]] = None,
    ) -> List[TaskDescriptor]:
        """Return ``targets`` and their dependencies, upstream first.

        Ties are broken by declaration order so the same declarations always
        produce the same order.  With no targets every task is scheduled.
        """

        roots = list(targets) if targets else list(tasks)
        ordered: List[TaskDescriptor] = []
        done: set[str] = set()
        visiting: List[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                cycle = visiting[visiting.index(name):] + [name]
                raise TaskGraphError(f"Task dependency cycle: {' -> '.join(cycle)}")
            task = tasks.get(name)
            if task is None:
                referrer = f" (required by '{visiting[-1]}')" if visiting else ""
                raise TaskGraphError(f"Unknown task '{name}'{referrer}")
            visiting.append(name)
            for upstream in task.depends_on:
                visit(upstream)
            visiting.pop()
            done.add(name)
            ordered.append(task)

        for root in roots:
            visit(root)
        return ordered

    def submit(self, tasks: Sequence[TaskDescriptor], run: RunTask) -> List[TaskResult]:
        """Submit ordered tasks to the underlying executor."""

        return self.executor.submit(list(tasks), run)

    def barrier(self) -> None:
        self.executor.barrier()

    def shutdown(self) -> None:
        self.executor.shutdown()


__all__ = ["Scheduler"]
