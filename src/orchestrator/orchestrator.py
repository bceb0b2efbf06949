"""Two-phase build orchestrator (declare -> wire defaults -> gate -> run)."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar

from contracts.errors import (
    BuildError,
    BuildFailedError,
    DuplicateTaskError,
    ExecutionGateSkip,
    TaskGraphError,
)
from extensions.registry import ExtensionRegistry
from invoker.process import ProcessInvoker
from ports.artifact_resolver import ArtifactResolver, LocalRepositoryResolver
from ports.packager import Packager, ZipPackager
from project_config import get_section
from properties.bag import PropertyBag
from properties.phase import PhaseGate
from properties.resolver import LazyResolver
from provisioning.dependency_set import DependencySets

from . import log
from .executor import Executor
from .gate import always_run, describe, should_run
from .project import Project
from .scheduler import Scheduler
from .task import (
    TERMINAL_STATES,
    ActionContext,
    BuildReport,
    Gate,
    TaskDescriptor,
    TaskResult,
    TaskState,
)

_LOGGER = logging.getLogger(__name__)

P = TypeVar("P")
Wiring = Callable[["Build"], None]


class Build:
    """One build of one project.

    Plugins declare extensions, dependency sets and tasks while the build
    is in the declaration phase.  :meth:`finish_declaration` is the
    barrier: it runs every registered default-wiring callback exactly
    once, after which extensions are read-only and task inputs may be
    resolved.  :meth:`run` then executes tasks in dependency order.
    """

    def __init__(
        self,
        project: Project,
        *,
        invoker: Optional[ProcessInvoker] = None,
        artifact_resolver: Optional[ArtifactResolver] = None,
        packager: Optional[Packager] = None,
        executor: Optional[Executor] = None,
        event_log: bool = True,
    ) -> None:
        self.project = project
        self.phase = PhaseGate()
        self.extensions = ExtensionRegistry(project.name, self.phase)
        self.dependency_sets = DependencySets()
        self.resolver = LazyResolver(self.extensions, self.phase)
        self.invoker = invoker or ProcessInvoker()
        self.artifact_resolver: ArtifactResolver = artifact_resolver or LocalRepositoryResolver()
        self.packager: Packager = packager or ZipPackager()
        self.scheduler = Scheduler(executor)
        self.style_tags: List[str] = list(get_section("docs.tags", default=[]))
        self._tasks: Dict[str, TaskDescriptor] = {}
        self._plugins: Dict[type, Any] = {}
        self._wiring: Dict[str, Wiring] = {}
        self._results: Dict[str, TaskResult] = {}
        if event_log:
            log.configure(
                project.build_dir / "logs",
                project=project.name,
                max_bytes=get_section("log.max_bytes", default=None),
            )

    # -- declaration phase -------------------------------------------------

    def apply(self, plugin_cls: Type[P]) -> P:
        """Apply ``plugin_cls`` once; later calls return the same instance."""

        existing = self._plugins.get(plugin_cls)
        if existing is not None:
            return existing
        self.phase.require_declaring(f"apply plugin {plugin_cls.__name__}")
        plugin = plugin_cls()
        self._plugins[plugin_cls] = plugin
        _LOGGER.debug("applying plugin %s", plugin_cls.__name__)
        plugin.apply(self)  # type: ignore[attr-defined]
        return plugin

    def has_plugin(self, plugin_cls: type) -> bool:
        return plugin_cls in self._plugins

    def declare(
        self,
        name: str,
        action: Any,
        *,
        description: str = "",
        group: Optional[str] = None,
        depends_on: Iterable[str] = (),
        gate: Optional[Gate] = None,
    ) -> TaskDescriptor:
        self.phase.require_declaring(f"declare task '{name}'")
        if name in self._tasks:
            raise DuplicateTaskError(f"Task '{name}' is already declared")
        bag = PropertyBag(name)
        action.declare_fields(bag)
        task = TaskDescriptor(
            name=name,
            action=action,
            bag=bag,
            gate=gate or always_run,
            depends_on=list(depends_on),
            description=description,
            group=group,
        )
        self._tasks[name] = task
        self._event(task, "task.declared")
        return task

    def depends_on(self, name: str, *upstream: str) -> None:
        """Add ordering edges: ``name`` runs after every ``upstream`` task."""

        self.phase.require_declaring(f"add dependencies to '{name}'")
        task = self.task(name)
        for item in upstream:
            if item not in task.depends_on:
                task.depends_on.append(item)

    def configure(self, name: str, **values: Any) -> None:
        """Set explicit values on a task's bag."""

        self.phase.require_declaring(f"configure task '{name}'")
        bag = self.task(name).bag
        for key, value in values.items():
            bag.set(key, value)

    def wire_defaults(self, key: str, callback: Wiring) -> bool:
        """Register ``callback`` to run once at the declaration barrier.

        Registering the same ``key`` again is ignored, so re-applying a
        plugin cannot wire defaults twice.
        """

        self.phase.require_declaring(f"register default wiring '{key}'")
        if key in self._wiring:
            return False
        self._wiring[key] = callback
        return True

    def task(self, name: str) -> TaskDescriptor:
        try:
            return self._tasks[name]
        except KeyError:
            raise TaskGraphError(f"Unknown task '{name}'") from None

    def find_task(self, name: str) -> Optional[TaskDescriptor]:
        return self._tasks.get(name)

    def tasks(self) -> List[TaskDescriptor]:
        return list(self._tasks.values())

    def tasks_of_type(self, action_cls: type) -> List[TaskDescriptor]:
        return [task for task in self._tasks.values() if isinstance(task.action, action_cls)]

    # -- barrier -----------------------------------------------------------

    def finish_declaration(self) -> None:
        """Close the declaration phase and wire defaults exactly once."""

        if not self.phase.close():
            return
        for key, callback in self._wiring.items():
            _LOGGER.debug("wiring defaults: %s", key)
            callback(self)
        for task in self._tasks.values():
            self._apply_style_tags(task)
            if task.state is TaskState.DECLARED:
                task.state = TaskState.DEFAULTS_WIRED
                self._event(task, "task.defaults_wired")

    def _apply_style_tags(self, task: TaskDescriptor) -> None:
        tags = getattr(task.action, "style_tags", None)
        if not isinstance(tags, list):
            return
        for tag in self.style_tags:
            if tag not in tags:
                tags.append(tag)

    # -- resolve and run ---------------------------------------------------

    def context_for(self, task: TaskDescriptor) -> ActionContext:
        return ActionContext(
            task=task.name,
            bag=task.bag,
            resolver=self.resolver,
            project=self.project,
            dependency_sets=self.dependency_sets,
            invoker=self.invoker,
            artifact_resolver=self.artifact_resolver,
            packager=self.packager,
        )

    def resolve(self, name: str) -> Dict[str, Any]:
        """Resolve and return every input of task ``name``."""

        self.finish_declaration()
        task = self.task(name)
        return self.resolver.resolve_all(task.bag)

    def run(self, targets: Optional[Iterable[str]] = None) -> BuildReport:
        """Execute ``targets`` (default: every task) and their dependencies.

        Failures do not stop independent tasks; tasks depending on a failed
        task are blocked.  If anything failed, :class:`BuildFailedError` is
        raised once the pass is over.
        """

        self.finish_declaration()
        ordered = self.scheduler.build_task_graph(self._tasks, targets)
        try:
            results = self.scheduler.submit(ordered, self._run_task)
            self.scheduler.barrier()
        finally:
            self.scheduler.shutdown()
        report = BuildReport(results)
        if not report.ok:
            raise BuildFailedError(report)
        return report

    def _run_task(self, task: TaskDescriptor) -> TaskResult:
        cached = self._results.get(task.name)
        if cached is not None and task.state in TERMINAL_STATES:
            return cached

        halted = [
            upstream
            for upstream in task.depends_on
            if self._tasks[upstream].state in (TaskState.FAILED, TaskState.BLOCKED)
        ]
        if halted:
            return self._finish(
                task,
                TaskResult(
                    task=task.name,
                    state=TaskState.BLOCKED,
                    error=f"upstream task(s) did not complete: {', '.join(halted)}",
                ),
            )

        context = self.context_for(task)
        started = time.perf_counter()
        try:
            snapshot = context.values()
            task.state = TaskState.GATED
            if not should_run(task.gate, snapshot):
                skip = ExecutionGateSkip(task=task.name, reason=describe(task.gate))
                _LOGGER.info("skipping %s: %s", task.name, skip.reason)
                return self._finish(
                    task,
                    TaskResult(task=task.name, state=TaskState.SKIPPED, skip=skip),
                )
            _LOGGER.info("running %s", task.name)
            output = task.action.execute(context)
        except (BuildError, OSError) as exc:
            _LOGGER.error("task %s failed: %s", task.name, exc)
            return self._finish(
                task,
                TaskResult(
                    task=task.name,
                    state=TaskState.FAILED,
                    error=str(exc),
                    exception=exc,
                    duration_ms=_elapsed_ms(started),
                ),
            )
        return self._finish(
            task,
            TaskResult(
                task=task.name,
                state=TaskState.EXECUTED,
                output=output,
                duration_ms=_elapsed_ms(started),
            ),
        )

    def _finish(self, task: TaskDescriptor, result: TaskResult) -> TaskResult:
        task.state = result.state
        self._results[task.name] = result
        self._event(task, f"task.{result.state.value}", error=result.error)
        return result

    def _event(self, task: TaskDescriptor, event: str, **extra: Any) -> None:
        payload: Dict[str, Any] = {
            "event": event,
            "project": self.project.name,
            "task": task.name,
            "state": task.state.value,
        }
        payload.update({key: value for key, value in extra.items() if value is not None})
        log.append_event(payload)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = ["Build"]
