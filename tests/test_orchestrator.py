from __future__ import annotations

import json

import pytest

from contracts.errors import (
    BuildFailedError,
    DuplicateTaskError,
    PhaseError,
    TaskGraphError,
    ToolInvocationError,
    ToolLaunchError,
)
from invoker.process import ProcessInvoker, ToolCommand, WorkingDirectoryLayout
from orchestrator import log
from orchestrator.task import TaskState


class Recorder:
    def __init__(self, calls: list[str], fail: bool = False) -> None:
        self.calls = calls
        self.fail = fail

    def declare_fields(self, bag) -> None:
        bag.declare("label", required=False)

    def execute(self, context):
        self.calls.append(context.task)
        if self.fail:
            raise ToolInvocationError(context.task, "Error: boom")
        return context.value("label")


class Plugin:
    applied = 0

    def apply(self, build) -> None:
        type(self).applied += 1
        build.declare("compile", Recorder([]))


def test_plugin_applied_once(make_build):
    Plugin.applied = 0
    build = make_build()
    first = build.apply(Plugin)
    second = build.apply(Plugin)
    assert first is second
    assert Plugin.applied == 1
    assert build.has_plugin(Plugin)
    assert [task.name for task in build.tasks()] == ["compile"]


def test_duplicate_task_rejected(make_build):
    build = make_build()
    build.declare("a", Recorder([]))
    with pytest.raises(DuplicateTaskError):
        build.declare("a", Recorder([]))


def test_default_wiring_runs_exactly_once(make_build):
    build = make_build()
    build.declare("a", Recorder([]))
    calls = []
    assert build.wire_defaults("label", lambda b: calls.append(b)) is True
    assert build.wire_defaults("label", lambda b: calls.append("again")) is False

    build.finish_declaration()
    build.finish_declaration()

    assert calls == [build]
    assert build.task("a").state is TaskState.DEFAULTS_WIRED


def test_declaration_after_barrier_rejected(make_build):
    build = make_build()
    build.finish_declaration()
    with pytest.raises(PhaseError):
        build.declare("late", Recorder([]))
    with pytest.raises(PhaseError):
        build.wire_defaults("late", lambda b: None)


def test_tasks_run_upstream_first(make_build):
    build = make_build()
    calls: list[str] = []
    build.declare("deploy", Recorder(calls), depends_on=["war"])
    build.declare("war", Recorder(calls))
    build.declare("generateService", Recorder(calls))
    build.depends_on("war", "generateService")

    report = build.run(["deploy"])

    assert calls == ["generateService", "war", "deploy"]
    assert [result.task for result in report.results] == ["generateService", "war", "deploy"]
    assert all(result.state is TaskState.EXECUTED for result in report.results)
    assert report.ok


def test_gate_skips_task(make_build):
    build = make_build()
    calls: list[str] = []
    build.declare("thumbnail", Recorder(calls), gate=lambda values: False)
    report = build.run()
    result = report.by_name("thumbnail")
    assert result.state is TaskState.SKIPPED
    assert result.skip.task == "thumbnail"
    assert result.skip.reason == "gate predicate returned false"
    assert calls == []


def test_failure_blocks_dependents_but_not_independent_tasks(make_build):
    build = make_build()
    calls: list[str] = []
    build.declare("generateService", Recorder(calls, fail=True))
    build.declare("war", Recorder(calls), depends_on=["generateService"])
    build.declare("deploy", Recorder(calls), depends_on=["war"])
    build.declare("sassToCss", Recorder(calls))

    with pytest.raises(BuildFailedError) as excinfo:
        build.run()

    report = excinfo.value.report
    assert report.failed_tasks() == ["generateService"]
    assert report.by_name("war").state is TaskState.BLOCKED
    assert report.by_name("deploy").state is TaskState.BLOCKED
    assert report.by_name("sassToCss").state is TaskState.EXECUTED
    assert calls == ["generateService", "sassToCss"]
    failure = report.by_name("generateService")
    assert isinstance(failure.exception, ToolInvocationError)
    assert "Error: boom" in failure.error


class LaunchTool:
    def __init__(self, executable: str) -> None:
        self.executable = executable

    def declare_fields(self, bag) -> None:
        pass

    def execute(self, context):
        layout = WorkingDirectoryLayout(context.project.build_dir / "work")
        return context.invoker.invoke(ToolCommand("service builder", self.executable), layout, [])


class CopyMissing:
    def declare_fields(self, bag) -> None:
        pass

    def execute(self, context):
        # plain OSError from the filesystem, not wrapped by the action
        return (context.project.build_dir / "absent" / "file.txt").read_text(encoding="utf-8")


def test_missing_tool_executable_fails_task_and_keeps_independent_tasks(make_build, tmp_path):
    build = make_build(invoker=ProcessInvoker())
    calls: list[str] = []
    build.declare("generateService", LaunchTool(str(tmp_path / "nonexistent" / "java")))
    build.declare("war", Recorder(calls), depends_on=["generateService"])
    build.declare("sassToCss", Recorder(calls))

    with pytest.raises(BuildFailedError) as excinfo:
        build.run()

    report = excinfo.value.report
    failure = report.by_name("generateService")
    assert failure.state is TaskState.FAILED
    assert isinstance(failure.exception, ToolLaunchError)
    assert "could not start" in failure.error
    assert build.task("generateService").state is TaskState.FAILED
    assert report.by_name("war").state is TaskState.BLOCKED
    assert report.by_name("sassToCss").state is TaskState.EXECUTED
    assert calls == ["sassToCss"]


def test_filesystem_error_in_action_fails_task(make_build):
    build = make_build()
    calls: list[str] = []
    build.declare("deploy", CopyMissing())
    build.declare("docs", Recorder(calls))

    with pytest.raises(BuildFailedError) as excinfo:
        build.run()

    report = excinfo.value.report
    assert report.failed_tasks() == ["deploy"]
    assert isinstance(report.by_name("deploy").exception, FileNotFoundError)
    assert calls == ["docs"]


def test_rerun_returns_cached_results(make_build):
    build = make_build()
    calls: list[str] = []
    build.declare("a", Recorder(calls))
    build.configure("a", label="first")
    assert build.run().by_name("a").output == "first"
    assert build.run().by_name("a").output == "first"
    assert calls == ["a"]


def test_unknown_target_and_cycles(make_build):
    build = make_build()
    build.declare("a", Recorder([]), depends_on=["b"])
    build.declare("b", Recorder([]), depends_on=["a"])
    with pytest.raises(TaskGraphError):
        build.run(["missing"])
    with pytest.raises(TaskGraphError, match="cycle"):
        build.run(["a"])


def test_style_tags_only_reach_capable_actions(make_build):
    class Documented(Recorder):
        def __init__(self) -> None:
            super().__init__([])
            self.style_tags = ["custom:a:Custom"]

    build = make_build()
    build.declare("docs", Documented())
    build.declare("plain", Recorder([]))
    build.finish_declaration()

    assert build.task("docs").action.style_tags == [
        "custom:a:Custom",
        "generated:a:Generated",
        "ignore:a:Ignore",
    ]
    assert not hasattr(build.task("plain").action, "style_tags")


def test_state_transitions_are_logged(make_build, tmp_path):
    build = make_build(event_log=True)
    build.declare("a", Recorder([]))
    build.run()

    path = log.current_log_path()
    assert path is not None
    assert path.is_relative_to((tmp_path / "proj").resolve() / "build" / "logs")
    events = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [event["event"] for event in events] == [
        "task.declared",
        "task.defaults_wired",
        "task.executed",
    ]
    assert all(event["task"] == "a" and event["project"] == "sample-portlet" for event in events)
