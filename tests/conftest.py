from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

import project_config
from orchestrator import log
from orchestrator.orchestrator import Build
from orchestrator.project import Project
from invoker.process import ProcessInvoker


class FakeRunner:
    """Stands in for ``subprocess.run`` and records every call."""

    def __init__(self, output: str = "BUILD SUCCESSFUL\n", returncode: int = 0, on_call=None) -> None:
        self.output = output
        self.returncode = returncode
        self.on_call = on_call
        self.calls: list[tuple[list[str], dict]] = []

    def __call__(self, argv, **kwargs):
        self.calls.append((list(argv), kwargs))
        if self.on_call is not None:
            self.on_call(list(argv), kwargs)
        return subprocess.CompletedProcess(argv, self.returncode, stdout=self.output)


class FlatResolver:
    """Maps every coordinate to ``<root>/<name>-<version>.jar``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.resolved: list[str] = []

    def resolve(self, coordinate):
        self.resolved.append(str(coordinate))
        return self.root / f"{coordinate.name}-{coordinate.version}.jar"


@pytest.fixture(autouse=True)
def _isolate_state():
    project_config.reload()
    yield
    log.disable()
    project_config.reload()


@pytest.fixture
def portal(tmp_path: Path) -> Path:
    """Minimal application server with an installed portal."""

    root = tmp_path / "tomcat"
    portal_lib = root / "webapps" / "ROOT" / "WEB-INF" / "lib"
    portal_lib.mkdir(parents=True)
    (portal_lib / "util-java.jar").write_bytes(b"")
    (portal_lib / "portal-impl.jar").write_bytes(b"")
    global_lib = root / "lib" / "ext"
    global_lib.mkdir(parents=True)
    for name in ("portal-service.jar", "commons-digester.jar", "commons-lang.jar", "easyconf.jar"):
        (global_lib / name).write_bytes(b"")
    return root


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_build(tmp_path: Path, runner: FakeRunner):
    def factory(name: str = "sample-portlet", **kwargs) -> Build:
        project = Project(name, tmp_path / "proj")
        kwargs.setdefault("invoker", ProcessInvoker(runner=runner))
        kwargs.setdefault("artifact_resolver", FlatResolver(tmp_path / "repo"))
        kwargs.setdefault("event_log", False)
        return Build(project, **kwargs)

    return factory
