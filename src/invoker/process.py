"""Child-process invocation of external generator tools."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from contracts.errors import ToolInvocationError, ToolLaunchError
from orchestrator import log
from ports._utils import child_env
from project_config import get_section

_LOGGER = logging.getLogger(__name__)

_DEFAULT_MARKER = "Error"
_DEFAULT_STYLE_TARGET = "misc/jalopy.xml"


@dataclass(frozen=True)
class ToolCommand:
    """Executable plus the launcher arguments that precede tool arguments."""

    name: str
    executable: str
    launcher_args: Tuple[str, ...] = ()

    def argv(self, arguments: Sequence[str]) -> List[str]:
        return [self.executable, *self.launcher_args, *arguments]


def java_command(
    name: str,
    main_class: str,
    classpath: Sequence[Path],
    *,
    jvm_properties: Sequence[str] = (),
    java: Optional[str] = None,
) -> ToolCommand:
    """Build a forked ``java`` launch for ``main_class``."""

    executable = java or get_section("tools.java", default="java")
    launcher: List[str] = [f"-D{prop}" for prop in jvm_properties]
    if classpath:
        launcher.extend(["-cp", os.pathsep.join(str(path) for path in classpath)])
    launcher.append(main_class)
    return ToolCommand(name=name, executable=str(executable), launcher_args=tuple(launcher))


@dataclass(frozen=True)
class WorkingDirectoryLayout:
    """Directory the tool runs in, mimicking the layout it searches.

    Some tools only find auxiliary configuration relative to their working
    directory, so the style file is copied to ``style_target`` inside the
    staged root.  Without a style file the tool's built-in default applies.
    """

    root: Path
    style_file: Optional[Path] = None
    style_target: str = _DEFAULT_STYLE_TARGET

    def stage(self) -> Path:
        root = Path(self.root)
        root.mkdir(parents=True, exist_ok=True)
        (root / "misc").mkdir(parents=True, exist_ok=True)
        if self.style_file is not None:
            target = root / self.style_target
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.style_file, target)
        return root


@dataclass(frozen=True)
class InvocationOutcome:
    tool: str
    argv: Tuple[str, ...]
    returncode: int
    output: str
    failed: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.failed

    def check(self) -> "InvocationOutcome":
        """Raise :class:`ToolInvocationError` carrying the output on failure."""

        if self.failed:
            raise ToolInvocationError(self.tool, self.output)
        return self


def failure_marker() -> str:
    return str(get_section("tools.failure_marker", default=_DEFAULT_MARKER))


def classify_output(output: str, marker: Optional[str] = None) -> bool:
    """Return ``True`` (failure) if ``output`` contains the marker.

    This is a literal substring test: any occurrence counts, including one
    that merely appears in echoed source text.
    """

    needle = marker if marker is not None else failure_marker()
    return bool(needle) and needle in output


Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class ProcessInvoker:
    """Run a tool as a child process and classify its captured output."""

    def __init__(
        self,
        *,
        marker: Optional[str] = None,
        env: Optional[Mapping[str, Optional[str]]] = None,
        runner: Runner = subprocess.run,
    ) -> None:
        self.marker = marker if marker is not None else failure_marker()
        self._env = dict(env or {})
        self._runner = runner

    def invoke(
        self,
        command: ToolCommand,
        layout: WorkingDirectoryLayout,
        arguments: Sequence[str],
    ) -> InvocationOutcome:
        workdir = layout.stage()
        argv = command.argv(arguments)
        _LOGGER.info("running %s in %s", command.name, workdir)
        _LOGGER.debug("argv: %s", argv)

        try:
            completed: Any = self._runner(
                argv,
                cwd=str(workdir),
                env=child_env(self._env),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except OSError as exc:
            log.append_event(
                {
                    "event": "invocation.launch_failed",
                    "tool": command.name,
                    "executable": argv[0],
                    "error": str(exc),
                }
            )
            raise ToolLaunchError(command.name, argv[0], exc) from exc
        output = completed.stdout or ""
        returncode = int(completed.returncode)
        if output:
            _LOGGER.info("%s output:\n%s", command.name, output.rstrip())

        failed = classify_output(output, self.marker)
        log.append_event(
            {
                "event": "invocation.completed",
                "tool": command.name,
                "returncode": returncode,
                "marker_found": failed,
                "workdir": str(workdir),
            }
        )
        if returncode != 0 and not failed:
            _LOGGER.warning(
                "%s exited with status %d but its output has no failure marker; treating as success",
                command.name,
                returncode,
            )

        return InvocationOutcome(
            tool=command.name,
            argv=tuple(argv),
            returncode=returncode,
            output=output,
            failed=failed,
        ).check()


__all__ = [
    "InvocationOutcome",
    "ProcessInvoker",
    "ToolCommand",
    "WorkingDirectoryLayout",
    "classify_output",
    "failure_marker",
    "java_command",
]
