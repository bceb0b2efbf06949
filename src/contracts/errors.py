"""Shared error types for the build layer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Sequence


class BuildError(RuntimeError):
    """Base class for every failure raised by the build layer."""


class PhaseError(BuildError):
    """Raised when an operation is attempted in the wrong build phase."""


class UnresolvedFieldError(BuildError):
    """A required input had no explicit value, extension default or fallback."""

    def __init__(self, owner: str, field: str) -> None:
        super().__init__(
            f"Field '{field}' of '{owner}' has no explicit value, extension default or fallback"
        )
        self.owner = owner
        self.field = field


class ResolutionCycleError(BuildError):
    """Fallback computations for a bag reference each other."""

    def __init__(self, owner: str, chain: Sequence[str]) -> None:
        super().__init__(f"Cyclic fallback in '{owner}': {' -> '.join(chain)}")
        self.owner = owner
        self.chain = list(chain)


class FrozenFieldError(BuildError):
    """An explicit value was assigned after the field was resolved."""


class UnknownExtensionError(BuildError):
    """No extension with the requested name exists in the registry."""


class DuplicateExtensionError(BuildError):
    """An extension with the same name was already registered."""


class UnknownSettingError(BuildError):
    """The extension does not recognise the setting key."""


class MissingPlatformArtifactError(BuildError):
    """A local platform artifact required for provisioning does not exist."""

    def __init__(self, artifact: Path, platform_root: Path | None) -> None:
        super().__init__(
            f"Platform artifact '{artifact}' was not found (configured platform root: {platform_root})"
        )
        self.artifact = artifact
        self.platform_root = platform_root


class ArtifactResolutionError(BuildError):
    """A dependency coordinate could not be resolved to a file."""


class MissingInputError(BuildError):
    """A file or directory a task reads does not exist."""


class ToolInvocationError(BuildError):
    """The external tool reported a failure in its captured output."""

    def __init__(self, tool: str, output: str) -> None:
        super().__init__(f"{tool} failed:\n{output}")
        self.tool = tool
        self.output = output


class ToolLaunchError(ToolInvocationError):
    """The external tool could not be started at all."""

    def __init__(self, tool: str, executable: str, cause: OSError) -> None:
        super().__init__(tool, f"could not start '{executable}': {cause}")
        self.executable = executable


class DuplicateTaskError(BuildError):
    """A task with the same name was already declared."""


class TaskGraphError(BuildError):
    """The task graph references unknown tasks or contains a cycle."""


@dataclass(frozen=True)
class DeclarationIssue:
    """Single problem found in a build declaration file."""

    path: str
    msg: str


class DeclarationError(BuildError):
    """The build declaration file is malformed."""

    def __init__(self, source: str, issues: List[DeclarationIssue]) -> None:
        details = "; ".join(f"{issue.path}: {issue.msg}" for issue in issues)
        super().__init__(f"Invalid build declaration '{source}': {details}")
        self.source = source
        self.issues = issues


class BuildFailedError(BuildError):
    """One or more tasks failed; carries the full build report."""

    def __init__(self, report: Any) -> None:
        failed = ", ".join(report.failed_tasks())
        super().__init__(f"Build failed in task(s): {failed}")
        self.report = report


@dataclass(frozen=True)
class ExecutionGateSkip:
    """Record of a task whose gate decided there was no pending work."""

    task: str
    reason: str


__all__ = [
    "ArtifactResolutionError",
    "BuildError",
    "BuildFailedError",
    "DeclarationError",
    "DeclarationIssue",
    "DuplicateExtensionError",
    "DuplicateTaskError",
    "ExecutionGateSkip",
    "FrozenFieldError",
    "MissingInputError",
    "MissingPlatformArtifactError",
    "PhaseError",
    "ResolutionCycleError",
    "TaskGraphError",
    "ToolInvocationError",
    "ToolLaunchError",
    "UnknownExtensionError",
    "UnknownSettingError",
    "UnresolvedFieldError",
]
