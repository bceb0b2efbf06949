"""Error taxonomy and build declaration contracts."""

from __future__ import annotations

from .errors import (
    ArtifactResolutionError,
    BuildError,
    BuildFailedError,
    DeclarationError,
    DeclarationIssue,
    DuplicateExtensionError,
    DuplicateTaskError,
    ExecutionGateSkip,
    FrozenFieldError,
    MissingInputError,
    MissingPlatformArtifactError,
    PhaseError,
    ResolutionCycleError,
    TaskGraphError,
    ToolInvocationError,
    ToolLaunchError,
    UnknownExtensionError,
    UnknownSettingError,
    UnresolvedFieldError,
)

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
