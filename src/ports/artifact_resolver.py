"""Dependency-resolution port: turn artifact coordinates into files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

from contracts.errors import ArtifactResolutionError
from provisioning.dependency_set import Coordinate

_REPOSITORY_ENV = "PORTAL_BUILD_REPOSITORY"


class ArtifactResolver(Protocol):
    """Resolves a coordinate to a file on the local filesystem."""

    def resolve(self, coordinate: Coordinate) -> Path:
        """Return the file backing ``coordinate``."""


def default_repository() -> Path:
    override = os.environ.get(_REPOSITORY_ENV)
    if override:
        return Path(override)
    return Path.home() / ".m2" / "repository"


class LocalRepositoryResolver:
    """Resolve coordinates against a Maven-layout repository on disk."""

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root) if root is not None else default_repository()

    def path_for(self, coordinate: Coordinate) -> Path:
        group_path = Path(*coordinate.group.split("."))
        filename = f"{coordinate.name}-{coordinate.version}.jar"
        return self.root / group_path / coordinate.name / coordinate.version / filename

    def resolve(self, coordinate: Coordinate) -> Path:
        path = self.path_for(coordinate)
        if not path.exists():
            raise ArtifactResolutionError(
                f"Artifact {coordinate} was not found in repository '{self.root}' (expected {path})"
            )
        return path


__all__ = ["ArtifactResolver", "LocalRepositoryResolver", "default_repository"]
