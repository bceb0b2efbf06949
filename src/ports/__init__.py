"""Narrow interfaces to the collaborators this layer does not own."""

from __future__ import annotations

from ._utils import child_env
from .artifact_resolver import ArtifactResolver, LocalRepositoryResolver
from .packager import Packager, ZipPackager

__all__ = [
    "ArtifactResolver",
    "LocalRepositoryResolver",
    "Packager",
    "ZipPackager",
    "child_env",
]
