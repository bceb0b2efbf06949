"""Packaging through the packager port."""

from __future__ import annotations

from pathlib import Path

from orchestrator.task import ActionContext
from properties.bag import PropertyBag


class PackageArchive:
    """Archive ``source_dir`` into ``archive_file``."""

    def declare_fields(self, bag: PropertyBag) -> None:
        bag.declare("source_dir", convert=Path)
        bag.declare("archive_file", convert=Path)

    def execute(self, context: ActionContext) -> Path:
        source = context.value("source_dir")
        archive = context.value("archive_file")
        return context.packager.package(source, archive)


__all__ = ["PackageArchive"]
