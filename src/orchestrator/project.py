"""Minimal project model: directories and source sets."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass
class SourceSet:
    """Named group of source and resource directories."""

    name: str
    source_dirs: List[Path] = field(default_factory=list)
    resource_dirs: List[Path] = field(default_factory=list)

    def first_source_dir(self) -> Optional[Path]:
        return self.source_dirs[0] if self.source_dirs else None

    def first_resource_dir(self) -> Optional[Path]:
        return self.resource_dirs[0] if self.resource_dirs else None


class Project:
    """The plugin project being built."""

    def __init__(
        self,
        name: str,
        project_dir: str | Path,
        *,
        build_dir: str | Path | None = None,
        webapp_dir: str | Path | None = None,
    ) -> None:
        self.name = name
        self.project_dir = Path(project_dir).resolve()
        self.build_dir = Path(build_dir) if build_dir else self.project_dir / "build"
        self.webapp_dir = Path(webapp_dir) if webapp_dir else self.project_dir / "src" / "main" / "webapp"
        self.source_sets: Dict[str, SourceSet] = {}
        self.add_source_set("main")

    def add_source_set(self, name: str) -> SourceSet:
        existing = self.source_sets.get(name)
        if existing is not None:
            return existing
        base = self.project_dir / "src" / name
        source_set = SourceSet(
            name=name,
            source_dirs=[base / "java"],
            resource_dirs=[base / "resources"],
        )
        self.source_sets[name] = source_set
        return source_set

    def source_set(self, name: str) -> SourceSet:
        try:
            return self.source_sets[name]
        except KeyError:
            raise KeyError(f"Project '{self.name}' has no source set '{name}'") from None

    @property
    def libs_dir(self) -> Path:
        return self.build_dir / "libs"

    def __repr__(self) -> str:
        return f"Project(name={self.name!r}, project_dir={str(self.project_dir)!r})"


__all__ = ["Project", "SourceSet"]
