"""Turn a validated build declaration into a ready-to-run :class:`Build`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

from contracts.declaration import Declaration, load_declaration
from contracts.errors import DeclarationError, DeclarationIssue
from orchestrator.orchestrator import Build
from orchestrator.project import Project
from provisioning.dependency_set import Coordinate, Entry, as_entry

from . import PLUGINS

_LOGGER = logging.getLogger(__name__)


def _anchored(project_dir: Path, value: str | Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else project_dir / path


def _anchor_entry(project_dir: Path, value: str) -> Entry:
    entry = as_entry(value)
    if isinstance(entry, Coordinate):
        return entry
    return _anchored(project_dir, entry)


def _task_value(project_dir: Path, convert: Optional[Callable[[Any], Any]], value: Any) -> Any:
    """Declared task input, converted; path inputs are taken relative to the project."""

    if convert is Path:
        return _anchored(project_dir, value)
    return convert(value) if convert is not None else value


def build_from_declaration(declaration: Declaration, **build_kwargs: Any) -> Build:
    """Apply the declared plugins and copy declared values onto the build.

    Values land as explicit settings, so they outrank every computed
    default.  The build is left in the declaration phase; callers may
    keep configuring it before running.
    """

    project = Project(
        declaration.name,
        declaration.project_dir,
        build_dir=declaration.build_dir,
        webapp_dir=declaration.webapp_dir,
    )
    build = Build(project, **build_kwargs)
    for name in declaration.plugins or ["base"]:
        build.apply(PLUGINS[name])
    if declaration.webapp_dir is not None:
        project.webapp_dir = declaration.webapp_dir

    issues: List[DeclarationIssue] = []
    for name, values in declaration.extensions.items():
        if name not in build.extensions:
            issues.append(DeclarationIssue(f"$.{name}", "no applied plugin provides this extension"))
            continue
        build.extensions.get(name).update(values)

    for name, entries in declaration.dependencies.items():
        if name not in build.dependency_sets:
            issues.append(DeclarationIssue(f"$.dependencies.{name}", "unknown dependency set"))
            continue
        build.dependency_sets.get(name).extend(
            _anchor_entry(project.project_dir, entry) for entry in entries
        )

    for task_name, values in declaration.tasks.items():
        task = build.find_task(task_name)
        if task is None:
            issues.append(DeclarationIssue(f"$.tasks.{task_name}", "unknown task"))
            continue
        for key, value in values.items():
            if key not in task.bag:
                issues.append(DeclarationIssue(f"$.tasks.{task_name}.{key}", "unknown task input"))
                continue
            try:
                task.bag.set(key, _task_value(project.project_dir, task.bag.field(key).convert, value))
            except (TypeError, ValueError) as exc:
                issues.append(DeclarationIssue(f"$.tasks.{task_name}.{key}", str(exc)))

    if issues:
        raise DeclarationError(str(project.project_dir), issues)
    _LOGGER.debug("declared %d task(s) for %s", len(build.tasks()), project.name)
    return build


def load_build(project_dir: str | Path, **build_kwargs: Any) -> Build:
    """Read ``build.toml`` from ``project_dir`` and build from it."""

    declaration = load_declaration(project_dir, plugin_names=PLUGINS)
    return build_from_declaration(declaration, **build_kwargs)


__all__ = ["build_from_declaration", "load_build"]
