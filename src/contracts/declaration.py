"""Per-project build declarations (``build.toml``) and their schema."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older versions
    import tomli as tomllib  # type: ignore[import-untyped]

import jsonschema

from extensions.portal import LiferayExtension, ServiceBuilderExtension, ThemeExtension
from extensions.settings import KIND_BOOL, Extension

from .errors import DeclarationError, DeclarationIssue

DECLARATION_FILE = "build.toml"

EXTENSION_TYPES: Sequence[Type[Extension]] = (
    LiferayExtension,
    ServiceBuilderExtension,
    ThemeExtension,
)


@dataclass(frozen=True)
class Declaration:
    """Validated content of a project's build declaration."""

    name: str
    project_dir: Path
    plugins: List[str] = field(default_factory=list)
    build_dir: Optional[Path] = None
    webapp_dir: Optional[Path] = None
    extensions: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    dependencies: Dict[str, List[str]] = field(default_factory=dict)
    tasks: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def _extension_schema(cls: Type[Extension]) -> Dict[str, Any]:
    properties = {
        key: {"type": "boolean"} if setting.kind == KIND_BOOL else {"type": "string"}
        for key, setting in cls.SETTINGS.items()
    }
    return {"type": "object", "properties": properties, "additionalProperties": False}


def declaration_schema(plugin_names: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """JSON Schema (draft 2020-12) for a parsed ``build.toml``."""

    plugin_item: Dict[str, Any] = {"type": "string"}
    if plugin_names is not None:
        plugin_item["enum"] = sorted(plugin_names)

    properties: Dict[str, Any] = {
        "plugins": {"type": "array", "items": plugin_item, "uniqueItems": True},
        "project": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "build_dir": {"type": "string"},
                "webapp_dir": {"type": "string"},
            },
            "required": ["name"],
            "additionalProperties": False,
        },
        "dependencies": {
            "type": "object",
            "additionalProperties": {"type": "array", "items": {"type": "string"}},
        },
        "tasks": {"type": "object", "additionalProperties": {"type": "object"}},
    }
    for cls in EXTENSION_TYPES:
        properties[cls.NAME] = _extension_schema(cls)

    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "$id": "portal-build/declaration",
        "type": "object",
        "properties": properties,
        "required": ["project"],
        "additionalProperties": False,
    }


def _issue_path(error: jsonschema.ValidationError) -> str:
    components: List[str] = ["$"]
    for part in error.absolute_path:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def validate_declaration(
    data: Mapping[str, Any], plugin_names: Optional[Iterable[str]] = None
) -> List[DeclarationIssue]:
    """Return every schema violation in ``data``, ordered by location."""

    validator = jsonschema.Draft202012Validator(declaration_schema(plugin_names))
    errors = sorted(validator.iter_errors(data), key=lambda err: list(map(str, err.absolute_path)))
    return [DeclarationIssue(path=_issue_path(err), msg=err.message) for err in errors]


def _relative(project_dir: Path, value: Optional[str]) -> Optional[Path]:
    if value is None:
        return None
    path = Path(value).expanduser()
    return path if path.is_absolute() else project_dir / path


def parse_declaration(
    data: Mapping[str, Any],
    project_dir: str | Path,
    *,
    source: str = DECLARATION_FILE,
    plugin_names: Optional[Iterable[str]] = None,
) -> Declaration:
    """Validate ``data`` and turn it into a :class:`Declaration`.

    Raises :class:`DeclarationError` listing all issues at once.
    """

    issues = validate_declaration(data, plugin_names)
    if issues:
        raise DeclarationError(source, issues)

    root = Path(project_dir).resolve()
    project = data["project"]
    return Declaration(
        name=project["name"],
        project_dir=root,
        plugins=list(data.get("plugins", [])),
        build_dir=_relative(root, project.get("build_dir")),
        webapp_dir=_relative(root, project.get("webapp_dir")),
        extensions={cls.NAME: dict(data[cls.NAME]) for cls in EXTENSION_TYPES if cls.NAME in data},
        dependencies={name: list(entries) for name, entries in data.get("dependencies", {}).items()},
        tasks={name: dict(values) for name, values in data.get("tasks", {}).items()},
    )


def load_declaration(
    project_dir: str | Path, *, plugin_names: Optional[Iterable[str]] = None
) -> Declaration:
    """Read and validate ``build.toml`` from ``project_dir``."""

    path = Path(project_dir) / DECLARATION_FILE
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        raise DeclarationError(str(path), [DeclarationIssue("$", "file not found")]) from None
    except tomllib.TOMLDecodeError as exc:
        raise DeclarationError(str(path), [DeclarationIssue("$", str(exc))]) from exc
    return parse_declaration(data, project_dir, source=str(path), plugin_names=plugin_names)


__all__ = [
    "DECLARATION_FILE",
    "Declaration",
    "EXTENSION_TYPES",
    "declaration_schema",
    "load_declaration",
    "parse_declaration",
    "validate_declaration",
]
