"""Base class for user-facing extension objects."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, Mapping, Optional

from contracts.errors import UnknownSettingError
from properties.phase import PhaseGate

if TYPE_CHECKING:  # pragma: no cover
    from orchestrator.project import Project

KIND_STR = "str"
KIND_PATH = "path"
KIND_BOOL = "bool"


@dataclass(frozen=True)
class Setting:
    """Declared setting: its kind and how its default is obtained."""

    kind: str = KIND_STR
    default: Any = None
    derive: Optional[Callable[["Extension"], Any]] = None
    description: str = ""


def coerce_bool(value: Any) -> bool:
    """Accept real booleans and the usual on/off spellings."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in {"1", "true", "yes", "on"}:
            return True
        if normalised in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean")


class Extension:
    """Named group of settings for one feature area.

    Subclasses list their recognised keys in :attr:`SETTINGS`.  Values set
    by the user win; otherwise the static default applies, and failing
    that the ``derive`` function computes one from the project (or from
    sibling settings) at the moment the value is read.
    """

    NAME: ClassVar[str] = ""
    SETTINGS: ClassVar[Mapping[str, Setting]] = {}

    def __init__(self, project: "Project", phase: PhaseGate) -> None:
        self.project = project
        self._phase = phase
        self._values: Dict[str, Any] = {}

    def _setting(self, key: str) -> Setting:
        try:
            return self.SETTINGS[key]
        except KeyError:
            raise UnknownSettingError(
                f"Extension '{self.NAME}' has no setting '{key}' "
                f"(known: {', '.join(sorted(self.SETTINGS))})"
            ) from None

    def _coerce(self, setting: Setting, value: Any) -> Any:
        if setting.kind == KIND_BOOL:
            return coerce_bool(value)
        if setting.kind == KIND_PATH:
            path = Path(value).expanduser()
            if not path.is_absolute():
                path = self.project.project_dir / path
            return path
        return str(value)

    def set(self, key: str, value: Any) -> None:
        setting = self._setting(key)
        self._phase.require_declaring(f"change '{self.NAME}.{key}'")
        if value is None:
            self._values.pop(key, None)
            return
        self._values[key] = self._coerce(setting, value)

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def get(self, key: str) -> Any:
        setting = self._setting(key)
        if key in self._values:
            return self._values[key]
        if setting.default is not None:
            return setting.default
        if setting.derive is not None:
            derived = setting.derive(self)
            if derived is not None:
                return derived
        return None

    def is_set(self, key: str) -> bool:
        self._setting(key)
        return key in self._values

    def as_dict(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in self.SETTINGS}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"


__all__ = ["Extension", "KIND_BOOL", "KIND_PATH", "KIND_STR", "Setting", "coerce_bool"]
