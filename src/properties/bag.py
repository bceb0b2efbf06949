"""Property bags: the resolvable set of typed inputs owned by one task."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from contracts.errors import FrozenFieldError

_UNSET: Any = object()


@dataclass
class Field:
    """Single configurable input and the sources it may resolve from."""

    name: str
    required: bool = True
    convert: Optional[Callable[[Any], Any]] = None
    explicit: Any = _UNSET
    extension: Optional[str] = None
    setting: Optional[str] = None
    fallback: Optional[Callable[[Any], Any]] = None

    @property
    def has_explicit(self) -> bool:
        return self.explicit is not _UNSET


class PropertyBag:
    """Named, typed key-value store for one task's configurable inputs.

    Fields are declared up front, populated incrementally while the build
    is being declared and frozen the first time they are read through a
    :class:`properties.resolver.LazyResolver`.
    """

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._fields: Dict[str, Field] = {}
        self._values: Dict[str, Any] = {}
        self._resolving: List[str] = []
        self._lock = threading.RLock()

    def declare(
        self,
        name: str,
        *,
        required: bool = True,
        convert: Optional[Callable[[Any], Any]] = None,
    ) -> Field:
        if name in self._fields:
            raise ValueError(f"Field '{name}' is already declared on '{self.owner}'")
        field = Field(name=name, required=required, convert=convert)
        self._fields[name] = field
        return field

    def field(self, name: str) -> Field:
        try:
            return self._fields[name]
        except KeyError:
            raise KeyError(f"'{self.owner}' has no field named '{name}'") from None

    def set(self, name: str, value: Any) -> None:
        """Assign an explicit value; ``None`` clears it."""

        field = self.field(name)
        with self._lock:
            if name in self._values:
                raise FrozenFieldError(
                    f"Field '{name}' of '{self.owner}' was already resolved and cannot change"
                )
            field.explicit = _UNSET if value is None else value

    def bind(
        self,
        name: str,
        *,
        extension: Optional[str] = None,
        setting: Optional[str] = None,
        fallback: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        """Attach the extension default and computed fallback for ``name``."""

        field = self.field(name)
        if extension is not None:
            field.extension = extension
            field.setting = setting or name
        if fallback is not None:
            field.fallback = fallback

    def names(self) -> List[str]:
        return list(self._fields)

    def is_explicit(self, name: str) -> bool:
        return self.field(name).has_explicit

    def is_resolved(self, name: str) -> bool:
        return name in self._values

    def snapshot(self) -> Mapping[str, Any]:
        """Read-only view of the values resolved so far."""

        with self._lock:
            return MappingProxyType(dict(self._values))

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __repr__(self) -> str:
        return f"PropertyBag(owner={self.owner!r}, fields={self.names()!r})"


__all__ = ["Field", "PropertyBag"]
