"""Per-project store of extension objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Type, TypeVar

from contracts.errors import DuplicateExtensionError, UnknownExtensionError
from properties.phase import PhaseGate

from .settings import Extension

if TYPE_CHECKING:  # pragma: no cover
    from orchestrator.project import Project

E = TypeVar("E", bound=Extension)


class ExtensionRegistry:
    """Extensions owned by one project scope, keyed by name."""

    def __init__(self, scope: str, phase: PhaseGate) -> None:
        self.scope = scope
        self.phase = phase
        self._extensions: Dict[str, Extension] = {}

    def create(self, name: str, cls: Type[E], project: "Project") -> E:
        self.phase.require_declaring(f"create extension '{name}'")
        if name in self._extensions:
            raise DuplicateExtensionError(
                f"Extension '{name}' already exists in scope '{self.scope}'"
            )
        extension = cls(project, self.phase)
        self._extensions[name] = extension
        return extension

    def get(self, name: str) -> Extension:
        try:
            return self._extensions[name]
        except KeyError:
            raise UnknownExtensionError(
                f"No extension named '{name}' in scope '{self.scope}'"
            ) from None

    def find(self, name: str) -> Optional[Extension]:
        return self._extensions.get(name)

    def by_type(self, cls: Type[E]) -> E:
        for extension in self._extensions.values():
            if isinstance(extension, cls):
                return extension
        raise UnknownExtensionError(
            f"No extension of type {cls.__name__} in scope '{self.scope}'"
        )

    def names(self) -> List[str]:
        return list(self._extensions)

    def __contains__(self, name: object) -> bool:
        return name in self._extensions

    def __iter__(self) -> Iterator[Extension]:
        return iter(self._extensions.values())


__all__ = ["ExtensionRegistry"]
