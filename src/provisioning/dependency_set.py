"""Named, ordered dependency sets (tool classpaths and the like)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover
    from ports.artifact_resolver import ArtifactResolver


@dataclass(frozen=True)
class Coordinate:
    """Artifact coordinate in ``group:name:version`` form."""

    group: str
    name: str
    version: str

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        parts = text.strip().split(":")
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Invalid artifact coordinate '{text}', expected group:name:version")
        return cls(*parts)

    def __str__(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"


Entry = Union[Coordinate, Path]


def as_entry(value: Union[str, Path, Coordinate]) -> Entry:
    """Interpret ``value`` as a coordinate or file reference."""

    if isinstance(value, (Coordinate, Path)):
        return value
    text = str(value)
    if text.count(":") == 2 and "/" not in text and "\\" not in text:
        return Coordinate.parse(text)
    return Path(text)


class DependencySet:
    """Ordered collection of coordinates and files.

    A set counts as provisioned as soon as it holds any entry, whether the
    user put it there or the provisioner did.
    """

    def __init__(self, name: str, description: str = "", visible: bool = True) -> None:
        self.name = name
        self.description = description
        self.visible = visible
        self._entries: List[Entry] = []

    def add(self, value: Union[str, Path, Coordinate]) -> None:
        self._entries.append(as_entry(value))

    def extend(self, values: Iterable[Union[str, Path, Coordinate]]) -> None:
        for value in values:
            self.add(value)

    def is_empty(self) -> bool:
        return not self._entries

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def files(self, resolver: "ArtifactResolver") -> List[Path]:
        """Resolve every entry to a file, dropping duplicates in order."""

        seen: set[Path] = set()
        result: List[Path] = []
        for entry in self._entries:
            path = resolver.resolve(entry) if isinstance(entry, Coordinate) else entry
            if path in seen:
                continue
            seen.add(path)
            result.append(path)
        return result

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"DependencySet(name={self.name!r}, entries={len(self._entries)})"


class DependencySets:
    """Store of the dependency sets declared for one project."""

    def __init__(self) -> None:
        self._sets: Dict[str, DependencySet] = {}

    def create(self, name: str, description: str = "", visible: bool = True) -> DependencySet:
        if name in self._sets:
            raise ValueError(f"Dependency set '{name}' already exists")
        dependency_set = DependencySet(name, description, visible)
        self._sets[name] = dependency_set
        return dependency_set

    def get(self, name: str) -> DependencySet:
        try:
            return self._sets[name]
        except KeyError:
            raise KeyError(f"No dependency set named '{name}'") from None

    def names(self) -> List[str]:
        return list(self._sets)

    def __contains__(self, name: object) -> bool:
        return name in self._sets


__all__ = ["Coordinate", "DependencySet", "DependencySets", "Entry", "as_entry"]
