"""Lazy, memoized resolution of property bag fields."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Tuple

from contracts.errors import ResolutionCycleError, UnresolvedFieldError

from .bag import Field, PropertyBag
from .phase import PhaseGate

if TYPE_CHECKING:  # pragma: no cover
    from extensions.registry import ExtensionRegistry

_LOGGER = logging.getLogger(__name__)


class ResolutionScope:
    """What a fallback computation is allowed to see."""

    def __init__(self, resolver: "LazyResolver", bag: PropertyBag) -> None:
        self._resolver = resolver
        self._bag = bag

    @property
    def owner(self) -> str:
        return self._bag.owner

    def field(self, name: str) -> Any:
        """Resolve a sibling field of the same bag."""

        return self._resolver.resolve(self._bag, name)

    def extension(self, name: str) -> Any:
        return self._resolver.registry.get(name)


class LazyResolver:
    """Compute field values on first read, walking the precedence chain.

    Order: explicit value on the bag, then the bound extension setting
    (read now, not when the task was declared), then the fallback
    function.  Required fields with no value raise
    :class:`UnresolvedFieldError`; optional ones resolve to ``None``.
    """

    def __init__(self, registry: ExtensionRegistry, phase: PhaseGate) -> None:
        self.registry = registry
        self._phase = phase

    def resolve(self, bag: PropertyBag, name: str) -> Any:
        self._phase.require_resolving(f"resolve '{name}' of '{bag.owner}'")
        with bag._lock:
            if name in bag._values:
                return bag._values[name]
            field = bag.field(name)
            if name in bag._resolving:
                raise ResolutionCycleError(bag.owner, [*bag._resolving, name])
            bag._resolving.append(name)
            try:
                value, source = self._compute(bag, field)
            finally:
                bag._resolving.pop()
            if value is not None and field.convert is not None:
                value = field.convert(value)
            bag._values[name] = value
        _LOGGER.debug("resolved %s.%s from %s: %r", bag.owner, name, source, value)
        return value

    def resolve_all(self, bag: PropertyBag) -> Dict[str, Any]:
        return {name: self.resolve(bag, name) for name in bag.names()}

    def _compute(self, bag: PropertyBag, field: Field) -> Tuple[Any, str]:
        if field.has_explicit:
            return field.explicit, "explicit"

        if field.extension is not None:
            extension = self.registry.get(field.extension)
            value = extension.get(field.setting or field.name)
            if value is not None:
                return value, "extension"

        if field.fallback is not None:
            value = field.fallback(ResolutionScope(self, bag))
            if value is not None:
                return value, "fallback"

        if field.required:
            raise UnresolvedFieldError(bag.owner, field.name)
        return None, "unset"


__all__ = ["LazyResolver", "ResolutionScope"]
