"""Property bags and the lazy resolver that freezes their values."""

from .bag import Field, PropertyBag
from .phase import BuildPhase, PhaseGate
from .resolver import LazyResolver, ResolutionScope

__all__ = [
    "BuildPhase",
    "Field",
    "LazyResolver",
    "PhaseGate",
    "PropertyBag",
    "ResolutionScope",
]
