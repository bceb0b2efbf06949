"""Dependency sets and the provisioner that fills them."""

from .dependency_set import Coordinate, DependencySet, DependencySets
from .provisioner import Provisioner

__all__ = ["Coordinate", "DependencySet", "DependencySets", "Provisioner"]
