"""User-facing configuration objects, one per feature area."""

from .portal import LiferayExtension, ServiceBuilderExtension, ThemeExtension
from .registry import ExtensionRegistry
from .settings import Extension, Setting

__all__ = [
    "Extension",
    "ExtensionRegistry",
    "LiferayExtension",
    "ServiceBuilderExtension",
    "Setting",
    "ThemeExtension",
]
