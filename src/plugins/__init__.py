"""Build plugins for the kinds of portal plugin projects."""

from __future__ import annotations

from typing import Dict

from .base import LiferayBasePlugin
from .portlet import PortletPlugin
from .service_builder import ServiceBuilderPlugin
from .theme import ThemePlugin

# names accepted in the ``plugins`` list of build.toml
PLUGINS: Dict[str, type] = {
    "base": LiferayBasePlugin,
    "portlet": PortletPlugin,
    "servicebuilder": ServiceBuilderPlugin,
    "theme": ThemePlugin,
}

__all__ = [
    "LiferayBasePlugin",
    "PLUGINS",
    "PortletPlugin",
    "ServiceBuilderPlugin",
    "ThemePlugin",
]
