"""Portlet plugin: compile Sass sources before the war is assembled."""

from __future__ import annotations

from typing import TYPE_CHECKING

from actions.sass import SassToCss
from extensions.portal import LiferayExtension

from .base import LIFERAY_GROUP, WAR_TASK, LiferayBasePlugin, provisioned_classpath

if TYPE_CHECKING:  # pragma: no cover
    from orchestrator.orchestrator import Build

SASS_SET = "sass"
SASS_TO_CSS_TASK = "sassToCss"


class PortletPlugin:
    def apply(self, build: "Build") -> None:
        build.apply(LiferayBasePlugin)
        build.dependency_sets.create(SASS_SET, "Classpath of the Sass compiler", visible=False)
        build.declare(
            SASS_TO_CSS_TASK,
            SassToCss(),
            description="Compiles Sass files to CSS",
            group=LIFERAY_GROUP,
        )
        build.depends_on(WAR_TASK, SASS_TO_CSS_TASK)
        build.wire_defaults("portlet.sass", _wire_sass)


def _wire_sass(build: "Build") -> None:
    project = build.project
    for task in build.tasks_of_type(SassToCss):
        task.bag.bind("sass_dir", fallback=lambda scope: project.webapp_dir)
        task.bag.bind("app_server_portal_dir", extension=LiferayExtension.NAME)
        task.bag.bind("classpath", fallback=provisioned_classpath(build, SASS_SET))


__all__ = ["PortletPlugin", "SASS_SET", "SASS_TO_CSS_TASK"]
