"""Theme plugin: assemble a portal theme from a parent theme and local diffs."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from actions.theme import BuildThumbnail, MergeTheme
from extensions.portal import LiferayExtension, ThemeExtension
from orchestrator.gate import presence_gate

from .base import LIFERAY_GROUP, WAR_TASK, LiferayBasePlugin

if TYPE_CHECKING:  # pragma: no cover
    from orchestrator.orchestrator import Build

MERGE_THEME_TASK = "mergeTheme"
BUILD_THUMBNAIL_TASK = "buildThumbnail"


def _diffs_thumbnail(snapshot):
    return Path(snapshot["diffs_dir"]) / "images" / "thumbnail.png"


class ThemePlugin:
    """Theme projects package a merged webapp built under the build dir."""

    def apply(self, build: "Build") -> None:
        build.apply(LiferayBasePlugin)
        project = build.project
        project.webapp_dir = project.build_dir / "webapp"
        build.extensions.create(ThemeExtension.NAME, ThemeExtension, project)

        build.declare(
            MERGE_THEME_TASK,
            MergeTheme(),
            description="Merges the parent theme with the theme diffs",
            group=LIFERAY_GROUP,
        )
        build.declare(
            BUILD_THUMBNAIL_TASK,
            BuildThumbnail(),
            description="Scales the theme screenshot into its thumbnail",
            group=LIFERAY_GROUP,
            depends_on=[MERGE_THEME_TASK],
            # a thumbnail shipped in the diffs wins over a generated one
            gate=presence_gate("original_file", _diffs_thumbnail),
        )
        build.depends_on(WAR_TASK, BUILD_THUMBNAIL_TASK)

        build.wire_defaults("theme.merge", _wire_merge)
        build.wire_defaults("theme.thumbnail", _wire_thumbnail)


def _wire_merge(build: "Build") -> None:
    project = build.project
    bag = build.task(MERGE_THEME_TASK).bag
    for name in ("theme_type", "parent_theme_name", "diffs_dir"):
        bag.bind(name, extension=ThemeExtension.NAME)
    bag.bind("app_server_portal_dir", extension=LiferayExtension.NAME)
    bag.bind("output_dir", fallback=lambda scope: project.webapp_dir)


def _wire_thumbnail(build: "Build") -> None:
    project = build.project
    bag = build.task(BUILD_THUMBNAIL_TASK).bag
    bag.bind("diffs_dir", extension=ThemeExtension.NAME)
    bag.bind(
        "original_file",
        fallback=lambda scope: scope.field("diffs_dir") / "images" / "screenshot.png",
    )
    bag.bind(
        "thumbnail_file",
        fallback=lambda scope: project.webapp_dir / "images" / "thumbnail.png",
    )
    bag.bind(
        "classpath",
        fallback=lambda scope: scope.extension(LiferayExtension.NAME).portal_classpath(),
    )


__all__ = ["BUILD_THUMBNAIL_TASK", "MERGE_THEME_TASK", "ThemePlugin"]
