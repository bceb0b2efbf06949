"""Theme assembly: merge the parent theme with local diffs, build a thumbnail."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from contracts.errors import MissingPlatformArtifactError
from invoker.process import WorkingDirectoryLayout, java_command
from orchestrator.task import ActionContext
from project_config import get_section
from properties.bag import PropertyBag

_LOGGER = logging.getLogger(__name__)

_BASE_THEME = "_unstyled"
_TEMPLATE_TYPES = ("vm", "ftl")


def theme_dir(portal_dir: Path, name: str) -> Path:
    return Path(portal_dir) / "html" / "themes" / name


def _prune_templates(templates_dir: Path, theme_type: str) -> None:
    # keep only the templates of the configured engine
    if not templates_dir.is_dir():
        return
    for path in templates_dir.iterdir():
        suffix = path.suffix.lstrip(".")
        if path.is_file() and suffix in _TEMPLATE_TYPES and suffix != theme_type:
            path.unlink()


class MergeTheme:
    """Copy the parent theme out of the portal, then overlay the diffs.

    Themes other than the base theme are layered on top of it, so the
    base is copied first when it is available.
    """

    def declare_fields(self, bag: PropertyBag) -> None:
        bag.declare("theme_type", convert=str)
        bag.declare("parent_theme_name", convert=str)
        bag.declare("diffs_dir", convert=Path)
        bag.declare("output_dir", convert=Path)
        bag.declare("app_server_portal_dir", convert=Path)

    def execute(self, context: ActionContext) -> Path:
        values = context.values()
        portal_dir = values["app_server_portal_dir"]
        parent = theme_dir(portal_dir, values["parent_theme_name"])
        if not parent.is_dir():
            raise MissingPlatformArtifactError(parent, portal_dir)

        output_dir = values["output_dir"]
        output_dir.mkdir(parents=True, exist_ok=True)

        base = theme_dir(portal_dir, _BASE_THEME)
        if parent != base and base.is_dir():
            shutil.copytree(base, output_dir, dirs_exist_ok=True)
        shutil.copytree(parent, output_dir, dirs_exist_ok=True)

        diffs_dir = values["diffs_dir"]
        if diffs_dir.is_dir():
            shutil.copytree(diffs_dir, output_dir, dirs_exist_ok=True)
        else:
            _LOGGER.warning("theme diffs directory %s does not exist; using the parent theme as is", diffs_dir)

        _prune_templates(output_dir / "templates", values["theme_type"])
        return output_dir


class BuildThumbnail:
    """Scale the theme screenshot down to the thumbnail the portal shows."""

    def declare_fields(self, bag: PropertyBag) -> None:
        bag.declare("classpath")
        bag.declare("diffs_dir", convert=Path)
        bag.declare("original_file", convert=Path)
        bag.declare("thumbnail_file", convert=Path)

    def execute(self, context: ActionContext) -> Path:
        values = context.values()
        tool = get_section("tools.thumbnail")
        thumbnail = values["thumbnail_file"]
        thumbnail.parent.mkdir(parents=True, exist_ok=True)
        command = java_command("thumbnail builder", tool["main_class"], context.classpath())
        layout = WorkingDirectoryLayout(root=context.project.build_dir / tool["working_dir"])
        arguments = [
            f"thumbnail.original.file={values['original_file']}",
            f"thumbnail.thumbnail.file={thumbnail}",
            f"thumbnail.height={tool['height']}",
            f"thumbnail.width={tool['width']}",
            "thumbnail.overwrite=false",
        ]
        context.invoker.invoke(command, layout, arguments)
        return thumbnail


__all__ = ["BuildThumbnail", "MergeTheme", "theme_dir"]
