"""Compile the portlet's Sass sources to CSS with the portal's builder."""

from __future__ import annotations

from pathlib import Path

from invoker.process import WorkingDirectoryLayout, java_command
from orchestrator.task import ActionContext
from project_config import get_section
from properties.bag import PropertyBag


class SassToCss:
    def declare_fields(self, bag: PropertyBag) -> None:
        bag.declare("classpath")
        bag.declare("sass_dir", convert=Path)
        bag.declare("app_server_portal_dir", convert=Path)

    def execute(self, context: ActionContext) -> Path:
        values = context.values()
        tool = get_section("tools.sass")
        command = java_command("sass to css", tool["main_class"], context.classpath())
        layout = WorkingDirectoryLayout(root=context.project.build_dir / tool["working_dir"])
        common_dir = values["app_server_portal_dir"] / "html" / "css" / "common"
        arguments = [
            f"sass.dir={values['sass_dir']}",
            f"sass.portal.common.dir={common_dir}",
        ]
        context.invoker.invoke(command, layout, arguments)
        return values["sass_dir"]


__all__ = ["SassToCss"]
