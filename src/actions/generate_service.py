"""Generate service sources from a service definition file."""

from __future__ import annotations

from pathlib import Path

from contracts.errors import MissingInputError
from invoker.process import WorkingDirectoryLayout, java_command
from invoker.service_builder import build_arguments, sql_dir
from orchestrator.task import ActionContext
from project_config import get_section
from properties.bag import PropertyBag


class GenerateService:
    """Runs the external service generator in a forked JVM.

    The generator writes API and implementation sources, persistence
    metadata under the resource dir, and SQL scripts under the webapp.
    """

    def declare_fields(self, bag: PropertyBag) -> None:
        bag.declare("classpath")
        bag.declare("plugin_name", convert=str)
        bag.declare("service_input_file", convert=Path)
        bag.declare("jalopy_input_file", required=False, convert=Path)
        bag.declare("impl_src_dir", convert=Path)
        bag.declare("api_src_dir", convert=Path)
        bag.declare("resource_dir", convert=Path)
        bag.declare("webapp_dir", convert=Path)

    def execute(self, context: ActionContext) -> Path:
        values = context.values()
        tool = get_section("tools.servicebuilder")

        service_file = values["service_input_file"]
        if not service_file.is_file():
            raise MissingInputError(f"Service definition '{service_file}' does not exist")
        style_file = values["jalopy_input_file"]
        if style_file is not None and not style_file.is_file():
            raise MissingInputError(f"Style configuration '{style_file}' does not exist")

        values["impl_src_dir"].mkdir(parents=True, exist_ok=True)
        sql_dir(values["webapp_dir"]).mkdir(parents=True, exist_ok=True)

        command = java_command(
            "service builder",
            tool["main_class"],
            context.classpath(),
            jvm_properties=tool.get("jvm_properties", ()),
        )
        layout = WorkingDirectoryLayout(
            root=context.project.build_dir / tool["working_dir"],
            style_file=values["jalopy_input_file"],
            style_target=tool["style_file"],
        )
        context.invoker.invoke(command, layout, build_arguments(values))
        return values["impl_src_dir"]


__all__ = ["GenerateService"]
