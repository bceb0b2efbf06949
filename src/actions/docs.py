"""API documentation for the generated service interfaces."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from contracts.errors import MissingInputError
from invoker.process import ToolCommand, WorkingDirectoryLayout
from orchestrator.task import ActionContext
from project_config import get_section
from properties.bag import PropertyBag


class ServiceDocs:
    """Run the documentation tool over the API source directory.

    ``style_tags`` holds custom block tags (``name:placement:header``); the
    build adds its configured tags to any action exposing this list.
    """

    def __init__(self) -> None:
        self.style_tags: List[str] = []

    def declare_fields(self, bag: PropertyBag) -> None:
        bag.declare("source_dir", convert=Path)
        bag.declare("destination_dir", convert=Path)
        bag.declare("classpath", required=False)

    def arguments(self, source_dir: Path, destination_dir: Path, classpath: List[Path]) -> List[str]:
        packages = sorted(path.name for path in source_dir.iterdir() if path.is_dir())
        args = ["-quiet", "-d", str(destination_dir), "-sourcepath", str(source_dir)]
        if classpath:
            args.extend(["-classpath", os.pathsep.join(str(path) for path in classpath)])
        for tag in self.style_tags:
            args.extend(["-tag", tag])
        if packages:
            args.extend(["-subpackages", ":".join(packages)])
        return args

    def execute(self, context: ActionContext) -> Path:
        source_dir = context.value("source_dir")
        destination_dir = context.value("destination_dir")
        if not source_dir.is_dir():
            raise MissingInputError(f"API source directory '{source_dir}' does not exist")
        destination_dir.mkdir(parents=True, exist_ok=True)
        executable = str(get_section("tools.javadoc.executable", default="javadoc"))
        command = ToolCommand(name="javadoc", executable=executable)
        layout = WorkingDirectoryLayout(root=destination_dir.parent / "javadoc-work")
        arguments = self.arguments(source_dir, destination_dir, context.classpath())
        context.invoker.invoke(command, layout, arguments)
        return destination_dir


__all__ = ["ServiceDocs"]
