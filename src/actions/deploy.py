"""Deployment of the packaged plugin to the portal."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, List, Mapping

from contracts.errors import MissingInputError
from extensions.settings import coerce_bool
from invoker.process import WorkingDirectoryLayout, java_command
from orchestrator.task import ActionContext
from project_config import get_section
from properties.bag import PropertyBag

_LOGGER = logging.getLogger(__name__)


def _require_war(war_file: Path) -> None:
    if not war_file.is_file():
        raise MissingInputError(f"Plugin archive '{war_file}' does not exist; run the war task first")


class Deploy:
    """Hot deploy: drop the war into the portal's auto-deploy directory."""

    def declare_fields(self, bag: PropertyBag) -> None:
        bag.declare("war_file", convert=Path)
        bag.declare("auto_deploy_dir", convert=Path)

    def execute(self, context: ActionContext) -> Path:
        war_file = context.value("war_file")
        target_dir = context.value("auto_deploy_dir")
        _require_war(war_file)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / war_file.name
        shutil.copy2(war_file, target)
        _LOGGER.info("deployed %s to %s", war_file.name, target_dir)
        return target


def direct_deploy_arguments(values: Mapping[str, Any]) -> List[str]:
    custom_xml = "true" if values["custom_portlet_xml"] else "false"
    return [
        f"deployer.app.server.type={values['app_server_type']}",
        f"deployer.base.dir={values['app_server_dir']}",
        f"deployer.dest.dir={values['dest_dir']}",
        f"deployer.plugin.type={values['plugin_type']}",
        f"deployer.custom.portlet.xml={custom_xml}",
        f"deployer.war.file={values['war_file']}",
    ]


class DirectDeploy:
    """Deploy straight into the application server using the portal deployer."""

    def declare_fields(self, bag: PropertyBag) -> None:
        bag.declare("classpath")
        bag.declare("app_server_type", convert=str)
        bag.declare("app_server_dir", convert=Path)
        bag.declare("plugin_type", convert=str)
        bag.declare("dest_dir", convert=Path)
        bag.declare("custom_portlet_xml", convert=coerce_bool)
        bag.declare("war_file", convert=Path)

    def execute(self, context: ActionContext) -> Path:
        values = context.values()
        _require_war(values["war_file"])
        tool = get_section("tools.directdeploy")
        command = java_command("direct deploy", tool["main_class"], context.classpath())
        layout = WorkingDirectoryLayout(root=context.project.build_dir / tool["working_dir"])
        context.invoker.invoke(command, layout, direct_deploy_arguments(values))
        return values["dest_dir"]


__all__ = ["Deploy", "DirectDeploy", "direct_deploy_arguments"]
