"""Base portal plugin: the deployment-target extension, packaging and deploy tasks."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable

from actions.archive import PackageArchive
from actions.deploy import Deploy, DirectDeploy
from extensions.portal import LiferayExtension
from project_config import get_section
from properties.resolver import ResolutionScope
from provisioning.dependency_set import DependencySet
from provisioning.provisioner import Provisioner

if TYPE_CHECKING:  # pragma: no cover
    from orchestrator.orchestrator import Build

LIFERAY_GROUP = "liferay"
BUILD_GROUP = "build"

WAR_TASK = "war"
DEPLOY_TASK = "deploy"
DIRECT_DEPLOY_TASK = "directdeploy"
DIRECT_DEPLOY_SET = "directdeploy"


def provisioned_classpath(build: "Build", set_name: str) -> Callable[[ResolutionScope], DependencySet]:
    """Fallback that provisions dependency set ``set_name`` on first use.

    Tasks sharing the set all point at this fallback; only the first
    resolution finds the set empty.  Entries the user declared suppress
    provisioning entirely.
    """

    def fallback(scope: ResolutionScope) -> DependencySet:
        dependency_set = build.dependency_sets.get(set_name)
        if dependency_set.is_empty():
            liferay = build.extensions.by_type(LiferayExtension)
            config = get_section(f"provisioning.{set_name}")
            local = [
                *liferay.portal_classpath(),
                *(liferay.global_lib(name) for name in config.get("global_libs", [])),
            ]
            Provisioner(liferay.platform_root()).ensure_provisioned(
                dependency_set, config.get("required", []), local
            )
        return dependency_set

    return fallback


def war_archive(build: "Build") -> Callable[[ResolutionScope], Path]:
    """Fallback pointing at the archive produced by the war task."""

    def fallback(scope: ResolutionScope) -> Path:
        return build.resolver.resolve(build.task(WAR_TASK).bag, "archive_file")

    return fallback


class LiferayBasePlugin:
    """Registers the ``liferay`` extension and the deploy tasks.

    Usually applied indirectly by the plugin matching the kind of portal
    plugin being developed.
    """

    def apply(self, build: "Build") -> None:
        build.extensions.create(LiferayExtension.NAME, LiferayExtension, build.project)
        build.dependency_sets.create(DIRECT_DEPLOY_SET, "Direct deploy configuration", visible=False)

        build.declare(WAR_TASK, PackageArchive(), description="Assembles the plugin war", group=BUILD_GROUP)
        build.declare(
            DEPLOY_TASK,
            Deploy(),
            description="Deploys the plugin",
            group=LIFERAY_GROUP,
            depends_on=[WAR_TASK],
        )
        build.declare(
            DIRECT_DEPLOY_TASK,
            DirectDeploy(),
            description="Deploys the plugin directly into the application server",
            group=LIFERAY_GROUP,
            depends_on=[WAR_TASK],
        )

        build.wire_defaults("liferay.war", _wire_war)
        build.wire_defaults("liferay.deploy", _wire_deploy)
        build.wire_defaults("liferay.directdeploy", _wire_direct_deploy)


def _wire_war(build: "Build") -> None:
    project = build.project
    bag = build.task(WAR_TASK).bag
    bag.bind("source_dir", fallback=lambda scope: project.webapp_dir)
    bag.bind("archive_file", fallback=lambda scope: project.libs_dir / f"{project.name}.war")


def _wire_deploy(build: "Build") -> None:
    for task in build.tasks_of_type(Deploy):
        task.bag.bind("auto_deploy_dir", extension=LiferayExtension.NAME)
        task.bag.bind("war_file", fallback=war_archive(build))


def _wire_direct_deploy(build: "Build") -> None:
    for task in build.tasks_of_type(DirectDeploy):
        bag = task.bag
        for name in ("app_server_type", "plugin_type", "app_server_dir", "custom_portlet_xml"):
            bag.bind(name, extension=LiferayExtension.NAME)
        bag.bind("dest_dir", extension=LiferayExtension.NAME, setting="dest_dir_name")
        bag.bind("classpath", fallback=provisioned_classpath(build, DIRECT_DEPLOY_SET))
        bag.bind("war_file", fallback=war_archive(build))


__all__ = [
    "BUILD_GROUP",
    "DEPLOY_TASK",
    "DIRECT_DEPLOY_SET",
    "DIRECT_DEPLOY_TASK",
    "LIFERAY_GROUP",
    "LiferayBasePlugin",
    "WAR_TASK",
    "provisioned_classpath",
    "war_archive",
]
