"""Service builder plugin: generate, package and document portal services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from actions.archive import PackageArchive
from actions.docs import ServiceDocs
from actions.generate_service import GenerateService
from extensions.portal import ServiceBuilderExtension

from .base import BUILD_GROUP, LIFERAY_GROUP, WAR_TASK, LiferayBasePlugin, provisioned_classpath

if TYPE_CHECKING:  # pragma: no cover
    from orchestrator.orchestrator import Build

SERVICE_SOURCE_SET = "service"
SERVICE_BUILDER_SET = "servicebuilder"

GENERATE_SERVICE_TASK = "generateService"
JAR_SERVICE_TASK = "jarService"
JAVADOC_SERVICE_TASK = "javadocService"


class ServiceBuilderPlugin:
    """Adds service generation to a portal plugin project.

    Generated API sources go to the ``service`` source set, which is
    packaged into ``<name>-service.jar`` so other plugins can depend on
    it.  The war depends on generation so the generated persistence
    metadata and SQL scripts end up in it.
    """

    def apply(self, build: "Build") -> None:
        build.apply(LiferayBasePlugin)
        build.project.add_source_set(SERVICE_SOURCE_SET)
        build.dependency_sets.create(
            SERVICE_BUILDER_SET, "Classpath of the service generator", visible=False
        )
        build.extensions.create(
            ServiceBuilderExtension.NAME, ServiceBuilderExtension, build.project
        )

        build.declare(
            GENERATE_SERVICE_TASK,
            GenerateService(),
            description="Generates service sources from the service definition",
            group=LIFERAY_GROUP,
        )
        build.declare(
            JAR_SERVICE_TASK,
            PackageArchive(),
            description="Packages the service API",
            group=BUILD_GROUP,
            depends_on=[GENERATE_SERVICE_TASK],
        )
        build.declare(
            JAVADOC_SERVICE_TASK,
            ServiceDocs(),
            description="Documents the service API",
            group="documentation",
            depends_on=[GENERATE_SERVICE_TASK],
        )
        build.depends_on(WAR_TASK, GENERATE_SERVICE_TASK)

        build.wire_defaults("servicebuilder.generate", _wire_generate)
        build.wire_defaults("servicebuilder.jar", _wire_jar)
        build.wire_defaults("servicebuilder.javadoc", _wire_javadoc)


def _wire_generate(build: "Build") -> None:
    project = build.project
    extension = ServiceBuilderExtension.NAME
    for task in build.tasks_of_type(GenerateService):
        bag = task.bag
        bag.bind("plugin_name", fallback=lambda scope: project.name)
        bag.bind(
            "service_input_file",
            extension=extension,
            fallback=lambda scope: project.webapp_dir / "WEB-INF" / "service.xml",
        )
        bag.bind("jalopy_input_file", extension=extension)
        bag.bind(
            "impl_src_dir",
            extension=extension,
            fallback=lambda scope: project.source_set("main").first_source_dir(),
        )
        bag.bind(
            "api_src_dir",
            extension=extension,
            fallback=lambda scope: project.source_set(SERVICE_SOURCE_SET).first_source_dir(),
        )
        bag.bind(
            "resource_dir",
            extension=extension,
            fallback=lambda scope: project.source_set("main").first_resource_dir(),
        )
        bag.bind("webapp_dir", fallback=lambda scope: project.webapp_dir)
        bag.bind("classpath", fallback=provisioned_classpath(build, SERVICE_BUILDER_SET))


def _api_src_dir(build: "Build"):
    def fallback(scope):
        return build.resolver.resolve(build.task(GENERATE_SERVICE_TASK).bag, "api_src_dir")

    return fallback


def _wire_jar(build: "Build") -> None:
    project = build.project
    bag = build.task(JAR_SERVICE_TASK).bag
    bag.bind("source_dir", fallback=_api_src_dir(build))
    bag.bind("archive_file", fallback=lambda scope: project.libs_dir / f"{project.name}-service.jar")


def _wire_javadoc(build: "Build") -> None:
    project = build.project
    bag = build.task(JAVADOC_SERVICE_TASK).bag
    bag.bind("source_dir", fallback=_api_src_dir(build))
    bag.bind("destination_dir", fallback=lambda scope: project.build_dir / "docs" / "serviceJavadoc")
    bag.bind("classpath", fallback=provisioned_classpath(build, SERVICE_BUILDER_SET))


__all__ = [
    "GENERATE_SERVICE_TASK",
    "JAR_SERVICE_TASK",
    "JAVADOC_SERVICE_TASK",
    "SERVICE_BUILDER_SET",
    "SERVICE_SOURCE_SET",
    "ServiceBuilderPlugin",
]
