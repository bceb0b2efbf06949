from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from conftest import FakeRunner
from contracts.errors import BuildFailedError, MissingInputError, MissingPlatformArtifactError
from invoker.process import ProcessInvoker
from orchestrator.task import TaskState
from plugins import PortletPlugin, ServiceBuilderPlugin, ThemePlugin
from plugins.base import LiferayBasePlugin


def _service_project(build) -> Path:
    webapp = build.project.webapp_dir
    (webapp / "WEB-INF").mkdir(parents=True)
    (webapp / "WEB-INF" / "service.xml").write_text("<service-builder/>", encoding="utf-8")
    (webapp / "view.jsp").write_text("<p>hello</p>", encoding="utf-8")
    return webapp


def test_base_plugin_declares_packaging_and_deploy(make_build):
    build = make_build()
    build.apply(LiferayBasePlugin)
    assert [task.name for task in build.tasks()] == ["war", "deploy", "directdeploy"]
    assert build.task("deploy").depends_on == ["war"]
    assert build.task("deploy").group == "liferay"
    assert "directdeploy" in build.dependency_sets
    assert not build.dependency_sets.get("directdeploy").visible


def test_service_builder_generates_packages_and_deploys(make_build, runner, portal, tmp_path):
    build = make_build()
    build.apply(ServiceBuilderPlugin)
    build.extensions.get("liferay").set("app_server_dir", portal)
    webapp = _service_project(build)

    report = build.run(["deploy"])

    assert [result.task for result in report.results] == ["generateService", "war", "deploy"]
    argv, kwargs = runner.calls[0]
    assert argv[0] == "java"
    assert "com.liferay.portal.tools.servicebuilder.ServiceBuilder" in argv
    assert f"service.input.file={webapp / 'WEB-INF' / 'service.xml'}" in argv
    assert argv[-1] == "service.plugin.name=sample-portlet"
    assert kwargs["cwd"] == str(build.project.build_dir / "servicebuilder")

    classpath = argv[argv.index("-cp") + 1]
    assert "qdox-1.12.jar" in classpath
    assert str(portal / "lib" / "ext" / "easyconf.jar") in classpath

    assert (build.project.project_dir / "src" / "main" / "java").is_dir()
    assert (webapp / "WEB-INF" / "sql").is_dir()
    deployed = tmp_path / "deploy" / "sample-portlet.war"
    assert deployed.is_file()
    with zipfile.ZipFile(deployed) as archive:
        assert "view.jsp" in archive.namelist()
        assert "WEB-INF/service.xml" in archive.namelist()


def test_service_builder_defaults(make_build):
    build = make_build()
    build.apply(ServiceBuilderPlugin)
    build.finish_declaration()
    project = build.project
    bag = build.task("generateService").bag
    resolve = build.resolver.resolve

    assert resolve(bag, "plugin_name") == "sample-portlet"
    assert resolve(bag, "service_input_file") == project.webapp_dir / "WEB-INF" / "service.xml"
    assert resolve(bag, "impl_src_dir") == project.project_dir / "src" / "main" / "java"
    assert resolve(bag, "api_src_dir") == project.project_dir / "src" / "service" / "java"
    assert resolve(bag, "resource_dir") == project.project_dir / "src" / "main" / "resources"
    assert resolve(bag, "jalopy_input_file") is None
    assert build.task("war").depends_on == ["generateService"]

    jar = build.resolve("jarService")
    assert jar["archive_file"] == project.build_dir / "libs" / "sample-portlet-service.jar"
    assert jar["source_dir"] == project.project_dir / "src" / "service" / "java"
    docs = build.task("javadocService")
    assert build.resolver.resolve(docs.bag, "destination_dir") == project.build_dir / "docs" / "serviceJavadoc"
    assert docs.action.style_tags == ["generated:a:Generated", "ignore:a:Ignore"]


def test_style_file_is_staged_for_the_generator(make_build, portal, tmp_path):
    staged = []

    def check(argv, kwargs):
        staged.append((Path(kwargs["cwd"]) / "misc" / "jalopy.xml").read_text(encoding="utf-8"))

    runner = FakeRunner(on_call=check)
    build = make_build(invoker=ProcessInvoker(runner=runner))
    build.apply(ServiceBuilderPlugin)
    build.extensions.get("liferay").set("app_server_dir", portal)
    style = tmp_path / "proj" / "jalopy.xml"
    style.parent.mkdir(parents=True, exist_ok=True)
    style.write_text("<jalopy/>", encoding="utf-8")
    build.extensions.get("servicebuilder").set("jalopy_input_file", "jalopy.xml")
    _service_project(build)

    build.run(["generateService"])

    assert staged == ["<jalopy/>"]


def test_missing_service_definition_fails_task(make_build, portal):
    build = make_build()
    build.apply(ServiceBuilderPlugin)
    build.extensions.get("liferay").set("app_server_dir", portal)

    with pytest.raises(BuildFailedError) as excinfo:
        build.run(["war"])

    failure = excinfo.value.report.by_name("generateService")
    assert isinstance(failure.exception, MissingInputError)
    assert excinfo.value.report.by_name("war").state is TaskState.BLOCKED


def test_user_classpath_suppresses_provisioning(make_build, runner):
    build = make_build()
    build.apply(ServiceBuilderPlugin)
    build.dependency_sets.get("servicebuilder").add("/opt/lib/service-builder.jar")
    _service_project(build)

    build.run(["generateService"])

    argv, _ = runner.calls[0]
    assert argv[argv.index("-cp") + 1] == str(Path("/opt/lib/service-builder.jar"))
    assert len(build.dependency_sets.get("servicebuilder")) == 1


def test_provisioning_without_platform_fails(make_build):
    build = make_build()
    build.apply(ServiceBuilderPlugin)
    _service_project(build)

    with pytest.raises(BuildFailedError) as excinfo:
        build.run(["generateService"])

    assert isinstance(
        excinfo.value.report.by_name("generateService").exception, MissingPlatformArtifactError
    )


def _theme_portal(portal: Path) -> None:
    themes = portal / "webapps" / "ROOT" / "html" / "themes"
    (themes / "_unstyled" / "css").mkdir(parents=True)
    (themes / "_unstyled" / "css" / "base.css").write_text("base", encoding="utf-8")
    (themes / "_styled" / "templates").mkdir(parents=True)
    (themes / "_styled" / "templates" / "portal_normal.vm").write_text("vm", encoding="utf-8")
    (themes / "_styled" / "templates" / "portal_normal.ftl").write_text("ftl", encoding="utf-8")
    (themes / "_styled" / "css").mkdir()
    (themes / "_styled" / "css" / "main.css").write_text("styled", encoding="utf-8")


def test_theme_merge_and_thumbnail(make_build, runner, portal):
    _theme_portal(portal)
    build = make_build()
    build.apply(ThemePlugin)
    build.extensions.get("liferay").set("app_server_dir", portal)
    project = build.project
    diffs = project.project_dir / "src" / "main" / "webapp"
    (diffs / "css").mkdir(parents=True)
    (diffs / "css" / "main.css").write_text("custom", encoding="utf-8")
    (diffs / "images").mkdir()
    (diffs / "images" / "screenshot.png").write_bytes(b"png")

    report = build.run(["buildThumbnail"])

    output = project.build_dir / "webapp"
    assert project.webapp_dir == output
    assert (output / "css" / "base.css").read_text(encoding="utf-8") == "base"
    assert (output / "css" / "main.css").read_text(encoding="utf-8") == "custom"
    assert (output / "templates" / "portal_normal.vm").is_file()
    assert not (output / "templates" / "portal_normal.ftl").exists()

    assert report.by_name("buildThumbnail").state is TaskState.EXECUTED
    argv, _ = runner.calls[0]
    assert "com.liferay.portal.tools.ThumbnailBuilder" in argv
    assert f"thumbnail.original.file={diffs / 'images' / 'screenshot.png'}" in argv
    assert f"thumbnail.thumbnail.file={output / 'images' / 'thumbnail.png'}" in argv
    assert "thumbnail.height=120" in argv
    assert build.task("war").depends_on == ["buildThumbnail"]


def test_thumbnail_in_diffs_skips_generation(make_build, runner, portal):
    _theme_portal(portal)
    build = make_build()
    build.apply(ThemePlugin)
    build.extensions.get("liferay").set("app_server_dir", portal)
    images = build.project.project_dir / "src" / "main" / "webapp" / "images"
    images.mkdir(parents=True)
    (images / "screenshot.png").write_bytes(b"png")
    (images / "thumbnail.png").write_bytes(b"png")

    report = build.run(["buildThumbnail"])

    assert report.by_name("mergeTheme").state is TaskState.EXECUTED
    assert report.by_name("buildThumbnail").state is TaskState.SKIPPED
    assert runner.calls == []


def test_missing_parent_theme_fails(make_build, portal):
    build = make_build()
    build.apply(ThemePlugin)
    build.extensions.get("liferay").set("app_server_dir", portal)
    build.extensions.get("theme").set("parent_theme_name", "classic")

    with pytest.raises(BuildFailedError) as excinfo:
        build.run(["mergeTheme"])

    assert isinstance(excinfo.value.report.by_name("mergeTheme").exception, MissingPlatformArtifactError)


def test_portlet_sass_runs_before_war(make_build, runner, portal):
    build = make_build()
    build.apply(PortletPlugin)
    build.extensions.get("liferay").set("app_server_dir", portal)
    build.project.webapp_dir.mkdir(parents=True)

    report = build.run(["war"])

    assert [result.task for result in report.results] == ["sassToCss", "war"]
    argv, _ = runner.calls[0]
    assert f"sass.dir={build.project.webapp_dir}" in argv
    common = portal / "webapps" / "ROOT" / "html" / "css" / "common"
    assert f"sass.portal.common.dir={common}" in argv
    assert "servlet-api-2.5.jar" in argv[argv.index("-cp") + 1]


def test_direct_deploy_invokes_deployer(make_build, runner, portal):
    build = make_build()
    build.apply(LiferayBasePlugin)
    build.extensions.get("liferay").update({"app_server_dir": portal, "custom_portlet_xml": True})
    build.project.webapp_dir.mkdir(parents=True)

    build.run(["directdeploy"])

    argv, _ = runner.calls[0]
    assert "com.liferay.portal.tools.deploy.PortletDeployer" in argv
    assert f"deployer.base.dir={portal}" in argv
    assert f"deployer.dest.dir={portal / 'webapps'}" in argv
    assert "deployer.custom.portlet.xml=true" in argv
    assert f"deployer.war.file={build.project.libs_dir / 'sample-portlet.war'}" in argv


def test_deploy_without_app_server_is_unresolved(make_build):
    build = make_build()
    build.apply(LiferayBasePlugin)

    with pytest.raises(BuildFailedError) as excinfo:
        build.run(["deploy"])

    result = excinfo.value.report.by_name("deploy")
    assert result.state is TaskState.FAILED
    assert "auto_deploy_dir" in result.error
