"""Extensions for the portal feature areas: deployment target, services, themes."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from contracts.errors import MissingPlatformArtifactError

from .settings import KIND_BOOL, KIND_PATH, KIND_STR, Extension, Setting


def _under_app_server(*parts: str):
    def derive(extension: Extension) -> Optional[Path]:
        root = extension.get("app_server_dir")
        if root is None:
            return None
        return Path(root).joinpath(*parts)

    return derive


def _auto_deploy_dir(extension: Extension) -> Optional[Path]:
    root = extension.get("app_server_dir")
    if root is None:
        return None
    return Path(root).parent / "deploy"


class LiferayExtension(Extension):
    """Deployment target: where the portal and its application server live."""

    NAME = "liferay"
    SETTINGS = {
        "app_server_dir": Setting(KIND_PATH, description="Application server root"),
        "app_server_type": Setting(KIND_STR, default="tomcat"),
        "app_server_portal_dir": Setting(KIND_PATH, derive=_under_app_server("webapps", "ROOT")),
        "app_server_global_lib_dir": Setting(KIND_PATH, derive=_under_app_server("lib", "ext")),
        "auto_deploy_dir": Setting(KIND_PATH, derive=_auto_deploy_dir),
        "plugin_type": Setting(KIND_STR, default="portlet"),
        "dest_dir_name": Setting(KIND_PATH, derive=_under_app_server("webapps")),
        "custom_portlet_xml": Setting(KIND_BOOL, default=False),
    }

    def platform_root(self) -> Optional[Path]:
        return self.get("app_server_dir")

    def global_lib(self, name: str) -> Path:
        """Path of a jar in the global lib dir; fails if the dir is unknown."""

        lib_dir = self.get("app_server_global_lib_dir")
        if lib_dir is None:
            raise MissingPlatformArtifactError(Path(name), self.platform_root())
        return Path(lib_dir) / name

    def portal_classpath(self) -> List[Path]:
        """Jars of the installed portal, read from disk when called."""

        portal_dir = self.get("app_server_portal_dir")
        if portal_dir is None:
            raise MissingPlatformArtifactError(Path("WEB-INF/lib"), self.platform_root())
        lib_dir = Path(portal_dir) / "WEB-INF" / "lib"
        jars = sorted(lib_dir.glob("*.jar")) if lib_dir.is_dir() else []
        return [*jars, self.global_lib("portal-service.jar")]


class ServiceBuilderExtension(Extension):
    """Service generation: the service definition and where sources go."""

    NAME = "servicebuilder"
    SETTINGS = {
        "service_input_file": Setting(KIND_PATH),
        "jalopy_input_file": Setting(KIND_PATH, description="Style configuration for generated code"),
        "impl_src_dir": Setting(KIND_PATH),
        "api_src_dir": Setting(KIND_PATH),
        "resource_dir": Setting(KIND_PATH),
    }


def _default_diffs_dir(extension: Extension) -> Path:
    return extension.project.project_dir / "src" / "main" / "webapp"


class ThemeExtension(Extension):
    """Theme settings: the parent theme and the directory of local diffs."""

    NAME = "theme"
    SETTINGS = {
        "theme_type": Setting(KIND_STR, default="vm"),
        "parent_theme_name": Setting(KIND_STR, default="_styled"),
        "diffs_dir": Setting(KIND_PATH, derive=_default_diffs_dir),
    }


__all__ = ["LiferayExtension", "ServiceBuilderExtension", "ThemeExtension"]
