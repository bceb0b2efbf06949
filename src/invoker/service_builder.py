"""Argument list for the service generator, in the order the tool expects."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Tuple

from project_config import get_section

# (argument key, path under the resource dir)
_METADATA_FILES: Tuple[Tuple[str, str], ...] = (
    ("service.hbm.file", "META-INF/portlet-hbm.xml"),
    ("service.orm.file", "META-INF/portlet-orm.xml"),
    ("service.model.hints.file", "META-INF/portlet-model-hints.xml"),
    ("service.spring.file", "META-INF/portlet-spring.xml"),
    ("service.spring.base.file", "META-INF/base-spring.xml"),
    ("service.spring.cluster.file", "META-INF/cluster-spring.xml"),
    ("service.spring.dynamic.data.source.file", "META-INF/dynamic-data-source-spring.xml"),
    ("service.spring.hibernate.file", "META-INF/hibernate-spring.xml"),
    ("service.spring.infrastructure.file", "META-INF/infrastructure-spring.xml"),
    ("service.spring.shard.data.source.file", "META-INF/shard-data-source-spring.xml"),
)


def _token(key: str, value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return f"{key}={value}"


def sql_dir(webapp_dir: Path) -> Path:
    return Path(webapp_dir) / "WEB-INF" / "sql"


def build_arguments(values: Mapping[str, Any]) -> List[str]:
    """Serialise resolved service-generation inputs into ``key=value`` tokens.

    ``values`` must provide ``service_input_file``, ``resource_dir``,
    ``api_src_dir``, ``impl_src_dir``, ``webapp_dir`` and ``plugin_name``.
    The same mapping always yields the same list.
    """

    tool = get_section("tools.servicebuilder")
    sql = tool["sql"]
    resource_dir = Path(values["resource_dir"])
    webapp_dir = Path(values["webapp_dir"])

    tokens = [_token("service.input.file", Path(values["service_input_file"]))]
    tokens.extend(_token(key, resource_dir / relative) for key, relative in _METADATA_FILES)
    tokens.extend(
        [
            _token("service.api.dir", Path(values["api_src_dir"])),
            _token("service.impl.dir", Path(values["impl_src_dir"])),
            _token("service.json.file", webapp_dir / "js" / "service.js"),
            _token("service.sql.dir", sql_dir(webapp_dir)),
            _token("service.sql.file", sql["tables"]),
            _token("service.sql.indexes.file", sql["indexes"]),
            _token("service.sql.indexes.properties.file", sql["indexes_properties"]),
            _token("service.sql.sequences.file", sql["sequences"]),
            _token("service.auto.namespace.tables", bool(tool.get("auto_namespace_tables", True))),
            _token("service.bean.locator.util", tool["bean_locator_util"]),
            _token("service.props.util", tool["props_util"]),
            _token("service.plugin.name", values["plugin_name"]),
        ]
    )
    return tokens


__all__ = ["build_arguments", "sql_dir"]
