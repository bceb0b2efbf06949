"""Idempotent population of tool dependency sets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from contracts.errors import MissingPlatformArtifactError
from orchestrator import log

from .dependency_set import Coordinate, DependencySet

_LOGGER = logging.getLogger(__name__)


class Provisioner:
    """Fill an empty dependency set with what a tool needs, at most once.

    ``platform_root`` is only used to make missing-artifact errors point at
    the configured portal installation.
    """

    def __init__(self, platform_root: Optional[Path] = None) -> None:
        self.platform_root = platform_root

    def ensure_provisioned(
        self,
        dependency_set: DependencySet,
        required_artifacts: Sequence[Union[str, Coordinate]],
        local_artifacts: Sequence[Path],
    ) -> bool:
        """Provision ``dependency_set`` if it is empty.

        Returns ``True`` when entries were added.  A non-empty set, whether
        filled by the user or by an earlier call, is left exactly as is.
        """

        if not dependency_set.is_empty():
            _LOGGER.debug("dependency set %s already populated; skipping", dependency_set.name)
            return False

        coordinates = [
            item if isinstance(item, Coordinate) else Coordinate.parse(item)
            for item in required_artifacts
        ]
        local = [Path(item) for item in local_artifacts]
        for path in local:
            if not path.exists():
                raise MissingPlatformArtifactError(path, self.platform_root)

        dependency_set.extend(coordinates)
        dependency_set.extend(local)
        _LOGGER.info(
            "provisioned %s with %d coordinate(s) and %d local artifact(s)",
            dependency_set.name,
            len(coordinates),
            len(local),
        )
        log.append_event(
            {
                "event": "provisioning.completed",
                "dependency_set": dependency_set.name,
                "coordinates": [str(item) for item in coordinates],
                "local": [str(item) for item in local],
            }
        )
        return True


__all__ = ["Provisioner"]
