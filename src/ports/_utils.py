"""Environment handling for child tool processes."""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional


def child_env(
    overrides: Mapping[str, Optional[str]] | None = None,
    base: Mapping[str, str] | None = None,
) -> Dict[str, str]:
    """Environment for a child process: ``base`` (default ``os.environ``) plus overrides.

    An override of ``None`` removes the variable, e.g. to keep a user's
    ``JAVA_TOOL_OPTIONS`` away from a forked tool.
    """

    env = {str(key): str(value) for key, value in (base if base is not None else os.environ).items()}
    for key, value in (overrides or {}).items():
        if value is None:
            env.pop(str(key), None)
        else:
            env[str(key)] = str(value)
    return env


__all__ = ["child_env"]
