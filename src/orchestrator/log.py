"""JSONL build event log, one rotating file series per project."""

from __future__ import annotations

import json
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

__all__ = ["configure", "disable", "append_event", "current_log_path"]

_DEFAULT_MAX_BYTES = 100 * 1024 * 1024
_LOCK = threading.Lock()
_LOG_DIR: Path | None = None
_PROJECT: str | None = None
_MAX_BYTES = _DEFAULT_MAX_BYTES
_CURRENT_PATH: Path | None = None


def configure(
    base_dir: str | Path,
    *,
    project: str | None = None,
    max_bytes: int | None = None,
) -> None:
    """Write events for ``project`` under ``base_dir/<yyyymmdd>/``.

    Files are named ``<project>_NN.jsonl`` (``build_NN.jsonl`` without a
    project) so several projects may share one log directory.
    """

    global _LOG_DIR, _PROJECT, _MAX_BYTES, _CURRENT_PATH
    with _LOCK:
        _LOG_DIR = Path(base_dir)
        _PROJECT = project
        _MAX_BYTES = max_bytes or _DEFAULT_MAX_BYTES
        _CURRENT_PATH = None


def disable() -> None:
    """Stop writing events until :func:`configure` is called again."""

    global _LOG_DIR, _PROJECT, _CURRENT_PATH
    with _LOCK:
        _LOG_DIR = None
        _PROJECT = None
        _CURRENT_PATH = None


def _file_stem() -> str:
    if not _PROJECT:
        return "build"
    return re.sub(r"[^A-Za-z0-9._-]+", "_", _PROJECT)


def _next_log_path(log_dir: Path, incoming: int) -> Path:
    """Current file, or the next free one when ``incoming`` bytes would overflow it.

    An event is never split across files; a single oversized event gets a
    file of its own.
    """

    global _CURRENT_PATH
    date_dir = log_dir / datetime.now(timezone.utc).strftime("%Y%m%d")
    date_dir.mkdir(parents=True, exist_ok=True)

    def fits(path: Path) -> bool:
        if not path.exists():
            return True
        size = path.stat().st_size
        return size == 0 or size + incoming <= _MAX_BYTES

    if _CURRENT_PATH is not None and _CURRENT_PATH.parent == date_dir and fits(_CURRENT_PATH):
        return _CURRENT_PATH

    stem = _file_stem()
    counter = 0
    while not fits(date_dir / f"{stem}_{counter:02d}.jsonl"):
        counter += 1
    _CURRENT_PATH = date_dir / f"{stem}_{counter:02d}.jsonl"
    return _CURRENT_PATH


def append_event(event: Dict[str, Any]) -> Path | None:
    """Append ``event`` and return the file it landed in.

    Returns ``None`` without writing when no log directory is configured.
    """

    payload = dict(event)
    payload.setdefault("ts", datetime.now(timezone.utc).isoformat(timespec="milliseconds"))
    with _LOCK:
        if _LOG_DIR is None:
            return None
        if _PROJECT is not None:
            payload.setdefault("project", _PROJECT)
        line = json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str) + "\n"
        path = _next_log_path(_LOG_DIR, len(line.encode("utf-8")))
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line)
    return path


def current_log_path() -> Path | None:
    return _CURRENT_PATH
