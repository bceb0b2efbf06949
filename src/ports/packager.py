"""Packaging port: archive a directory tree."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Protocol


class Packager(Protocol):
    def package(self, source_dir: Path, archive: Path) -> Path:
        """Archive ``source_dir`` into ``archive`` and return its path."""


class ZipPackager:
    """Write a deterministic zip archive (sorted entries, fixed timestamps)."""

    _EPOCH = (1980, 1, 1, 0, 0, 0)

    def package(self, source_dir: Path, archive: Path) -> Path:
        source_dir = Path(source_dir)
        archive = Path(archive)
        archive.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            if source_dir.is_dir():
                for path in sorted(p for p in source_dir.rglob("*") if p.is_file()):
                    info = zipfile.ZipInfo(path.relative_to(source_dir).as_posix(), self._EPOCH)
                    info.compress_type = zipfile.ZIP_DEFLATED
                    zf.writestr(info, path.read_bytes())
        return archive


__all__ = ["Packager", "ZipPackager"]
