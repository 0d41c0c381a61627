"""Filesystem access used by the expander and the augmentor.

A thin wrapper over :mod:`pathlib` and :mod:`shutil` that converts every
``OSError`` into an :class:`~nestgen.errors.IOFailureError`, so callers only
have to handle the scaffolding error hierarchy.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from nestgen.errors import IOFailureError


class FileSystem:
    """Synchronous filesystem operations with uniform error reporting."""

    def read_directory(self, path: str | Path) -> list[str]:
        """Return the entry names of *path*, sorted for a stable walk order."""
        try:
            return sorted(entry.name for entry in Path(path).iterdir())
        except OSError as exc:
            raise IOFailureError(f"Cannot list directory: {exc}", path=path) from exc

    def is_directory(self, path: str | Path) -> bool:
        try:
            return Path(path).is_dir()
        except OSError as exc:
            raise IOFailureError(f"Cannot stat path: {exc}", path=path) from exc

    def exists(self, path: str | Path) -> bool:
        return Path(path).exists()

    def read_text(self, path: str | Path) -> str:
        # newline="" keeps CRLF line endings intact for byte-exact round trips.
        try:
            with open(path, encoding="utf-8", newline="") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailureError(f"Cannot read file: {exc}", path=path) from exc

    def write_text(self, path: str | Path, content: str) -> None:
        """Write *content* to *path*, creating parent directories."""
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as fh:
                fh.write(content)
        except OSError as exc:
            raise IOFailureError(f"Cannot write file: {exc}", path=path) from exc

    def copy_file(self, source: str | Path, destination: str | Path) -> None:
        """Byte-copy *source* to *destination*, keeping the permission bits."""
        target = Path(destination)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as exc:
            raise IOFailureError(f"Cannot copy file: {exc}", path=source) from exc

    def ensure_directory(self, path: str | Path) -> Path:
        target = Path(path)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailureError(f"Cannot create directory: {exc}", path=path) from exc
        return target
