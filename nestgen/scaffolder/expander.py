"""Recursive template-tree expansion.

Mirrors a project template directory into a destination directory.  Entries
whose names are in the exclusion set are skipped at any depth, files ending
in a reserved template suffix are rendered through the
:class:`~nestgen.scaffolder.templates.TemplateRenderer` and written without
the suffix, and every other file is byte-copied.

Any I/O failure aborts the whole expansion and propagates to the caller.
No cleanup of a partially written tree is attempted: the destination is
expected to be a fresh directory.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path

from nestgen.errors import TemplateNotFoundError
from nestgen.filesystem import FileSystem

from .templates import ContextLike, TemplateRenderer

# Version control, build output, OS metadata, and the npm lock file (the lock
# file is regenerated by whichever package manager installs dependencies).
DEFAULT_EXCLUDES: frozenset[str] = frozenset(
    {".git", "node_modules", "dist", ".DS_Store", "package-lock.json"}
)

TEMPLATE_SUFFIXES: tuple[str, ...] = (".j2", ".tpl")


class TreeExpander:
    """Copies a template tree, rendering template leaves on the way."""

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        filesystem: FileSystem | None = None,
        excludes: Iterable[str] = DEFAULT_EXCLUDES,
        template_suffixes: tuple[str, ...] = TEMPLATE_SUFFIXES,
    ) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.fs = filesystem or FileSystem()
        self.excludes = frozenset(excludes)
        self.template_suffixes = template_suffixes

    async def expand(
        self,
        source_root: str | Path,
        dest_root: str | Path,
        context: ContextLike,
    ) -> list[Path]:
        """Mirror *source_root* into *dest_root*.

        Args:
            source_root: Template tree to read.  Never modified.
            dest_root: Destination directory, created if missing.
            context: Variables for template leaves.

        Returns:
            Written file paths in walk order.

        Raises:
            TemplateNotFoundError: If *source_root* is not a directory.
            IOFailureError: On any read or write failure.
        """
        source = Path(source_root)
        if not self.fs.is_directory(source):
            raise TemplateNotFoundError(
                "Template directory not found", path=source
            )
        dest = Path(dest_root)
        self.fs.ensure_directory(dest)

        written: list[Path] = []
        await self._expand_dir(source, dest, context, written)
        return written

    def is_excluded(self, name: str) -> bool:
        return name in self.excludes

    def template_suffix(self, name: str) -> str | None:
        """Return the template suffix *name* ends with, if any."""
        for suffix in self.template_suffixes:
            if name.endswith(suffix) and len(name) > len(suffix):
                return suffix
        return None

    # -- Internals ----------------------------------------------------------

    async def _expand_dir(
        self,
        source: Path,
        dest: Path,
        context: ContextLike,
        written: list[Path],
    ) -> None:
        for name in self.fs.read_directory(source):
            if self.is_excluded(name):
                continue

            source_path = source / name
            if self.fs.is_directory(source_path):
                target_dir = dest / name
                self.fs.ensure_directory(target_dir)
                await self._expand_dir(source_path, target_dir, context, written)
                continue

            suffix = self.template_suffix(name)
            if suffix is not None:
                target = dest / name[: -len(suffix)]
                await asyncio.to_thread(self._render_leaf, source_path, target, context)
            else:
                target = dest / name
                await asyncio.to_thread(self.fs.copy_file, source_path, target)
            written.append(target)

    def _render_leaf(self, source: Path, target: Path, context: ContextLike) -> None:
        content = self.fs.read_text(source)
        self.fs.write_text(target, self.renderer.render_string(content, context))
