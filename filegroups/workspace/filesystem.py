"""Filesystem-backed resource resolution and workspace enumeration.

Resource references are ``file://`` URIs as produced by ``Path.as_uri``;
plain absolute paths are accepted as input too. Exclude globs use gitignore
(``gitwildmatch``) semantics.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

import pathspec

from ..paths.resolver import ref_to_path_string

logger = logging.getLogger(__name__)


def exclude_spec(exclude_globs: Sequence[str]) -> pathspec.PathSpec:
    """Compile ``exclude_globs`` into one gitignore-style matcher."""
    patterns = [pattern.strip() for pattern in exclude_globs if pattern and pattern.strip()]
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


class FileSystemWorkspace:
    """``ResourceResolver`` and ``WorkspaceEnumerator`` over one root directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    @property
    def root_ref(self) -> str:
        return self.root.as_posix()

    def path_for(self, resource_ref: str) -> Path | None:
        raw = ref_to_path_string(resource_ref)
        return Path(raw) if raw else None

    def to_relative_path(self, resource_ref: str) -> str | None:
        path = self.path_for(resource_ref)
        if path is None or not path.is_absolute():
            return None
        if not path.is_relative_to(self.root) or path == self.root:
            return None
        return path.relative_to(self.root).as_posix()

    async def exists_and_is_file(self, resource_ref: str) -> bool:
        path = self.path_for(resource_ref)
        if path is None:
            return False
        try:
            return path.is_file()
        except OSError:
            return False

    async def list_all_files(self, exclude_globs: Sequence[str]) -> list[str]:
        """Return URIs of every file under the root not matched by ``exclude_globs``."""
        spec = exclude_spec(exclude_globs)
        refs: list[str] = []

        def on_error(exc: OSError) -> None:
            logger.debug("Skipping unreadable directory: %s", exc)

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=on_error):
            current = Path(dirpath)
            relative_dir = current.relative_to(self.root).as_posix()
            prefix = "" if relative_dir == "." else relative_dir + "/"
            # Prune excluded directories so their contents are never walked.
            dirnames[:] = sorted(name for name in dirnames if not spec.match_file(prefix + name + "/"))
            for name in sorted(filenames):
                if spec.match_file(prefix + name):
                    continue
                refs.append((current / name).as_uri())
        return refs


__all__ = ["FileSystemWorkspace", "exclude_spec"]
