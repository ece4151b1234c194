"""Build relative-path trees from flat path lists and resource references."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from ..paths.resolver import PathResolver
from .enumeration import children_of, find_node, is_within, iter_file_paths, sorted_children
from .types import TreeNode

logger = logging.getLogger(__name__)

PathEntry = str | tuple[str, str | None]


def insert_path(level: dict[str, TreeNode], path: str, resource_ref: str | None = None) -> TreeNode | None:
    """Insert one relative path below ``level`` and return its file node.

    Existing nodes are reused so duplicate paths are idempotent. Returns
    ``None`` (and inserts nothing) for paths with no segments or paths that
    collide with an existing node of the other kind.
    """
    segments = [segment for segment in path.replace("\\", "/").split("/") if segment.strip()]
    if not segments:
        logger.debug("Skipping malformed path %r", path)
        return None

    # Validate the whole walk first so a collision never leaves partial nodes.
    probe = level
    for idx, segment in enumerate(segments):
        existing = probe.get(segment)
        if existing is None:
            break
        is_last = idx == len(segments) - 1
        if is_last and existing.is_dir:
            logger.warning("Skipping %r: a directory already occupies that path", path)
            return None
        if not is_last and existing.is_file:
            logger.warning("Skipping %r: %r is a file", path, existing.path)
            return None
        probe = existing.children

    current_path = ""
    node: TreeNode | None = None
    for idx, segment in enumerate(segments):
        current_path = f"{current_path}/{segment}" if current_path else segment
        is_last = idx == len(segments) - 1
        node = level.get(segment)
        if node is None:
            if is_last:
                node = TreeNode.file(segment, current_path, resource_ref)
            else:
                node = TreeNode.directory(segment, current_path)
            level[segment] = node
        elif is_last and node.resource_ref is None and resource_ref is not None:
            node.resource_ref = resource_ref
        level = node.children
    return node


def _iter_entries(entries: Iterable[PathEntry]) -> Iterator[tuple[str, str | None]]:
    for entry in entries:
        if isinstance(entry, tuple):
            yield entry[0], entry[1]
        else:
            yield entry, None


def build_tree(entries: Iterable[PathEntry]) -> list[TreeNode]:
    """Build a tree from relative paths (optionally paired with references).

    Returns the display-ordered root nodes. Malformed entries are skipped.
    """
    return list(index_paths(entries).roots)


@dataclass(frozen=True)
class TreeIndex:
    """A built tree plus the resource reference of every file path."""

    roots: tuple[TreeNode, ...] = ()
    refs_by_path: dict[str, str] = field(default_factory=dict)

    def file_paths(self) -> list[str]:
        return list(iter_file_paths(self.roots))

    def paths_under(self, directory: str) -> list[str]:
        """Return file paths equal to or nested below ``directory``."""
        return [path for path in iter_file_paths(self.roots) if is_within(path, directory)]

    def node_at(self, path: str) -> TreeNode | None:
        return find_node(self.roots, path)

    def children_at(self, directory: str) -> list[TreeNode]:
        return children_of(self.roots, directory)

    def ref_for(self, path: str) -> str | None:
        return self.refs_by_path.get(path)


def index_paths(entries: Iterable[PathEntry]) -> TreeIndex:
    """Build a ``TreeIndex`` from already-relative paths."""
    roots: dict[str, TreeNode] = {}
    refs_by_path: dict[str, str] = {}
    for path, resource_ref in _iter_entries(entries):
        if not isinstance(path, str):
            logger.debug("Skipping non-string path entry %r", path)
            continue
        node = insert_path(roots, path, resource_ref)
        if node is not None and resource_ref is not None:
            refs_by_path.setdefault(node.path, resource_ref)
    return TreeIndex(roots=tuple(sorted_children(roots.values())), refs_by_path=refs_by_path)


def index_resource_refs(refs: Iterable[str], resolver: PathResolver) -> TreeIndex:
    """Resolve each reference and build a ``TreeIndex``; failures are dropped."""
    roots: dict[str, TreeNode] = {}
    refs_by_path: dict[str, str] = {}
    for ref in refs:
        relative = resolver.resolve(ref)
        if not relative:
            logger.warning("Dropping unresolvable resource %r", ref)
            continue
        node = insert_path(roots, relative, ref)
        if node is None:
            continue
        refs_by_path.setdefault(node.path, ref)
    return TreeIndex(roots=tuple(sorted_children(roots.values())), refs_by_path=refs_by_path)


__all__ = [
    "PathEntry",
    "TreeIndex",
    "build_tree",
    "index_paths",
    "index_resource_refs",
    "insert_path",
]
