"""Case-insensitive name filtering that keeps ancestor chains visible."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .enumeration import sorted_children
from .types import TreeNode


def normalize_query(query: str | None) -> str:
    """Return the folded, trimmed query; empty means no filter."""
    return (query or "").strip().casefold()


def name_matches(node: TreeNode, folded_query: str) -> bool:
    return folded_query in node.name.casefold()


def _filter_node(node: TreeNode, folded_query: str) -> TreeNode | None:
    own_match = name_matches(node, folded_query)
    if node.is_file:
        return node if own_match else None

    kept: dict[str, TreeNode] = {}
    for name, child in node.children.items():
        filtered = _filter_node(child, folded_query)
        if filtered is not None:
            kept[name] = filtered

    if kept:
        return node.shallow_copy(kept)
    if own_match:
        # A matching directory reveals its full contents.
        return node.shallow_copy()
    return None


def filter_tree(roots: Sequence[TreeNode], query: str | None) -> Sequence[TreeNode]:
    """Return ``roots`` filtered by a case-insensitive substring of node names.

    Files survive on a direct name match; directories survive when they or any
    descendant match. An empty query returns ``roots`` itself.
    """
    folded = normalize_query(query)
    if not folded:
        return roots
    filtered = (_filter_node(node, folded) for node in roots)
    return sorted_children(node for node in filtered if node is not None)


def count_matches(roots: Iterable[TreeNode], query: str | None) -> int:
    """Count nodes (files and directories) whose own name matches ``query``."""
    folded = normalize_query(query)
    if not folded:
        return 0
    count = 0
    stack = list(roots)
    while stack:
        node = stack.pop()
        if name_matches(node, folded):
            count += 1
        stack.extend(node.children.values())
    return count


__all__ = ["count_matches", "filter_tree", "name_matches", "normalize_query"]
