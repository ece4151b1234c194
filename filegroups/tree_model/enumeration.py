"""Display ordering, file counts, and path enumeration over trees."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .types import NodeKind, TreeNode


def child_sort_key(node: TreeNode) -> tuple[bool, str]:
    """Sort directories before files, then by case-sensitive name."""
    return (node.kind is not NodeKind.DIRECTORY, node.name)


def sorted_children(node_or_roots: TreeNode | Iterable[TreeNode]) -> list[TreeNode]:
    """Return the display-ordered children of a node, or of a root set.

    Computed on every call; filtering changes the effective child set.
    """
    if isinstance(node_or_roots, TreeNode):
        nodes: Iterable[TreeNode] = node_or_roots.children.values()
    else:
        nodes = node_or_roots
    return sorted(nodes, key=child_sort_key)


def file_count(node: TreeNode) -> int:
    """Return the recursive number of file descendants (1 for a file node)."""
    if node.is_file:
        return 1
    return sum(file_count(child) for child in node.children.values())


def iter_file_nodes(nodes: Iterable[TreeNode]) -> Iterator[TreeNode]:
    """Yield every file node reachable from ``nodes`` depth-first."""
    stack = list(nodes)
    while stack:
        node = stack.pop()
        if node.is_file:
            yield node
        else:
            stack.extend(node.children.values())


def iter_file_paths(nodes: Iterable[TreeNode]) -> Iterator[str]:
    for node in iter_file_nodes(nodes):
        yield node.path


def find_node(roots: Iterable[TreeNode], path: str) -> TreeNode | None:
    """Return the node at relative ``path`` or ``None`` when absent."""
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return None
    level = {node.name: node for node in roots}
    node: TreeNode | None = None
    for segment in segments:
        node = level.get(segment)
        if node is None:
            return None
        level = node.children
    return node


def children_of(roots: Iterable[TreeNode], directory: str) -> list[TreeNode]:
    """Return unsorted children of ``directory`` (``roots`` for ``""``)."""
    if not directory.strip("/"):
        return list(roots)
    node = find_node(roots, directory)
    if node is None or node.is_file:
        return []
    return list(node.children.values())


def is_within(path: str, directory: str) -> bool:
    """Return whether ``path`` equals ``directory`` or is nested below it.

    An empty ``directory`` contains every path.
    """
    directory = directory.strip("/")
    if not directory:
        return True
    return path == directory or path.startswith(directory + "/")


__all__ = [
    "child_sort_key",
    "sorted_children",
    "file_count",
    "iter_file_nodes",
    "iter_file_paths",
    "find_node",
    "children_of",
    "is_within",
]
