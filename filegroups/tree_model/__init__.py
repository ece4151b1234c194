"""Relative-path tree model: building, ordering, counting, and filtering.

Defines ``TreeNode`` and ``TreeIndex`` plus the helpers the engine uses to
materialize display slices of a group's membership or the workspace.
"""

from __future__ import annotations

from .build import PathEntry, TreeIndex, build_tree, index_paths, index_resource_refs, insert_path
from .enumeration import (
    child_sort_key,
    children_of,
    file_count,
    find_node,
    is_within,
    iter_file_nodes,
    iter_file_paths,
    sorted_children,
)
from .filtering import count_matches, filter_tree, name_matches, normalize_query
from .types import NodeKind, TreeNode

__all__ = [
    "NodeKind",
    "TreeNode",
    "TreeIndex",
    "PathEntry",
    "build_tree",
    "index_paths",
    "index_resource_refs",
    "insert_path",
    "child_sort_key",
    "sorted_children",
    "file_count",
    "find_node",
    "children_of",
    "is_within",
    "iter_file_nodes",
    "iter_file_paths",
    "filter_tree",
    "count_matches",
    "name_matches",
    "normalize_query",
]
