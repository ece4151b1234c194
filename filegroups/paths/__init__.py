"""Resource-reference to workspace-relative path resolution."""

from __future__ import annotations

from .resolver import PathResolver, normalize_relative_path, ref_to_path_string, split_segments

__all__ = [
    "PathResolver",
    "normalize_relative_path",
    "ref_to_path_string",
    "split_segments",
]
