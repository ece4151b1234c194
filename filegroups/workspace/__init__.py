"""Filesystem workspace collaborators."""

from __future__ import annotations

from .filesystem import FileSystemWorkspace, exclude_spec

__all__ = ["FileSystemWorkspace", "exclude_spec"]
