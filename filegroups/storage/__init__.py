"""Group entity and persisted group repository."""

from __future__ import annotations

from .groups import Group, dedupe_refs, validate_group_name
from .json_repository import JsonGroupRepository

__all__ = ["Group", "JsonGroupRepository", "dedupe_refs", "validate_group_name"]
