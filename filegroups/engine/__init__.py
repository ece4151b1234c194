"""Group-file engine, render items, cache, and change signals."""

from __future__ import annotations

from .cache import CacheKey, RenderCache, ViewScope
from .events import ChangeEmitter, ChangeListener, ChangeSignal
from .interfaces import GroupRepository, MembershipRepository, ResourceResolver, WorkspaceEnumerator
from .items import (
    ActionButtonItem,
    DirectoryItem,
    FileItem,
    GroupItem,
    Item,
    ItemKind,
    SessionAction,
    action_key,
    item_key,
)
from .orchestrator import GROUPS_MARKER, GroupFileEngine, MembershipDelta

__all__ = [
    "ActionButtonItem",
    "CacheKey",
    "ChangeEmitter",
    "ChangeListener",
    "ChangeSignal",
    "DirectoryItem",
    "FileItem",
    "GROUPS_MARKER",
    "GroupFileEngine",
    "GroupItem",
    "GroupRepository",
    "Item",
    "ItemKind",
    "MembershipDelta",
    "MembershipRepository",
    "RenderCache",
    "ResourceResolver",
    "SessionAction",
    "ViewScope",
    "WorkspaceEnumerator",
    "action_key",
    "item_key",
]
