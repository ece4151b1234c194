"""Render-ready items handed to the host display layer.

Items form a closed union discriminated by ``kind``. Every item carries a
``key`` that is a pure function of (group id, relative path, mode) so hosts
can keep expansion state across cosmetic re-renders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..selection import SessionMode


class ItemKind(str, Enum):
    GROUP = "group"
    DIRECTORY = "directory"
    FILE = "file"
    ACTION = "action"


class SessionAction(str, Enum):
    SEARCH = "search"
    CLEAR_SEARCH = "clear_search"
    SELECT_ALL = "select_all"
    DESELECT_ALL = "deselect_all"
    CONFIRM = "confirm"
    CANCEL = "cancel"


def item_key(group_id: str, path: str, mode: SessionMode) -> str:
    """Return the stable identity for a node of ``group_id`` at ``path``."""
    return f"{mode.value}|{group_id}|{path}"


def action_key(action: SessionAction, mode: SessionMode) -> str:
    return f"{mode.value}|action|{action.value}"


@dataclass(frozen=True)
class GroupItem:
    key: str
    group_id: str
    name: str
    file_count: int
    workspace_root: str | None = None
    kind: ItemKind = field(default=ItemKind.GROUP, init=False)


@dataclass(frozen=True)
class DirectoryItem:
    """Directory row; ``in_workspace_tree`` marks rows of the add-mode tree.

    ``selected_count`` is only set while a session is active.
    """

    key: str
    group_id: str
    path: str
    name: str
    file_count: int
    in_workspace_tree: bool = False
    selected_count: int | None = None
    kind: ItemKind = field(default=ItemKind.DIRECTORY, init=False)


@dataclass(frozen=True)
class FileItem:
    """File row; ``selected`` is ``None`` outside a session."""

    key: str
    group_id: str
    path: str
    name: str
    resource_ref: str | None
    selected: bool | None = None
    language: str | None = None
    in_workspace_tree: bool = False
    kind: ItemKind = field(default=ItemKind.FILE, init=False)


@dataclass(frozen=True)
class ActionButtonItem:
    key: str
    action: SessionAction
    label: str
    kind: ItemKind = field(default=ItemKind.ACTION, init=False)


Item = GroupItem | DirectoryItem | FileItem | ActionButtonItem


__all__ = [
    "ActionButtonItem",
    "DirectoryItem",
    "FileItem",
    "GroupItem",
    "Item",
    "ItemKind",
    "SessionAction",
    "action_key",
    "item_key",
]
