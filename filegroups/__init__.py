"""Public package surface for filegroups.

Indexes group membership into directory trees and runs add/remove
selection sessions against a persisted group repository. ``main`` is the
CLI entrypoint; most implementation lives in submodules.
"""

from __future__ import annotations

from .engine import (
    ActionButtonItem,
    ChangeSignal,
    DirectoryItem,
    FileItem,
    GroupFileEngine,
    GroupItem,
    MembershipDelta,
    ViewScope,
)
from .errors import (
    GroupAlreadyExistsError,
    GroupError,
    GroupFileLimitError,
    GroupNameInvalidError,
    GroupNotFoundError,
    RemoveAllConfirmationRequired,
    RepositoryWriteError,
    SessionStateError,
)
from .selection import SessionMode, SessionState


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "ActionButtonItem",
    "ChangeSignal",
    "DirectoryItem",
    "FileItem",
    "GroupAlreadyExistsError",
    "GroupError",
    "GroupFileEngine",
    "GroupFileLimitError",
    "GroupItem",
    "GroupNameInvalidError",
    "GroupNotFoundError",
    "MembershipDelta",
    "RemoveAllConfirmationRequired",
    "RepositoryWriteError",
    "SessionMode",
    "SessionState",
    "SessionStateError",
    "ViewScope",
    "main",
]
