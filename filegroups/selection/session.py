"""Selection-session state machine for adding/removing group members.

A session is a bounded episode: ``inactive -> adding -> inactive`` or
``inactive -> removing -> inactive``. ``SessionState`` is an immutable value;
``SelectionSession`` owns the current one and replaces it on every mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum

from ..errors import RemoveAllConfirmationRequired, SessionStateError
from ..tree_model import TreeIndex

logger = logging.getLogger(__name__)


class SessionMode(str, Enum):
    INACTIVE = "inactive"
    ADDING = "adding"
    REMOVING = "removing"


@dataclass(frozen=True)
class SelectionDelta:
    """Relative paths to add to and remove from a group's membership."""

    to_add: frozenset[str] = frozenset()
    to_remove: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of one selection session.

    ``snapshot`` holds the group's resolved member paths at ``enter`` time and
    is the baseline for delta computation.
    """

    mode: SessionMode = SessionMode.INACTIVE
    group_id: str | None = None
    selected: frozenset[str] = frozenset()
    snapshot: frozenset[str] = frozenset()
    search_query: str = ""

    @property
    def active(self) -> bool:
        return self.mode is not SessionMode.INACTIVE

    def is_selected(self, path: str) -> bool:
        return self.active and path in self.selected

    def entered(self, group_id: str, mode: SessionMode, member_paths: Iterable[str]) -> SessionState:
        if self.active:
            raise SessionStateError(
                f"Cannot enter {mode.value} mode while a {self.mode.value} session is active"
            )
        if mode is SessionMode.INACTIVE:
            raise SessionStateError("Cannot enter the inactive mode")
        snapshot = frozenset(path for path in member_paths if path)
        selected = snapshot if mode is SessionMode.ADDING else frozenset()
        return SessionState(mode=mode, group_id=group_id, selected=selected, snapshot=snapshot)

    def with_selected(self, selected: Iterable[str]) -> SessionState:
        self._require_active()
        return replace(self, selected=frozenset(selected))

    def with_search(self, query: str) -> SessionState:
        self._require_active()
        return replace(self, search_query=query.strip())

    def delta(self, acknowledge_remove_all: bool = False) -> SelectionDelta:
        """Compute the membership delta this session would apply.

        In adding mode an empty selection over a non-empty snapshot removes
        every member and must be acknowledged explicitly.
        """
        self._require_active()
        if self.mode is SessionMode.REMOVING:
            return SelectionDelta(to_remove=self.selected & self.snapshot)
        if not self.selected and self.snapshot and not acknowledge_remove_all:
            raise RemoveAllConfirmationRequired(self.group_id or "", len(self.snapshot))
        return SelectionDelta(
            to_add=self.selected - self.snapshot,
            to_remove=self.snapshot - self.selected,
        )

    def _require_active(self) -> None:
        if not self.active:
            raise SessionStateError("No selection session is active")


@dataclass
class SelectionSession:
    """Mutable owner of the current ``SessionState``.

    Bulk and directory-scoped operations take the ``TreeIndex`` that defines
    "all" for the current mode and return how many paths actually changed.
    """

    state: SessionState = field(default_factory=SessionState)

    @property
    def mode(self) -> SessionMode:
        return self.state.mode

    @property
    def group_id(self) -> str | None:
        return self.state.group_id

    @property
    def active(self) -> bool:
        return self.state.active

    @property
    def selected(self) -> frozenset[str]:
        return self.state.selected

    def enter(self, group_id: str, mode: SessionMode, member_paths: Iterable[str]) -> SessionState:
        self.state = self.state.entered(group_id, mode, member_paths)
        logger.info(
            "Entered %s session for group %s (%d preselected)",
            mode.value,
            group_id,
            len(self.state.selected),
        )
        return self.state

    def toggle(self, path: str) -> bool:
        """Flip ``path`` in the selection; return whether it is now selected."""
        selected = set(self.state.selected)
        now_selected = path not in selected
        if now_selected:
            selected.add(path)
        else:
            selected.discard(path)
        self.state = self.state.with_selected(selected)
        return now_selected

    def _select(self, paths: Iterable[str]) -> int:
        before = self.state.selected
        after = before | frozenset(paths)
        self.state = self.state.with_selected(after)
        return len(after) - len(before)

    def _deselect(self, paths: Iterable[str]) -> int:
        before = self.state.selected
        after = before - frozenset(paths)
        self.state = self.state.with_selected(after)
        return len(before) - len(after)

    def select_all(self, index: TreeIndex) -> int:
        return self._select(index.file_paths())

    def deselect_all(self, index: TreeIndex) -> int:
        return self._deselect(index.file_paths())

    def select_in_directory(self, index: TreeIndex, directory: str) -> int:
        return self._select(index.paths_under(directory))

    def deselect_in_directory(self, index: TreeIndex, directory: str) -> int:
        return self._deselect(index.paths_under(directory))

    def set_search(self, query: str) -> SessionState:
        self.state = self.state.with_search(query)
        return self.state

    def delta(self, acknowledge_remove_all: bool = False) -> SelectionDelta:
        return self.state.delta(acknowledge_remove_all)

    def confirm(self, acknowledge_remove_all: bool = False) -> SelectionDelta:
        """Compute the delta and end the session.

        Callers that persist the delta should use ``delta`` and ``reset`` so a
        failed write leaves the session intact.
        """
        delta = self.delta(acknowledge_remove_all)
        self.reset()
        return delta

    def reset(self) -> SessionState:
        """Return to ``inactive``, discarding selection and snapshot."""
        if self.state.active:
            logger.info("Leaving %s session for group %s", self.state.mode.value, self.state.group_id)
        self.state = SessionState()
        return self.state

    def cancel(self) -> SessionState:
        return self.reset()


__all__ = ["SelectionDelta", "SelectionSession", "SessionMode", "SessionState"]
