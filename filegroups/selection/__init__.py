"""Selection sessions used to compute group membership deltas."""

from __future__ import annotations

from .session import SelectionDelta, SelectionSession, SessionMode, SessionState

__all__ = ["SelectionDelta", "SelectionSession", "SessionMode", "SessionState"]
