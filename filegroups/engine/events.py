"""Change notifications from the engine to the host display layer."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum


class ChangeSignal(str, Enum):
    """``STRUCTURAL``: refresh fully, identities may change.

    ``COSMETIC``: re-render visible items in place, keep expansion state.
    """

    STRUCTURAL = "structural"
    COSMETIC = "cosmetic"


ChangeListener = Callable[[ChangeSignal], None]


class ChangeEmitter:
    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, signal: ChangeSignal) -> None:
        for listener in list(self._listeners):
            listener(signal)


__all__ = ["ChangeEmitter", "ChangeListener", "ChangeSignal"]
