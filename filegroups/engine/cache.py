"""Memoized item lists keyed by view scope, group, and directory."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .items import Item

logger = logging.getLogger(__name__)


class ViewScope(str, Enum):
    WORKSPACE = "workspace"
    GLOBAL = "global"


@dataclass(frozen=True)
class CacheKey:
    scope: ViewScope
    group_id: str
    directory: str = ""


class RenderCache:
    """Plain key/value store with wholesale invalidation only."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, tuple[Item, ...]] = {}

    def get(self, key: CacheKey) -> tuple[Item, ...] | None:
        return self._entries.get(key)

    def put(self, key: CacheKey, items: Sequence[Item]) -> tuple[Item, ...]:
        stored = tuple(items)
        self._entries[key] = stored
        return stored

    def invalidate_all(self) -> None:
        if self._entries:
            logger.debug("Invalidating %d cached listing(s)", len(self._entries))
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[CacheKey]:
        return list(self._entries)


__all__ = ["CacheKey", "RenderCache", "ViewScope"]
