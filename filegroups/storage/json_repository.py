"""JSON-file backed group repository.

The whole store is one JSON document ``{"groups": [...]}``. Reads tolerate a
missing or malformed file (treated as empty); writes go to a temp file that
atomically replaces the store.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from ..errors import GroupAlreadyExistsError, GroupNotFoundError
from .groups import Group, dedupe_refs, validate_group_name

logger = logging.getLogger(__name__)


class JsonGroupRepository:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> list[Group]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable group store %s", self.path, exc_info=True)
            return []
        raw_groups = data.get("groups") if isinstance(data, dict) else None
        if not isinstance(raw_groups, list):
            return []
        groups: list[Group] = []
        for raw in raw_groups:
            group = Group.from_data(raw) if isinstance(raw, dict) else None
            if group is None:
                logger.warning("Skipping malformed group record %r", raw)
                continue
            groups.append(group)
        return groups

    def _save(self, groups: Iterable[Group]) -> None:
        payload = json.dumps({"groups": [group.to_data() for group in groups]}, indent=2) + "\n"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".groups-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _find(self, groups: list[Group], group_id: str) -> int:
        for idx, group in enumerate(groups):
            if group.id == group_id:
                return idx
        raise GroupNotFoundError(group_id)

    @staticmethod
    def _ensure_unique_name(groups: list[Group], name: str, workspace_root: str | None, skip_id: str | None = None) -> None:
        for group in groups:
            if group.id == skip_id:
                continue
            if group.name == name and group.workspace_root == workspace_root:
                raise GroupAlreadyExistsError(name)

    async def list_groups(self) -> list[Group]:
        return self._load()

    async def get_group(self, group_id: str) -> Group:
        groups = self._load()
        return groups[self._find(groups, group_id)]

    async def create_group(self, name: str, workspace_root: str | None = None) -> Group:
        groups = self._load()
        group = Group.create(name, workspace_root)
        self._ensure_unique_name(groups, group.name, workspace_root)
        groups.append(group)
        self._save(groups)
        logger.info("Created group %s (%s)", group.name, group.id)
        return group

    async def rename_group(self, group_id: str, name: str) -> Group:
        groups = self._load()
        idx = self._find(groups, group_id)
        trimmed = validate_group_name(name)
        self._ensure_unique_name(groups, trimmed, groups[idx].workspace_root, skip_id=group_id)
        groups[idx] = groups[idx].renamed(trimmed)
        self._save(groups)
        return groups[idx]

    async def delete_group(self, group_id: str) -> None:
        groups = self._load()
        idx = self._find(groups, group_id)
        del groups[idx]
        self._save(groups)
        logger.info("Deleted group %s", group_id)

    async def get_members(self, group_id: str) -> list[str]:
        return list((await self.get_group(group_id)).files)

    async def set_members(self, group_id: str, resource_refs: Sequence[str]) -> None:
        groups = self._load()
        idx = self._find(groups, group_id)
        groups[idx] = groups[idx].with_files(resource_refs)
        self._save(groups)

    async def remove_resources_everywhere(self, resource_refs: Iterable[str]) -> int:
        """Remove ``resource_refs`` from every group; return how many entries went."""
        doomed = set(resource_refs)
        groups = self._load()
        removed = 0
        for idx, group in enumerate(groups):
            kept = [ref for ref in group.files if ref not in doomed]
            if len(kept) != len(group.files):
                removed += len(group.files) - len(kept)
                groups[idx] = group.with_files(dedupe_refs(kept))
        if removed:
            self._save(groups)
        return removed


__all__ = ["JsonGroupRepository"]
