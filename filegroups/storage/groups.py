"""Group entity plus name validation rules."""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from ..errors import GroupNameInvalidError

MIN_GROUP_NAME_LENGTH = 1
MAX_GROUP_NAME_LENGTH = 100
FORBIDDEN_NAME_CHARS = re.compile(r'[<>:"/\\|?*]')


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return _now()


def dedupe_refs(refs: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates and empty references, keeping first occurrences."""
    seen: set[str] = set()
    out: list[str] = []
    for ref in refs:
        if not isinstance(ref, str) or not ref or ref in seen:
            continue
        seen.add(ref)
        out.append(ref)
    return tuple(out)


def validate_group_name(name: str) -> str:
    """Return the trimmed name or raise ``GroupNameInvalidError``."""
    trimmed = (name or "").strip()
    if len(trimmed) < MIN_GROUP_NAME_LENGTH:
        raise GroupNameInvalidError(name, "name cannot be empty")
    if len(trimmed) > MAX_GROUP_NAME_LENGTH:
        raise GroupNameInvalidError(name, f"name cannot exceed {MAX_GROUP_NAME_LENGTH} characters")
    if FORBIDDEN_NAME_CHARS.search(trimmed):
        raise GroupNameInvalidError(name, 'name cannot contain any of <>:"/\\|?*')
    return trimmed


@dataclass(frozen=True)
class Group:
    """A named collection of resource references."""

    id: str
    name: str
    files: tuple[str, ...] = ()
    workspace_root: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def file_count(self) -> int:
        return len(self.files)

    def belongs_to(self, workspace_root: str | None) -> bool:
        """Groups without a recorded root are visible from every workspace."""
        return self.workspace_root is None or self.workspace_root == workspace_root

    def renamed(self, name: str) -> Group:
        return replace(self, name=validate_group_name(name), updated_at=_now())

    def with_files(self, refs: Iterable[str]) -> Group:
        return replace(self, files=dedupe_refs(refs), updated_at=_now())

    @classmethod
    def create(cls, name: str, workspace_root: str | None = None) -> Group:
        now = _now()
        return cls(
            id=uuid.uuid4().hex,
            name=validate_group_name(name),
            workspace_root=workspace_root,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_data(cls, data: dict[str, object]) -> Group | None:
        """Build a group from its JSON form; ``None`` when id/name are unusable."""
        group_id = data.get("id")
        name = data.get("name")
        if not isinstance(group_id, str) or not group_id or not isinstance(name, str):
            return None
        raw_files = data.get("files")
        files = dedupe_refs(raw_files) if isinstance(raw_files, list) else ()
        workspace_root = data.get("workspaceFolder")
        return cls(
            id=group_id,
            name=name,
            files=files,
            workspace_root=workspace_root if isinstance(workspace_root, str) and workspace_root else None,
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )

    def to_data(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "files": list(self.files),
            "workspaceFolder": self.workspace_root,
            "createdAt": (self.created_at or _now()).isoformat(),
            "updatedAt": (self.updated_at or _now()).isoformat(),
        }


__all__ = [
    "FORBIDDEN_NAME_CHARS",
    "Group",
    "MAX_GROUP_NAME_LENGTH",
    "MIN_GROUP_NAME_LENGTH",
    "dedupe_refs",
    "validate_group_name",
]
