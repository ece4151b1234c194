"""Collaborator protocols consumed by the group-file engine."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..storage.groups import Group


@runtime_checkable
class MembershipRepository(Protocol):
    """Persisted membership lists keyed by group id.

    Both methods raise ``GroupNotFoundError`` for unknown ids.
    """

    async def get_members(self, group_id: str) -> list[str]: ...

    async def set_members(self, group_id: str, resource_refs: Sequence[str]) -> None: ...


@runtime_checkable
class GroupRepository(MembershipRepository, Protocol):
    """Membership repository that also owns group metadata."""

    async def list_groups(self) -> list[Group]: ...

    async def get_group(self, group_id: str) -> Group: ...

    async def create_group(self, name: str, workspace_root: str | None = None) -> Group: ...

    async def rename_group(self, group_id: str, name: str) -> Group: ...

    async def delete_group(self, group_id: str) -> None: ...

    async def remove_resources_everywhere(self, resource_refs: Iterable[str]) -> int:
        """Drop ``resource_refs`` from every group in one write; return entries removed."""
        ...


@runtime_checkable
class ResourceResolver(Protocol):
    def to_relative_path(self, resource_ref: str) -> str | None:
        """Return a workspace-relative path, or ``None``/the input when foreign."""
        ...

    async def exists_and_is_file(self, resource_ref: str) -> bool: ...


@runtime_checkable
class WorkspaceEnumerator(Protocol):
    async def list_all_files(self, exclude_globs: Sequence[str]) -> list[str]: ...


__all__ = [
    "GroupRepository",
    "MembershipRepository",
    "ResourceResolver",
    "WorkspaceEnumerator",
]
