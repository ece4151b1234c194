"""In-memory collaborators for engine tests."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from filegroups.errors import GroupNotFoundError
from filegroups.storage.groups import Group, dedupe_refs

ROOT = "/work/project"


def ref(relative: str, root: str = ROOT) -> str:
    return f"file://{root}/{relative}"


class InMemoryGroupRepository:
    def __init__(self) -> None:
        self.groups: dict[str, Group] = {}
        self.fail_writes: Exception | None = None
        self.set_calls: list[tuple[str, list[str]]] = []
        self._next_id = 1

    def add(self, name: str, files: Sequence[str] = (), workspace_root: str | None = ROOT) -> Group:
        group = Group(id=f"g{self._next_id}", name=name, files=dedupe_refs(files), workspace_root=workspace_root)
        self._next_id += 1
        self.groups[group.id] = group
        return group

    def _get(self, group_id: str) -> Group:
        try:
            return self.groups[group_id]
        except KeyError:
            raise GroupNotFoundError(group_id) from None

    async def list_groups(self) -> list[Group]:
        return list(self.groups.values())

    async def get_group(self, group_id: str) -> Group:
        return self._get(group_id)

    async def create_group(self, name: str, workspace_root: str | None = None) -> Group:
        return self.add(name, workspace_root=workspace_root)

    async def rename_group(self, group_id: str, name: str) -> Group:
        group = self._get(group_id).renamed(name)
        self.groups[group_id] = group
        return group

    async def delete_group(self, group_id: str) -> None:
        self._get(group_id)
        del self.groups[group_id]

    async def get_members(self, group_id: str) -> list[str]:
        return list(self._get(group_id).files)

    async def set_members(self, group_id: str, resource_refs: Sequence[str]) -> None:
        group = self._get(group_id)
        if self.fail_writes is not None:
            raise self.fail_writes
        self.set_calls.append((group_id, list(resource_refs)))
        self.groups[group_id] = group.with_files(resource_refs)

    async def remove_resources_everywhere(self, resource_refs: Iterable[str]) -> int:
        doomed = set(resource_refs)
        updated: dict[str, Group] = {}
        removed = 0
        for group_id, group in self.groups.items():
            kept = [ref for ref in group.files if ref not in doomed]
            if len(kept) != len(group.files):
                removed += len(group.files) - len(kept)
                updated[group_id] = group.with_files(kept)
        if updated and self.fail_writes is not None:
            raise self.fail_writes
        self.groups.update(updated)
        return removed


class FakeWorkspace:
    """Resolver/enumerator over a fixed list of workspace-relative files."""

    def __init__(self, files: Sequence[str], root: str = ROOT) -> None:
        self.root = root
        self.files = list(files)
        self.enumerations = 0
        self.fail_enumeration: Exception | None = None

    def to_relative_path(self, resource_ref: str) -> str | None:
        prefix = f"file://{self.root}/"
        if resource_ref.startswith(prefix):
            return resource_ref[len(prefix) :]
        return None

    async def exists_and_is_file(self, resource_ref: str) -> bool:
        relative = self.to_relative_path(resource_ref)
        return relative is not None and relative in self.files

    async def list_all_files(self, exclude_globs: Sequence[str]) -> list[str]:
        self.enumerations += 1
        if self.fail_enumeration is not None:
            raise self.fail_enumeration
        return [ref(path, self.root) for path in self.files]
