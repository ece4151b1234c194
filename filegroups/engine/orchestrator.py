"""Group-file engine: trees, search, selection sessions, cache, and signals.

The engine owns every mutable structure (render cache, selection session,
session tree indexes). Hosts read through ``get_children`` which returns
immutable item snapshots, and learn about changes via ``on_change``.

Structural changes (group CRUD, membership writes, search, view scope,
session enter/exit) invalidate the cache and emit ``STRUCTURAL``. Selection
mutations emit ``COSMETIC`` and never touch the cache; while a session is
active every listing is recomputed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from ..config import DEFAULT_EXCLUDE_GLOBS, DEFAULT_MAX_FILES_PER_GROUP
from ..errors import GroupFileLimitError, GroupError, GroupNotFoundError, RepositoryWriteError, SessionStateError
from ..languages import language_for
from ..paths.resolver import PathResolver, normalize_relative_path
from ..selection import SelectionSession, SessionMode, SessionState
from ..storage.groups import Group, dedupe_refs
from ..tree_model import (
    TreeIndex,
    TreeNode,
    children_of,
    count_matches,
    file_count,
    filter_tree,
    index_paths,
    index_resource_refs,
    iter_file_paths,
    normalize_query,
    sorted_children,
)
from .cache import CacheKey, RenderCache, ViewScope
from .events import ChangeEmitter, ChangeListener, ChangeSignal
from .interfaces import GroupRepository, ResourceResolver, WorkspaceEnumerator
from .items import (
    ActionButtonItem,
    DirectoryItem,
    FileItem,
    GroupItem,
    Item,
    SessionAction,
    action_key,
    item_key,
)

logger = logging.getLogger(__name__)

GROUPS_MARKER = "<groups>"


@dataclass(frozen=True)
class MembershipDelta:
    """Resource references actually added to / removed from a group."""

    group_id: str
    to_add: frozenset[str] = frozenset()
    to_remove: frozenset[str] = frozenset()


class GroupFileEngine:
    def __init__(
        self,
        repository: GroupRepository,
        *,
        workspace_root: str | None,
        resource_resolver: ResourceResolver | None = None,
        workspace_enumerator: WorkspaceEnumerator | None = None,
        exclude_globs: Sequence[str] = DEFAULT_EXCLUDE_GLOBS,
        view_scope: ViewScope = ViewScope.WORKSPACE,
        max_files_per_group: int = DEFAULT_MAX_FILES_PER_GROUP,
    ) -> None:
        self.repository = repository
        self.workspace_root = workspace_root
        self.resource_resolver = resource_resolver
        self.workspace_enumerator = workspace_enumerator
        self.exclude_globs = tuple(exclude_globs)
        self.max_files_per_group = max_files_per_group
        self.cache = RenderCache()
        self.session = SelectionSession()
        self._view_scope = ViewScope(view_scope)
        self._resolver = PathResolver(workspace_root, resource_resolver=resource_resolver)
        self._events = ChangeEmitter()
        self._search_query = ""
        self._session_group_index = TreeIndex()
        self._session_workspace_index: TreeIndex | None = None
        self._confirm_in_flight = False
        self._session_generation = 0

    # -- notifications -------------------------------------------------

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        return self._events.subscribe(listener)

    def _structural_change(self) -> None:
        self.cache.invalidate_all()
        self._events.emit(ChangeSignal.STRUCTURAL)

    def _cosmetic_change(self) -> None:
        self._events.emit(ChangeSignal.COSMETIC)

    def refresh(self) -> None:
        self._structural_change()

    # -- view state ----------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def view_scope(self) -> ViewScope:
        return self._view_scope

    def set_view_scope(self, scope: ViewScope | str) -> None:
        scope = ViewScope(scope)
        if scope is self._view_scope:
            return
        self._view_scope = scope
        self._structural_change()

    @property
    def search_query(self) -> str:
        if self.session.active:
            return self.session.state.search_query
        return self._search_query

    def set_search(self, query: str) -> None:
        """Set the name filter for the current view (session or normal)."""
        if self.session.active:
            self.session.set_search(query)
        else:
            self._search_query = query.strip()
        self._structural_change()

    def clear_search(self) -> None:
        self.set_search("")

    # -- repository access ---------------------------------------------

    def _force_exit_if_session_group(self, group_id: str) -> None:
        if self.session.active and self.session.group_id == group_id:
            logger.warning("Group %s disappeared; ending its %s session", group_id, self.session.mode.value)
            self._end_session()

    async def _fetch_group(self, group_id: str) -> Group:
        try:
            return await self.repository.get_group(group_id)
        except GroupNotFoundError:
            self._force_exit_if_session_group(group_id)
            raise

    async def _fetch_members(self, group_id: str) -> list[str]:
        try:
            return list(await self.repository.get_members(group_id))
        except GroupNotFoundError:
            self._force_exit_if_session_group(group_id)
            raise

    async def _write_members(self, group_id: str, refs: Sequence[str], previous_count: int) -> None:
        """Persist ``refs``; the file limit only blocks writes that grow a group."""
        if len(refs) > previous_count and len(refs) > self.max_files_per_group:
            raise GroupFileLimitError(group_id, len(refs), self.max_files_per_group)
        try:
            await self.repository.set_members(group_id, list(refs))
        except GroupNotFoundError:
            self._force_exit_if_session_group(group_id)
            raise
        except GroupError:
            raise
        except Exception as exc:
            raise RepositoryWriteError(group_id, exc) from exc

    def _resolver_for(self, group: Group) -> PathResolver:
        return self._resolver.with_alternate_roots([group.workspace_root])

    async def _group_index(self, group_id: str) -> TreeIndex:
        group = await self._fetch_group(group_id)
        members = await self._fetch_members(group_id)
        return index_resource_refs(members, self._resolver_for(group))

    async def _visible_groups(self) -> list[Group]:
        groups = await self.repository.list_groups()
        if self._view_scope is ViewScope.WORKSPACE:
            groups = [group for group in groups if group.belongs_to(self.workspace_root)]
        return sorted(groups, key=lambda group: (group.name.casefold(), group.id))

    async def _enumerate_workspace(self, group_index: TreeIndex) -> TreeIndex:
        """Index every workspace file plus the group's own members.

        Members outside the workspace stay visible so they can be unchecked.
        """
        refs: list[str] = []
        if self.workspace_enumerator is not None:
            refs = list(await self.workspace_enumerator.list_all_files(self.exclude_globs))
        workspace_index = index_resource_refs(refs, self._resolver)
        entries = [(path, workspace_index.ref_for(path)) for path in workspace_index.file_paths()]
        entries.extend((path, group_index.ref_for(path)) for path in group_index.file_paths())
        return index_paths(entries)

    # -- item materialization ------------------------------------------

    def _materialize(
        self,
        nodes: Iterable[TreeNode],
        group_id: str,
        *,
        in_workspace_tree: bool = False,
    ) -> list[Item]:
        state = self.session.state
        mode = state.mode
        decorate = state.active and state.group_id == group_id
        items: list[Item] = []
        for node in sorted_children(nodes):
            key = item_key(group_id, node.path, mode)
            if node.is_dir:
                selected_count = None
                if decorate:
                    selected_count = sum(1 for path in iter_file_paths([node]) if path in state.selected)
                items.append(
                    DirectoryItem(
                        key=key,
                        group_id=group_id,
                        path=node.path,
                        name=node.name,
                        file_count=file_count(node),
                        in_workspace_tree=in_workspace_tree,
                        selected_count=selected_count,
                    )
                )
            else:
                items.append(
                    FileItem(
                        key=key,
                        group_id=group_id,
                        path=node.path,
                        name=node.name,
                        resource_ref=node.resource_ref,
                        selected=state.is_selected(node.path) if decorate else None,
                        language=language_for(node.name),
                        in_workspace_tree=in_workspace_tree,
                    )
                )
        return items

    def _listing(self, index: TreeIndex, group_id: str, directory: str, *, in_workspace_tree: bool = False) -> list[Item]:
        filtered = filter_tree(index.roots, self.search_query)
        nodes = children_of(filtered, directory)
        return self._materialize(nodes, group_id, in_workspace_tree=in_workspace_tree)

    # -- listings ------------------------------------------------------

    async def get_children(self, item: Item | None = None) -> list[Item]:
        """Return render-ready children of ``item`` (or the root listing)."""
        if item is None:
            if self.session.active:
                return await self._session_root_items()
            return await self.list_groups()
        if isinstance(item, GroupItem):
            return await self.list_group_tree(item.group_id)
        if isinstance(item, DirectoryItem):
            if item.in_workspace_tree:
                return await self.list_workspace_tree(item.path)
            return await self.list_group_tree(item.group_id, item.path)
        return []

    async def list_groups(self) -> list[Item]:
        key = CacheKey(self._view_scope, GROUPS_MARKER)
        if not self.session.active:
            cached = self.cache.get(key)
            if cached is not None:
                return list(cached)

        query = normalize_query(self._search_query)
        items: list[Item] = []
        for group in await self._visible_groups():
            if query and query not in group.name.casefold():
                index = index_resource_refs(group.files, self._resolver_for(group))
                if not filter_tree(index.roots, query):
                    continue
            items.append(
                GroupItem(
                    key=item_key(group.id, "", self.session.mode),
                    group_id=group.id,
                    name=group.name,
                    file_count=group.file_count,
                    workspace_root=group.workspace_root,
                )
            )

        if not self.session.active:
            self.cache.put(key, items)
        return items

    async def list_group_tree(self, group_id: str, directory: str = "") -> list[Item]:
        """List one directory level of a group's tree.

        The session's own group lists its snapshot tree decorated with the
        selection; everything else is served from the cache when no session
        is active.
        """
        directory = normalize_relative_path(directory)
        if self.session.active and self.session.group_id == group_id:
            return self._listing(self._session_group_index, group_id, directory)

        key = CacheKey(self._view_scope, group_id, directory)
        if not self.session.active:
            cached = self.cache.get(key)
            if cached is not None:
                return list(cached)

        items = self._listing(await self._group_index(group_id), group_id, directory)
        if not self.session.active:
            self.cache.put(key, items)
        return items

    async def list_workspace_tree(self, directory: str = "") -> list[Item]:
        """List one directory level of the add-mode workspace tree."""
        state = self.session.state
        if state.mode is not SessionMode.ADDING or state.group_id is None:
            raise SessionStateError("The workspace tree is only available while adding files")
        if self._session_workspace_index is None:
            self._session_workspace_index = await self._enumerate_workspace(self._session_group_index)
        directory = normalize_relative_path(directory)
        return self._listing(self._session_workspace_index, state.group_id, directory, in_workspace_tree=True)

    def _session_tree_index(self) -> TreeIndex:
        if self.session.mode is SessionMode.ADDING:
            return self._session_workspace_index or self._session_group_index
        return self._session_group_index

    async def _session_root_items(self) -> list[Item]:
        state = self.session.state
        mode = state.mode
        items: list[Item] = []
        if state.search_query:
            matches = count_matches(self._session_tree_index().roots, state.search_query)
            items.append(
                ActionButtonItem(
                    key=action_key(SessionAction.CLEAR_SEARCH, mode),
                    action=SessionAction.CLEAR_SEARCH,
                    label=f'Clear search "{state.search_query}" ({matches} matches)',
                )
            )
        else:
            items.append(
                ActionButtonItem(action_key(SessionAction.SEARCH, mode), SessionAction.SEARCH, "Search Files")
            )
        selected = len(state.selected)
        confirm_label = (
            f"Confirm Add/Remove ({selected} selected)"
            if mode is SessionMode.ADDING
            else f"Remove Selected ({selected} to remove)"
        )
        items.extend(
            [
                ActionButtonItem(action_key(SessionAction.SELECT_ALL, mode), SessionAction.SELECT_ALL, "Select All Files"),
                ActionButtonItem(
                    action_key(SessionAction.DESELECT_ALL, mode), SessionAction.DESELECT_ALL, "Deselect All Files"
                ),
                ActionButtonItem(action_key(SessionAction.CONFIRM, mode), SessionAction.CONFIRM, confirm_label),
                ActionButtonItem(action_key(SessionAction.CANCEL, mode), SessionAction.CANCEL, "Cancel"),
            ]
        )
        if mode is SessionMode.ADDING:
            items.extend(await self.list_workspace_tree())
        else:
            items.extend(await self.list_group_tree(state.group_id or ""))
        return items

    # -- selection session ---------------------------------------------

    async def enter_session(self, group_id: str, mode: SessionMode | str) -> SessionState:
        """Start an add/remove session for ``group_id``.

        Any active session is force-exited first. Membership (and, in adding
        mode, the workspace) is fetched before state changes, so a failed
        fetch leaves the engine untouched.
        """
        mode = SessionMode(mode)
        if mode is SessionMode.INACTIVE:
            raise SessionStateError("Use cancel_session to leave a session")
        if self._confirm_in_flight:
            raise SessionStateError("A confirm is still in progress")

        group_index = await self._group_index(group_id)
        workspace_index = await self._enumerate_workspace(group_index) if mode is SessionMode.ADDING else None

        if self.session.active:
            logger.info("Force-exiting %s session for group %s", self.session.mode.value, self.session.group_id)
            self.session.reset()
        self.session.enter(group_id, mode, group_index.file_paths())
        self._session_generation += 1
        self._session_group_index = group_index
        self._session_workspace_index = workspace_index
        self._structural_change()
        return self.session.state

    def _require_session(self) -> SessionState:
        if not self.session.active:
            raise SessionStateError("No selection session is active")
        return self.session.state

    def toggle(self, path: str) -> bool:
        self._require_session()
        now_selected = self.session.toggle(normalize_relative_path(path))
        self._cosmetic_change()
        return now_selected

    async def select_all(self) -> int:
        """Select every path of the session's "all" scope.

        Adding mode re-enumerates the workspace; removing mode uses the
        group's own tree.
        """
        self._require_session()
        if self.session.mode is SessionMode.ADDING:
            generation = self._session_generation
            workspace_index = await self._enumerate_workspace(self._session_group_index)
            if generation != self._session_generation:
                logger.info("Session changed while enumerating the workspace; select all discarded")
                return 0
            self._session_workspace_index = workspace_index
        changed = self.session.select_all(self._session_tree_index())
        if changed:
            self._cosmetic_change()
        return changed

    def deselect_all(self) -> int:
        self._require_session()
        changed = self.session.deselect_all(self._session_tree_index())
        if changed:
            self._cosmetic_change()
        return changed

    def select_in_directory(self, directory: str) -> int:
        self._require_session()
        changed = self.session.select_in_directory(self._session_tree_index(), normalize_relative_path(directory))
        if changed:
            self._cosmetic_change()
        return changed

    def deselect_in_directory(self, directory: str) -> int:
        self._require_session()
        changed = self.session.deselect_in_directory(self._session_tree_index(), normalize_relative_path(directory))
        if changed:
            self._cosmetic_change()
        return changed

    def _ref_for_path(self, path: str) -> str | None:
        for index in (self._session_workspace_index, self._session_group_index):
            if index is not None:
                ref = index.ref_for(path)
                if ref is not None:
                    return ref
        return self._resolver.to_resource_ref(path)

    async def confirm_session(self, acknowledge_remove_all: bool = False) -> MembershipDelta:
        """Persist the session delta and end the session.

        Raises ``RemoveAllConfirmationRequired`` for an unacknowledged empty
        add-mode selection. On any write failure the session stays as it was.
        """
        state = self._require_session()
        if self._confirm_in_flight:
            raise SessionStateError("A confirm is already in progress")
        group_id = state.group_id or ""
        delta = self.session.delta(acknowledge_remove_all)

        self._confirm_in_flight = True
        try:
            group = await self._fetch_group(group_id)
            current = await self._fetch_members(group_id)
            resolver = self._resolver_for(group)

            kept: list[str] = []
            removed: set[str] = set()
            present_paths: set[str] = set()
            for ref in current:
                path = resolver.resolve(ref)
                if path is not None and path in delta.to_remove:
                    removed.add(ref)
                    continue
                kept.append(ref)
                if path is not None:
                    present_paths.add(path)

            added: set[str] = set()
            for path in sorted(delta.to_add):
                if path in present_paths:
                    continue
                ref = self._ref_for_path(path)
                if ref is None:
                    logger.warning("No resource reference for %r; not adding it", path)
                    continue
                added.add(ref)
                kept.append(ref)

            updated = list(dedupe_refs(kept))
            if added or removed:
                await self._write_members(group_id, updated, len(current))
        finally:
            self._confirm_in_flight = False

        logger.info("Group %s: %d added, %d removed", group_id, len(added), len(removed))
        self._end_session()
        return MembershipDelta(group_id=group_id, to_add=frozenset(added), to_remove=frozenset(removed))

    def cancel_session(self) -> None:
        if self._confirm_in_flight:
            raise SessionStateError("Wait for the pending confirm to settle before cancelling")
        if not self.session.active:
            return
        self._end_session()

    def _end_session(self) -> None:
        self.session.reset()
        self._session_generation += 1
        self._session_group_index = TreeIndex()
        self._session_workspace_index = None
        self._structural_change()

    # -- group management ----------------------------------------------

    async def create_group(self, name: str) -> Group:
        group = await self.repository.create_group(name, self.workspace_root)
        self._structural_change()
        return group

    async def rename_group(self, group_id: str, name: str) -> Group:
        try:
            group = await self.repository.rename_group(group_id, name)
        except GroupNotFoundError:
            self._force_exit_if_session_group(group_id)
            raise
        self._structural_change()
        return group

    async def delete_group(self, group_id: str) -> None:
        try:
            await self.repository.delete_group(group_id)
        except GroupNotFoundError:
            self._force_exit_if_session_group(group_id)
            raise
        if self.session.active and self.session.group_id == group_id:
            logger.info("Group %s deleted; ending its %s session", group_id, self.session.mode.value)
            self._end_session()
            return
        self._structural_change()

    def _reject_direct_write_during_session(self, group_id: str) -> None:
        if self.session.active and self.session.group_id == group_id:
            raise SessionStateError(f"Group {group_id} is being edited in a selection session")

    async def add_resources(self, group_id: str, resource_refs: Iterable[str]) -> int:
        """Add existing files to a group outside a session; return the count added."""
        self._reject_direct_write_during_session(group_id)
        current = await self._fetch_members(group_id)
        present = set(current)
        additions: list[str] = []
        for ref in dedupe_refs(resource_refs):
            if ref in present:
                continue
            if self.resource_resolver is not None and not await self.resource_resolver.exists_and_is_file(ref):
                logger.warning("Skipping %r: not an existing file", ref)
                continue
            additions.append(ref)
        if not additions:
            return 0
        await self._write_members(group_id, current + additions, len(current))
        self._structural_change()
        return len(additions)

    async def remove_resources(self, group_id: str, resource_refs: Iterable[str]) -> int:
        self._reject_direct_write_during_session(group_id)
        doomed = set(resource_refs)
        current = await self._fetch_members(group_id)
        kept = [ref for ref in current if ref not in doomed]
        if len(kept) == len(current):
            return 0
        await self._write_members(group_id, kept, len(current))
        self._structural_change()
        return len(current) - len(kept)

    async def handle_deleted_resources(self, resource_refs: Iterable[str]) -> int:
        """Drop externally deleted files from every group; return entries removed."""
        doomed = set(resource_refs)
        if not doomed:
            return 0
        removed = await self.repository.remove_resources_everywhere(doomed)
        if removed:
            logger.info("Removed %d deleted file reference(s) from groups", removed)
            self._structural_change()
        return removed

    async def prune_missing_resources(self) -> int:
        """Check every member with the resource resolver and drop missing files."""
        if self.resource_resolver is None:
            return 0
        missing: set[str] = set()
        for group in await self.repository.list_groups():
            for ref in group.files:
                if ref not in missing and not await self.resource_resolver.exists_and_is_file(ref):
                    missing.add(ref)
        return await self.handle_deleted_resources(missing)


__all__ = ["GROUPS_MARKER", "GroupFileEngine", "MembershipDelta"]
