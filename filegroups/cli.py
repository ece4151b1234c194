"""Command-line front door for filegroups.

Builds a ``GroupFileEngine`` over the JSON group store and the current
workspace directory, then runs one management command.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from . import config
from .engine import DirectoryItem, FileItem, GroupFileEngine, GroupItem, Item, ViewScope
from .errors import GroupError, GroupNotFoundError
from .storage import JsonGroupRepository
from .workspace import FileSystemWorkspace


def build_engine(workspace: Path, data_path: Path, view_scope: str) -> GroupFileEngine:
    fs_workspace = FileSystemWorkspace(workspace)
    return GroupFileEngine(
        JsonGroupRepository(data_path),
        workspace_root=fs_workspace.root_ref,
        resource_resolver=fs_workspace,
        workspace_enumerator=fs_workspace,
        exclude_globs=config.load_exclude_globs(),
        view_scope=ViewScope(view_scope),
        max_files_per_group=config.load_max_files_per_group(),
    )


async def resolve_group_id(engine: GroupFileEngine, token: str) -> str:
    """Accept a group id or a unique group name."""
    groups = await engine.repository.list_groups()
    for group in groups:
        if group.id == token:
            return group.id
    named = [group for group in groups if group.name == token]
    if len(named) == 1:
        return named[0].id
    if len(named) > 1:
        raise SystemExit(f"Group name is ambiguous, use an id: {token}")
    raise GroupNotFoundError(token)


async def render_items(engine: GroupFileEngine, items: list[Item], depth: int = 0) -> list[str]:
    """Render items and their descendants as indented text rows."""
    lines: list[str] = []
    indent = "  " * depth
    for item in items:
        if isinstance(item, DirectoryItem):
            lines.append(f"{indent}▾ {item.name}/ ({item.file_count})")
            lines.extend(await render_items(engine, await engine.get_children(item), depth + 1))
        elif isinstance(item, FileItem):
            label = f" [{item.language}]" if item.language else ""
            lines.append(f"{indent}  {item.name}{label}")
        elif isinstance(item, GroupItem):
            lines.append(f"{indent}{item.name} ({item.file_count} files) [{item.group_id}]")
    return lines


def _refs_for(paths: list[str]) -> list[str]:
    return [Path(raw).resolve().as_uri() for raw in paths]


async def run_command(engine: GroupFileEngine, args: argparse.Namespace) -> str:
    command = args.command
    if command == "groups":
        return "\n".join(await render_items(engine, await engine.get_children()))
    if command == "create":
        group = await engine.create_group(args.name)
        return f"Created {group.name} [{group.id}]"

    group_id = await resolve_group_id(engine, args.group)
    if command == "rename":
        group = await engine.rename_group(group_id, args.name)
        return f"Renamed to {group.name}"
    if command == "delete":
        await engine.delete_group(group_id)
        return f"Deleted {group_id}"
    if command == "tree":
        if args.search:
            engine.set_search(args.search)
        return "\n".join(await render_items(engine, await engine.list_group_tree(group_id)))
    if command == "add":
        added = await engine.add_resources(group_id, _refs_for(args.paths))
        return f"Added {added} file(s)"
    if command == "remove":
        removed = await engine.remove_resources(group_id, _refs_for(args.paths))
        return f"Removed {removed} file(s)"
    raise SystemExit(f"Unknown command: {command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="filegroups", description="Manage named groups of workspace files.")
    parser.add_argument("--workspace", default=None, help="Workspace root (default: current directory).")
    parser.add_argument("--data", default=None, help="Group store JSON file.")
    parser.add_argument(
        "--scope",
        choices=config.VIEW_SCOPES,
        default=None,
        help="List groups of this workspace only, or every group.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity.")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("groups", help="List groups.")
    sub.add_parser("prune", help="Drop files that no longer exist from every group.")
    scope = sub.add_parser("scope", help="Remember the default listing scope.")
    scope.add_argument("value", choices=config.VIEW_SCOPES)
    create = sub.add_parser("create", help="Create a group.")
    create.add_argument("name")
    rename = sub.add_parser("rename", help="Rename a group.")
    rename.add_argument("group")
    rename.add_argument("name")
    delete = sub.add_parser("delete", help="Delete a group.")
    delete.add_argument("group")
    tree = sub.add_parser("tree", help="Print a group's file tree.")
    tree.add_argument("group")
    tree.add_argument("--search", default="", help="Case-insensitive name filter.")
    for name, help_text in (("add", "Add files to a group."), ("remove", "Remove files from a group.")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("group")
        cmd.add_argument("paths", nargs="+")
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    workspace = Path(args.workspace) if args.workspace else Path.cwd()
    if not workspace.is_dir():
        raise SystemExit(f"Workspace not found: {workspace}")
    data_path = Path(args.data) if args.data else config.default_data_path()
    engine = build_engine(workspace, data_path, args.scope or config.load_view_scope())

    try:
        if args.command == "scope":
            config.save_view_scope(args.value)
            engine.set_view_scope(args.value)
            output = f"Default scope: {args.value}"
        elif args.command == "prune":
            removed = asyncio.run(engine.prune_missing_resources())
            output = f"Removed {removed} missing file reference(s)"
        else:
            output = asyncio.run(run_command(engine, args))
    except GroupError as exc:
        raise SystemExit(exc.message) from exc
    if output:
        sys.stdout.write(output + "\n")


if __name__ == "__main__":
    main()
