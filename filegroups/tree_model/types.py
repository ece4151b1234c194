"""Tree node datatypes shared by index, filter, and session modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class TreeNode:
    """One path segment in a relative-path tree.

    ``children`` is keyed by child segment name; its order carries no meaning,
    use ``sorted_children`` for display order. Equality is structural.
    """

    name: str
    path: str
    kind: NodeKind
    resource_ref: str | None = None
    children: dict[str, TreeNode] = field(default_factory=dict)

    @property
    def is_file(self) -> bool:
        return self.kind is NodeKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    @classmethod
    def file(cls, name: str, path: str, resource_ref: str | None = None) -> TreeNode:
        return cls(name=name, path=path, kind=NodeKind.FILE, resource_ref=resource_ref)

    @classmethod
    def directory(cls, name: str, path: str, resource_ref: str | None = None) -> TreeNode:
        return cls(name=name, path=path, kind=NodeKind.DIRECTORY, resource_ref=resource_ref)

    def shallow_copy(self, children: dict[str, TreeNode] | None = None) -> TreeNode:
        """Return a copy of this node with a new children mapping."""
        return TreeNode(
            name=self.name,
            path=self.path,
            kind=self.kind,
            resource_ref=self.resource_ref,
            children=dict(self.children) if children is None else children,
        )


__all__ = ["NodeKind", "TreeNode"]
