"""Navigation tree model."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from doxnav.strings import SyncMessages

if TYPE_CHECKING:
    from doxnav.shards import NavTreeIndex


@dataclass(frozen=True)
class Leaf:
    """No children (literal ``null``)."""


@dataclass(frozen=True)
class Branch:
    """Inline ordered children."""

    children: tuple[NavNode, ...]


@dataclass(frozen=True)
class LazyRef:
    """Children stored in a separate table named ``key``, fetched on demand."""

    key: str


Children = Union[Leaf, Branch, LazyRef]

LEAF = Leaf()


@dataclass(frozen=True)
class NavNode:
    """One entry of the navigation tree.

    ``link`` is empty for container-only nodes.
    """

    label: str
    link: str = ""
    children: Children = field(default=LEAF)

    @property
    def is_lazy(self) -> bool:
        return isinstance(self.children, LazyRef)

    @property
    def child_nodes(self) -> tuple[NavNode, ...]:
        """Inline children, empty for leaves and lazy references."""
        if isinstance(self.children, Branch):
            return self.children.children
        return ()

    def walk(self) -> Iterator[tuple[tuple[str, ...], NavNode]]:
        """Yield ``(breadcrumb, node)`` for this node and its inline descendants."""
        stack: list[tuple[tuple[str, ...], NavNode]] = [((self.label,), self)]
        while stack:
            breadcrumb, node = stack.pop()
            yield breadcrumb, node
            for child in reversed(node.child_nodes):
                stack.append(((*breadcrumb, child.label), child))


def count_nodes(node: NavNode) -> int:
    """Count a node and its inline descendants."""
    return sum(1 for _ in node.walk())


@dataclass(frozen=True)
class NavTreeData:
    """Everything declared by one ``navtreedata.js`` file."""

    tree: NavNode
    index: NavTreeIndex
    sync_messages: SyncMessages = field(default_factory=SyncMessages)
