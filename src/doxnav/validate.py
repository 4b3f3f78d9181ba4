"""Structural validation of navigation trees."""

from __future__ import annotations

import re
from dataclasses import dataclass

from doxnav.errors import MalformedNavTree, ShardFetchFailure
from doxnav.loader import ShardLoader, is_safe_key
from doxnav.model import Branch, LazyRef, NavNode

_LINK = re.compile(
    r"^(?:[A-Za-z0-9_.\-]+/)*[A-Za-z0-9_.\-]+(?:\.html)?(?:#[A-Za-z0-9_.\-:]+)?$"
)


def is_valid_link(link: str) -> bool:
    """Check a link against ``path(.html)?(#fragment)?``.

    Paths are relative, use filesystem-safe characters and never climb out
    of the HTML directory.
    """
    if not _LINK.match(link):
        return False
    path = link.split("#", 1)[0]
    return ".." not in path.split("/")


@dataclass(frozen=True)
class Problem:
    """One structural problem and where it was found."""

    breadcrumb: tuple[str, ...]
    reason: str

    def to_error(self) -> MalformedNavTree:
        return MalformedNavTree(self.reason, self.breadcrumb)


def find_problems(tree: NavNode, loader: ShardLoader | None = None) -> list[Problem]:
    """Collect every structural problem in ``tree``.

    Args:
        tree: Root node.
        loader: When given, lazy references are fetched and checked too, and
            a reference that reappears inside its own expansion is reported
            as a cycle.

    Returns:
        Problems in document order; empty for a well-formed tree.
    """
    problems: list[Problem] = []
    _check(tree, (), loader, (), set(), problems)
    return problems


def _check(
    node: NavNode,
    parent: tuple[str, ...],
    loader: ShardLoader | None,
    expanding: tuple[str, ...],
    visited: set[str],
    problems: list[Problem],
) -> None:
    breadcrumb = (*parent, node.label)
    if not node.label:
        problems.append(Problem(breadcrumb, "Node label is empty"))
    if node.link and not is_valid_link(node.link):
        problems.append(Problem(breadcrumb, f"Malformed link: {node.link!r}"))

    children = node.children
    if isinstance(children, Branch):
        for child in children.children:
            _check(child, breadcrumb, loader, expanding, visited, problems)
        return
    if not isinstance(children, LazyRef):
        return

    key = children.key
    if not key:
        problems.append(Problem(breadcrumb, "Lazy child reference is empty"))
        return
    if not is_safe_key(key):
        problems.append(Problem(breadcrumb, f"Unsafe lazy child reference: {key!r}"))
        return
    if loader is None:
        return
    if key in expanding:
        chain = " -> ".join((*expanding, key))
        problems.append(Problem(breadcrumb, f"Cyclic lazy child reference: {chain}"))
        return
    # A table is checked once; any cycle through it shows up on that first walk
    if key in visited:
        return
    visited.add(key)
    try:
        nodes = loader.load_children(key)
    except ShardFetchFailure as exc:
        problems.append(Problem(breadcrumb, str(exc)))
        return
    for child in nodes:
        _check(child, breadcrumb, loader, (*expanding, key), visited, problems)


def validate_tree(tree: NavNode, loader: ShardLoader | None = None) -> None:
    """Reject a malformed tree.

    Raises:
        MalformedNavTree: For the first problem found.
    """
    problems = find_problems(tree, loader)
    if problems:
        raise problems[0].to_error()


def flat_fallback(tree: NavNode) -> list[tuple[str, str]]:
    """List ``(label, link)`` of every well-formed linked node, in order.

    This is what a page shows instead of the sidebar when the tree is
    rejected.
    """
    return [
        (node.label, node.link)
        for _, node in tree.walk()
        if node.label and node.link and is_valid_link(node.link)
    ]
