"""Routing deep links to their place in the navigation tree."""

from __future__ import annotations

from dataclasses import dataclass

from doxnav.errors import AnchorNotFound, MalformedNavTree
from doxnav.loader import ShardLoader
from doxnav.model import LazyRef, NavNode, NavTreeData
from doxnav.shards import resolve_shard


@dataclass(frozen=True)
class Location:
    """Where an anchor sits in the tree."""

    anchor: str
    key: str
    shard: int
    path: tuple[int, ...]
    breadcrumb: tuple[str, ...]
    node: NavNode


def _children(node: NavNode, loader: ShardLoader) -> tuple[NavNode, ...]:
    if isinstance(node.children, LazyRef):
        return loader.load_children(node.children.key)
    return node.child_nodes


def walk_path(
    tree: NavNode, path: tuple[int, ...], loader: ShardLoader
) -> tuple[tuple[str, ...], NavNode]:
    """Follow child positions from the root, fetching lazy children on the way.

    Returns:
        The labels passed through (root first) and the node reached.

    Raises:
        MalformedNavTree: If a position does not exist.
        ShardFetchFailure: If a lazy child table can't be loaded.
    """
    node = tree
    breadcrumb = [tree.label]
    for depth, step in enumerate(path):
        children = _children(node, loader)
        if step >= len(children):
            raise MalformedNavTree(
                f"Tree path {list(path)} leaves the tree at step {depth} "
                f"(position {step} of {len(children)} children)",
                breadcrumb,
            )
        node = children[step]
        breadcrumb.append(node.label)
    return tuple(breadcrumb), node


def locate(data: NavTreeData, loader: ShardLoader, anchor: str) -> Location:
    """Find the tree entry for ``anchor``.

    The anchor is looked up in the shard chosen by :func:`resolve_shard`.
    When an ``page.html#fragment`` anchor is not listed, the bare page is
    tried next, as the tree view does when syncing to an unknown member.

    Raises:
        NoShardsAvailable: If the index is empty.
        AnchorNotFound: If neither the anchor nor its page is indexed.
        ShardFetchFailure: If a shard or child table can't be loaded.
    """
    candidates = [anchor]
    page = anchor.split("#", 1)[0]
    if page and page != anchor:
        candidates.append(page)

    for candidate in candidates:
        shard = resolve_shard(data.index, candidate)
        path = loader.load_index_shard(shard).get(candidate)
        if path is None:
            continue
        breadcrumb, node = walk_path(data.tree, path, loader)
        return Location(
            anchor=anchor,
            key=candidate,
            shard=shard,
            path=path,
            breadcrumb=breadcrumb,
            node=node,
        )
    raise AnchorNotFound(anchor)
