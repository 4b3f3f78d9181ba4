"""Display structures for the navigation sidebar."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace

import mdformat
from bs4 import BeautifulSoup

from doxnav.loader import ShardLoader
from doxnav.model import LazyRef, NavNode
from doxnav.validate import is_valid_link


def label_text(label: str) -> str:
    """Reduce a generated label (which may hold entities or tags) to plain text."""
    if "<" not in label and "&" not in label:
        return label
    return BeautifulSoup(label, "html.parser").get_text()


@dataclass(frozen=True)
class UINode:
    """One sidebar entry ready for display."""

    label: str
    text: str
    link: str
    children: tuple[UINode, ...] = ()
    lazy_key: str | None = None
    expanded: bool = False

    @property
    def is_lazy(self) -> bool:
        """True while the children still have to be fetched."""
        return self.lazy_key is not None and not self.expanded

    def count(self) -> int:
        return 1 + sum(child.count() for child in self.children)


def render(node: NavNode) -> UINode:
    """Build the display tree for ``node``.

    Child order and node count are preserved. Lazy references are not
    fetched: such nodes come back expandable with no children.
    """
    lazy_key = node.children.key if isinstance(node.children, LazyRef) else None
    return UINode(
        label=node.label,
        text=label_text(node.label),
        link=node.link,
        children=tuple(render(child) for child in node.child_nodes),
        lazy_key=lazy_key,
    )


def _expanded(ui_node: UINode, nodes: tuple[NavNode, ...]) -> UINode:
    return replace(
        ui_node, children=tuple(render(child) for child in nodes), expanded=True
    )


def expand(ui_node: UINode, loader: ShardLoader) -> UINode:
    """Fetch and render the children of a lazy node.

    Returns a new node; ``ui_node`` itself is left untouched. Nodes that are
    not lazy are returned as is.

    Raises:
        ShardFetchFailure: If the child table can't be loaded.
    """
    if ui_node.lazy_key is None or ui_node.expanded:
        return ui_node
    return _expanded(ui_node, loader.load_children(ui_node.lazy_key))


async def expand_async(ui_node: UINode, loader: ShardLoader) -> UINode:
    """Like :func:`expand`, with the fetch running off the event loop.

    Cancelling the task discards the in-flight result; ``ui_node`` is never
    modified.
    """
    if ui_node.lazy_key is None or ui_node.expanded:
        return ui_node
    nodes = await asyncio.to_thread(loader.load_children, ui_node.lazy_key)
    return _expanded(ui_node, nodes)


def expand_all(ui_node: UINode, loader: ShardLoader, max_depth: int = 32) -> UINode:
    """Expand every lazy node below ``ui_node``, down to ``max_depth`` levels."""
    node = expand(ui_node, loader)
    if max_depth <= 0:
        return node
    return replace(
        node,
        children=tuple(
            expand_all(child, loader, max_depth - 1) for child in node.children
        ),
    )


def to_text(ui_node: UINode, indent: str = "  ") -> str:
    """Plain indented outline; lazy nodes are marked with ``+``."""
    lines: list[str] = []

    def visit(node: UINode, depth: int) -> None:
        marker = "+ " if node.is_lazy else "- "
        suffix = f" ({node.link})" if node.link else ""
        lines.append(f"{indent * depth}{marker}{node.text}{suffix}")
        for child in node.children:
            visit(child, depth + 1)

    visit(ui_node, 0)
    return "\n".join(lines)


def _escape_markdown_link_text(text: str) -> str:
    return text.replace("[", r"\[").replace("]", r"\]")


def to_markdown(ui_node: UINode) -> str:
    """Render the display tree as a nested Markdown link list.

    Nodes whose link does not pass :func:`is_valid_link` are listed unlinked.
    """
    lines: list[str] = []

    def visit(node: UINode, depth: int) -> None:
        text = _escape_markdown_link_text(node.text)
        item = f"[{text}]({node.link})" if is_valid_link(node.link) else text
        lines.append(f"{'  ' * depth}- {item}")
        for child in node.children:
            visit(child, depth + 1)

    visit(ui_node, 0)
    return mdformat.text("\n".join(lines) + "\n", options={"wrap": "no"})
