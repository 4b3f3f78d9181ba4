"""Tests for sidebar rendering and lazy expansion."""

import asyncio
import threading
from pathlib import Path

import pytest

from doxnav.artifact import load_navtree_data
from doxnav.errors import ShardFetchFailure
from doxnav.loader import FileShardLoader
from doxnav.model import Branch, LazyRef, NavNode, count_nodes
from doxnav.render import (
    UINode,
    expand,
    expand_all,
    expand_async,
    label_text,
    render,
    to_markdown,
    to_text,
)

FIXTURES = Path(__file__).parent / "fixtures"
HTML = FIXTURES / "html"


class RecordingLoader:
    """Serve child tables from memory and remember what was asked for."""

    def __init__(self, tables: dict[str, tuple[NavNode, ...]]) -> None:
        self.tables = tables
        self.requests: list[str] = []

    def load_children(self, key: str) -> tuple[NavNode, ...]:
        self.requests.append(key)
        if key not in self.tables:
            raise ShardFetchFailure(key, "no such table")
        return self.tables[key]

    def load_index_shard(self, number: int):
        raise AssertionError("not used")


NAMESPACES = (
    NavNode("constants", "namespaceconstants.html"),
    NavNode("w3gdatmd", "namespacew3gdatmd.html", LazyRef("namespacew3gdatmd")),
)


@pytest.fixture
def fixture_tree() -> NavNode:
    return load_navtree_data(HTML / "navtreedata.js").tree


def _walk(node: UINode):
    yield node
    for child in node.children:
        yield from _walk(child)


def test_render_preserves_order_and_count(fixture_tree: NavNode):
    ui = render(fixture_tree)

    assert ui.count() == count_nodes(fixture_tree) == 11
    assert [child.label for child in ui.children] == [
        child.label for child in fixture_tree.child_nodes
    ]
    assert [n.label for n in _walk(ui)] == [n.label for _, n in fixture_tree.walk()]


def test_render_marks_lazy_nodes_without_loading(fixture_tree: NavNode):
    ui = render(fixture_tree)

    modules_list = ui.children[1].children[0]
    assert modules_list.label == "Modules List"
    assert modules_list.is_lazy
    assert modules_list.lazy_key == "namespaces_dup"
    assert modules_list.children == ()
    assert sum(1 for node in _walk(ui) if node.is_lazy) == 3


def test_lazy_node_is_fetched_only_when_expanded():
    loader = RecordingLoader({"namespaces_dup": NAMESPACES})
    node = NavNode("Modules List", "namespaces.html", LazyRef("namespaces_dup"))

    ui = render(node)

    assert ui.is_lazy
    assert ui.children == ()
    assert loader.requests == []

    expanded = expand(ui, loader)

    assert loader.requests == ["namespaces_dup"]
    assert not expanded.is_lazy
    assert expanded.expanded
    assert [child.label for child in expanded.children] == ["constants", "w3gdatmd"]
    # Nested lazy references stay lazy
    assert expanded.children[1].is_lazy
    # The original display node is unchanged
    assert ui.is_lazy
    assert ui.children == ()


def test_expand_leaves_non_lazy_nodes_alone():
    loader = RecordingLoader({})
    ui = render(NavNode("Todo List", "todo.html"))

    assert expand(ui, loader) is ui
    assert loader.requests == []


def test_expand_reports_fetch_failure():
    ui = render(NavNode("Broken", "b.html", LazyRef("missing")))

    with pytest.raises(ShardFetchFailure) as excinfo:
        expand(ui, RecordingLoader({}))

    assert excinfo.value.key == "missing"


def test_expand_async():
    loader = RecordingLoader({"namespaces_dup": NAMESPACES})
    ui = render(NavNode("Modules List", "namespaces.html", LazyRef("namespaces_dup")))

    expanded = asyncio.run(expand_async(ui, loader))

    assert [child.label for child in expanded.children] == ["constants", "w3gdatmd"]


def test_expand_async_can_be_cancelled():
    release = threading.Event()

    class SlowLoader:
        def load_children(self, key: str) -> tuple[NavNode, ...]:
            release.wait(5)
            return (NavNode("late", "late.html"),)

        def load_index_shard(self, number: int):
            raise AssertionError("not used")

    ui = render(NavNode("Lazy", "lazy.html", LazyRef("slow")))

    async def scenario() -> None:
        task = asyncio.create_task(expand_async(ui, SlowLoader()))
        await asyncio.sleep(0.05)
        task.cancel()
        try:
            with pytest.raises(asyncio.CancelledError):
                await task
        finally:
            release.set()

    asyncio.run(scenario())

    assert ui.is_lazy
    assert ui.children == ()


def test_expand_all_with_file_loader(fixture_tree: NavNode):
    ui = expand_all(render(fixture_tree), FileShardLoader(HTML))

    labels = [node.label for node in _walk(ui)]
    assert not any(node.is_lazy for node in _walk(ui))
    assert "constants" in labels
    assert "nx" in labels
    assert labels.count("grid") == 2


def test_label_text():
    assert label_text("Data Types List") == "Data Types List"
    assert label_text("vector&lt; T &gt;") == "vector< T >"
    assert label_text("<b>bold</b> name") == "bold name"


def test_render_sets_plain_text():
    ui = render(NavNode("std::map&lt; K, V &gt;", "classstd_1_1map.html"))

    assert ui.label == "std::map&lt; K, V &gt;"
    assert ui.text == "std::map< K, V >"


def test_to_text(fixture_tree: NavNode):
    text = to_text(render(fixture_tree))

    lines = text.splitlines()
    assert lines[0] == "- WAVEWATCH III (index.html)"
    assert lines[1] == "  - Todo List (todo.html)"
    assert "    + Modules List (namespaces.html)" in lines


def test_to_markdown(fixture_tree: NavNode):
    markdown = to_markdown(render(fixture_tree))

    assert markdown.startswith("- [WAVEWATCH III](index.html)")
    assert "[Todo List](todo.html)" in markdown
    assert "[Data Types](classes.html)" in markdown
    assert markdown.index("Todo List") < markdown.index("Files")


def test_to_markdown_keeps_container_nodes_unlinked():
    tree = NavNode("Group", "", Branch((NavNode("Page", "page.html"),)))

    markdown = to_markdown(render(tree))

    assert markdown.startswith("- Group\n")
    assert "[Page](page.html)" in markdown


def test_to_markdown_lists_invalid_links_unlinked():
    tree = NavNode(
        "Doc",
        "index.html",
        Branch((NavNode("Bad", "my page (1).html"), NavNode("Group", ""))),
    )

    markdown = to_markdown(render(tree))

    assert "- [Doc](index.html)" in markdown
    assert "- Bad" in markdown
    assert "](my page" not in markdown
    assert "- Group" in markdown
