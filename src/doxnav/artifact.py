"""Reading and writing the generated navigation data files.

The generator writes each table as ``var NAME = <literal>;`` where the
literal is built only from arrays, objects, strings, numbers and ``null``.
Once JS string quoting is normalised (single-quoted strings become
double-quoted, tabs between tokens become spaces) that syntax is a subset of
YAML flow syntax, so literals are evaluated with ``yaml.safe_load`` and
nothing in the file is ever executed.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from doxnav.errors import MalformedNavTree
from doxnav.model import LEAF, Branch, Children, LazyRef, Leaf, NavNode, NavTreeData
from doxnav.shards import NavTreeIndex, SortPolicy, shard_variable_name
from doxnav.strings import SYNC_OFF_MESSAGE, SYNC_ON_MESSAGE, SyncMessages

NAVTREE_FILE = "navtreedata.js"

IndexShardTable = Mapping[str, tuple[int, ...]]

_DECLARATION = re.compile(r"^var\s+([A-Za-z_$][\w$]*)\s*=", re.MULTILINE)
# String literals of either quote style, or a tab between tokens
_JS_TOKEN = re.compile(r"\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'|\t", re.DOTALL)
_JS_ESCAPE = re.compile(r"\\(.)|\"", re.DOTALL)
# Characters PyYAML refuses to read raw or treats as line breaks
_YAML_UNSAFE = re.compile("[\x7f-\x9f\u2028\u2029\ud800-\udfff\ufffe\uffff]")


def _yaml_escape(match: re.Match[str]) -> str:
    escaped = match.group(1)
    if escaped is None:
        return '\\"'
    # YAML double-quoted scalars have no \' escape
    if escaped == "'":
        return "'"
    return match.group(0)


def _yaml_token(match: re.Match[str]) -> str:
    token = match.group()
    if token == "\t":
        return " "
    return '"' + _JS_ESCAPE.sub(_yaml_escape, token[1:-1]) + '"'


def _to_yaml_flow(literal: str) -> str:
    """Rewrite JS string quoting and tabs into their YAML flow equivalents."""
    return _JS_TOKEN.sub(_yaml_token, literal)


def parse_declarations(text: str) -> dict[str, Any]:
    """Evaluate every top-level ``var NAME = <literal>;`` in ``text``.

    Anything before the first declaration (license comments) is ignored.

    Raises:
        MalformedNavTree: If a literal cannot be evaluated.
    """
    matches = list(_DECLARATION.finditer(text))
    declarations: dict[str, Any] = {}
    for position, match in enumerate(matches):
        end = matches[position + 1].start() if position + 1 < len(matches) else None
        segment = text[match.end() : end]
        terminator = segment.rfind(";")
        literal = segment[:terminator] if terminator != -1 else segment
        name = match.group(1)
        try:
            declarations[name] = yaml.safe_load(_to_yaml_flow(literal))
        except yaml.YAMLError as exc:
            raise MalformedNavTree(f"Cannot evaluate literal for {name}: {exc}") from None
    return declarations


def node_from_literal(value: Any, breadcrumb: tuple[str, ...] = ()) -> NavNode:
    """Build a NavNode from a ``[label, link, children]`` literal."""
    if not isinstance(value, list) or len(value) != 3:
        raise MalformedNavTree(
            "Node must be a [label, link, children] triple", breadcrumb
        )
    label, link, children = value
    if not isinstance(label, str):
        raise MalformedNavTree(
            f"Node label must be a string, got {type(label).__name__}", breadcrumb
        )
    if not isinstance(link, str):
        raise MalformedNavTree(
            f"Node link must be a string, got {type(link).__name__}",
            (*breadcrumb, label),
        )
    here = (*breadcrumb, label)
    parsed: Children
    if children is None:
        parsed = LEAF
    elif isinstance(children, str):
        parsed = LazyRef(children)
    elif isinstance(children, list):
        parsed = Branch(tuple(node_from_literal(child, here) for child in children))
    else:
        raise MalformedNavTree(
            "Node children must be null, a list or a table key, "
            f"got {type(children).__name__}",
            here,
        )
    return NavNode(label=label, link=link, children=parsed)


def nodes_from_literal(
    value: Any, breadcrumb: tuple[str, ...] = ()
) -> tuple[NavNode, ...]:
    if not isinstance(value, list):
        raise MalformedNavTree(
            f"Expected a list of nodes, got {type(value).__name__}", breadcrumb
        )
    return tuple(node_from_literal(item, breadcrumb) for item in value)


def parse_navtree_data(
    text: str, policy: SortPolicy = SortPolicy.BYTES
) -> NavTreeData:
    """Parse the content of ``navtreedata.js``.

    Args:
        text: File content.
        policy: Sort order the index keys must follow.

    Returns:
        The tree, its shard index and the toggle tooltips.

    Raises:
        MalformedNavTree: If a table is missing or has the wrong shape.
    """
    declarations = parse_declarations(text)

    if "NAVTREE" not in declarations:
        raise MalformedNavTree("NAVTREE is not declared")
    navtree = declarations["NAVTREE"]
    if not isinstance(navtree, list) or len(navtree) != 1:
        raise MalformedNavTree("NAVTREE must be a list holding exactly one root node")
    tree = node_from_literal(navtree[0])

    if "NAVTREEINDEX" not in declarations:
        raise MalformedNavTree("NAVTREEINDEX is not declared")
    keys = declarations["NAVTREEINDEX"] or []
    if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
        raise MalformedNavTree("NAVTREEINDEX must be a list of strings")
    index = NavTreeIndex.from_keys(keys, policy)

    sync_on = declarations.get("SYNCONMSG", SYNC_ON_MESSAGE)
    sync_off = declarations.get("SYNCOFFMSG", SYNC_OFF_MESSAGE)
    if not isinstance(sync_on, str) or not isinstance(sync_off, str):
        raise MalformedNavTree("SYNCONMSG and SYNCOFFMSG must be strings")

    return NavTreeData(
        tree=tree,
        index=index,
        sync_messages=SyncMessages(sync_on=sync_on, sync_off=sync_off),
    )


def load_navtree_data(
    path: Path, policy: SortPolicy = SortPolicy.BYTES
) -> NavTreeData:
    """Read and parse a ``navtreedata.js`` file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        MalformedNavTree: If its content is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Navigation data not found: {path}")
    return parse_navtree_data(path.read_text(encoding="utf-8"), policy)


def parse_child_table(text: str, key: str) -> tuple[NavNode, ...]:
    """Parse a lazily loaded ``<key>.js`` child table."""
    declarations = parse_declarations(text)
    if key not in declarations:
        raise MalformedNavTree(f"Child table does not declare {key}")
    return nodes_from_literal(declarations[key], (key,))


def parse_index_shard(text: str, number: int) -> IndexShardTable:
    """Parse ``navtreeindex<number>.js`` into an anchor -> tree path mapping."""
    name = shard_variable_name(number)
    declarations = parse_declarations(text)
    if name not in declarations:
        raise MalformedNavTree(f"Index shard does not declare {name}")
    raw = declarations[name]
    if not isinstance(raw, dict):
        raise MalformedNavTree(f"{name} must be a mapping of anchors to tree paths")
    table: dict[str, tuple[int, ...]] = {}
    for anchor, path in raw.items():
        if not isinstance(anchor, str):
            raise MalformedNavTree(f"{name} keys must be strings, got {anchor!r}")
        if not isinstance(path, list) or not all(
            isinstance(step, int) and not isinstance(step, bool) and step >= 0
            for step in path
        ):
            raise MalformedNavTree(
                f"{name}[{anchor!r}] must be a list of non-negative integers"
            )
        table[anchor] = tuple(path)
    return MappingProxyType(table)


def _js_string(value: str) -> str:
    text = json.dumps(value, ensure_ascii=False)
    return _YAML_UNSAFE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


def _js_message(value: str) -> str:
    if "'" in value or "\\" in value or _YAML_UNSAFE.search(value):
        return _js_string(value)
    return f"'{value}'"


def _format_node(node: NavNode, depth: int) -> str:
    indent = "  " * depth
    head = f"{indent}[ {_js_string(node.label)}, {_js_string(node.link)}, "
    children = node.children
    if isinstance(children, Leaf):
        return f"{head}null ]"
    if isinstance(children, LazyRef):
        return f"{head}{_js_string(children.key)} ]"
    if not children.children:
        return f"{head}[] ]"
    inner = ",\n".join(_format_node(child, depth + 1) for child in children.children)
    return f"{head}[\n{inner}\n{indent}] ]"


def dump_navtree_data(data: NavTreeData) -> str:
    """Write ``navtreedata.js`` content in the generator's layout."""
    lines = ["var NAVTREE =", "[", _format_node(data.tree, 1), "];", ""]
    lines.append("var NAVTREEINDEX =")
    lines.append("[")
    lines.append(",\n".join(_js_string(key) for key in data.index.keys))
    lines.append("];")
    lines.append("")
    lines.append(f"var SYNCONMSG = {_js_message(data.sync_messages.sync_on)};")
    lines.append(f"var SYNCOFFMSG = {_js_message(data.sync_messages.sync_off)};")
    return "\n".join(lines) + "\n"


def dump_child_table(key: str, nodes: Sequence[NavNode]) -> str:
    """Write a ``<key>.js`` child table."""
    inner = ",\n".join(_format_node(node, 2) for node in nodes)
    return f"var {key} =\n[\n{inner}\n];\n"


def dump_index_shard(number: int, table: IndexShardTable) -> str:
    """Write a ``navtreeindex<number>.js`` shard table."""
    entries = ",\n".join(
        f"{_js_string(anchor)}:[{','.join(str(step) for step in path)}]"
        for anchor, path in table.items()
    )
    return f"var {shard_variable_name(number)} =\n{{\n{entries}\n}};\n"
