"""Fetching lazily loaded child tables and index shards."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

from doxnav.artifact import (
    IndexShardTable,
    parse_child_table,
    parse_index_shard,
)
from doxnav.errors import MalformedNavTree, ShardFetchFailure
from doxnav.model import NavNode
from doxnav.shards import shard_file_name

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.\-]*$")


def is_safe_key(key: str) -> bool:
    """Check that a table key names a file directly inside the HTML directory."""
    return bool(_SAFE_KEY.match(key)) and ".." not in key


class ShardLoader(Protocol):
    """Source of lazily referenced navigation tables."""

    def load_children(self, key: str) -> tuple[NavNode, ...]: ...

    def load_index_shard(self, number: int) -> IndexShardTable: ...


class FileShardLoader:
    """Load ``<key>.js`` and ``navtreeindex<N>.js`` from a built HTML directory.

    Results are cached per loader. The files are write-once build output, so
    a cached table never goes stale while the loader is in use.
    """

    def __init__(self, html_dir: Path) -> None:
        self.html_dir = html_dir
        self._children: dict[str, tuple[NavNode, ...]] = {}
        self._shards: dict[int, IndexShardTable] = {}

    def load_children(self, key: str) -> tuple[NavNode, ...]:
        """Return the nodes of child table ``key``.

        Raises:
            ShardFetchFailure: If the key is unsafe, the file can't be read,
                or it does not declare the table.
        """
        if key in self._children:
            return self._children[key]
        if not is_safe_key(key):
            raise ShardFetchFailure(key, "key is not a plain file name")
        text = self._read(key, self.html_dir / f"{key}.js")
        try:
            nodes = parse_child_table(text, key)
        except MalformedNavTree as exc:
            raise ShardFetchFailure(key, str(exc)) from None
        self._children[key] = nodes
        return nodes

    def load_index_shard(self, number: int) -> IndexShardTable:
        """Return the anchor table of index shard ``number``."""
        if number in self._shards:
            return self._shards[number]
        name = shard_file_name(number)
        text = self._read(name, self.html_dir / name)
        try:
            table = parse_index_shard(text, number)
        except MalformedNavTree as exc:
            raise ShardFetchFailure(name, str(exc)) from None
        self._shards[number] = table
        return table

    def _read(self, key: str, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ShardFetchFailure(key, f"file not found: {path}") from None
        except UnicodeDecodeError:
            raise ShardFetchFailure(key, f"file has encoding errors: {path}") from None
        except OSError as exc:
            raise ShardFetchFailure(key, f"cannot read {path}: {exc}") from None
