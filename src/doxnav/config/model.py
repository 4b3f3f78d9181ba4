"""Configuration model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from doxnav.artifact import NAVTREE_FILE
from doxnav.shards import SortPolicy


@dataclass
class Config:
    """Resolved configuration for reading a documentation build."""

    html_dir: Path = Path("html")
    sort_order: SortPolicy = SortPolicy.BYTES
    navtree_file: str = NAVTREE_FILE
    collation: str = ""

    @property
    def navtree_path(self) -> Path:
        return self.html_dir / self.navtree_file
