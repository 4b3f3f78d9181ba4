"""Configuration loading from doxnav.yml."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from doxnav.artifact import NAVTREE_FILE
from doxnav.config.model import Config
from doxnav.shards import SortPolicy

DEFAULT_CONFIG_FILE = "doxnav.yml"
DEFAULT_HTML_DIR = "html"

_KNOWN_KEYS = {"html_dir", "sort_order", "navtree_file", "collation"}


def load_config(config_path: Path) -> Config:
    """Load configuration from a doxnav.yml file.

    Relative ``html_dir`` values are taken relative to the config file.

    Args:
        config_path: Path to doxnav.yml.

    Returns:
        Resolved Config object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If the document is not a mapping or holds invalid values.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        raw = yaml.load(f, Loader=yaml.SafeLoader)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a mapping: {config_path}")

    return _config_from_mapping(raw, base_dir=config_path.parent)


def _config_from_mapping(raw: dict[str, Any], base_dir: Path) -> Config:
    """Build a Config from a parsed doxnav.yml mapping."""
    unknown = sorted(str(key) for key in raw if key not in _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    html_dir = raw.get("html_dir", DEFAULT_HTML_DIR)
    if not isinstance(html_dir, str) or not html_dir:
        raise ValueError("'html_dir' must be a non-empty string")

    sort_order = raw.get("sort_order", SortPolicy.BYTES.value)
    try:
        policy = SortPolicy(sort_order)
    except ValueError:
        choices = ", ".join(p.value for p in SortPolicy)
        raise ValueError(
            f"'sort_order' must be one of {choices}, got {sort_order!r}"
        ) from None

    navtree_file = raw.get("navtree_file", NAVTREE_FILE)
    if not isinstance(navtree_file, str) or not navtree_file:
        raise ValueError("'navtree_file' must be a non-empty string")

    collation = raw.get("collation", "")
    if not isinstance(collation, str):
        raise ValueError("'collation' must be a locale name string")

    return Config(
        html_dir=base_dir / html_dir,
        sort_order=policy,
        navtree_file=navtree_file,
        collation=collation,
    )


def resolve_config(config_path: Path | None, cwd: Path | None = None) -> Config:
    """Load an explicit config file, or ``./doxnav.yml`` if present, or defaults.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` doesn't exist.
        ValueError: If the file holds invalid values.
    """
    if config_path is not None:
        return load_config(config_path)
    base = cwd or Path(".")
    candidate = base / DEFAULT_CONFIG_FILE
    if candidate.exists():
        return load_config(candidate)
    return Config(html_dir=base / DEFAULT_HTML_DIR)
