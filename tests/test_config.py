"""Tests for configuration loading."""

from pathlib import Path

import pytest

from doxnav.config import Config, load_config, resolve_config
from doxnav.shards import SortPolicy

FIXTURES = Path(__file__).parent / "fixtures"


def test_load_config():
    config = load_config(FIXTURES / "doxnav.yml")

    assert config.html_dir == FIXTURES / "html"
    assert config.sort_order is SortPolicy.BYTES
    assert config.navtree_file == "navtreedata.js"
    assert config.navtree_path == FIXTURES / "html" / "navtreedata.js"


def test_load_config_casefold():
    config = load_config(FIXTURES / "doxnav_casefold.yml")

    assert config.sort_order is SortPolicy.CASEFOLD


def test_load_config_invalid_sort_order():
    with pytest.raises(ValueError, match="sort_order"):
        load_config(FIXTURES / "doxnav_bad_sort.yml")


def test_load_config_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config(Path("/nonexistent/doxnav.yml"))


def test_load_config_requires_mapping(tmp_path: Path):
    config_path = tmp_path / "doxnav.yml"
    config_path.write_text("- html\n- bytes\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Config file must be a mapping"):
        load_config(config_path)


def test_empty_config_uses_defaults(tmp_path: Path):
    config_path = tmp_path / "doxnav.yml"
    config_path.write_text("", encoding="utf-8")

    config = load_config(config_path)

    assert config.html_dir == tmp_path / "html"
    assert config.sort_order is SortPolicy.BYTES


def test_unknown_keys_are_rejected(tmp_path: Path):
    config_path = tmp_path / "doxnav.yml"
    config_path.write_text("html_dir: out\nsort: bytes\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unknown config keys: sort"):
        load_config(config_path)


def test_html_dir_must_be_string(tmp_path: Path):
    config_path = tmp_path / "doxnav.yml"
    config_path.write_text("html_dir: [a, b]\n", encoding="utf-8")

    with pytest.raises(ValueError, match="html_dir"):
        load_config(config_path)


def test_resolve_config_without_file(tmp_path: Path):
    config = resolve_config(None, cwd=tmp_path)

    assert config == Config(html_dir=tmp_path / "html")


def test_resolve_config_finds_default_file(tmp_path: Path):
    (tmp_path / "doxnav.yml").write_text("html_dir: docs/html\n", encoding="utf-8")

    config = resolve_config(None, cwd=tmp_path)

    assert config.html_dir == tmp_path / "docs" / "html"


def test_resolve_config_explicit_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        resolve_config(tmp_path / "missing.yml", cwd=tmp_path)


def test_collation(tmp_path: Path):
    config_path = tmp_path / "doxnav.yml"
    config_path.write_text(
        "sort_order: locale\ncollation: de_DE.UTF-8\n", encoding="utf-8"
    )

    config = load_config(config_path)

    assert config.sort_order is SortPolicy.LOCALE
    assert config.collation == "de_DE.UTF-8"


def test_collation_defaults_to_environment(tmp_path: Path):
    assert resolve_config(None, cwd=tmp_path).collation == ""


def test_collation_must_be_string(tmp_path: Path):
    config_path = tmp_path / "doxnav.yml"
    config_path.write_text("collation: [de, fr]\n", encoding="utf-8")

    with pytest.raises(ValueError, match="collation"):
        load_config(config_path)
