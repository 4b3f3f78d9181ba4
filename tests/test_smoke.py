"""Smoke tests for end-to-end CLI functionality.

These tests actually invoke the CLI and verify it produces valid output.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def html_copy(tmp_path: Path) -> Path:
    """Copy the HTML fixture to a temporary directory."""
    html_dir = tmp_path / "html"
    shutil.copytree(FIXTURES / "html", html_dir)
    return html_dir


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "doxnav.cli", *args],
        capture_output=True,
        text=True,
        timeout=30,
    )


def test_smoke_validate(html_copy: Path) -> None:
    result = _run("validate", "--html-dir", str(html_copy), "--deep")

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert "Navigation data valid" in result.stdout


def test_smoke_locate(html_copy: Path) -> None:
    result = _run(
        "locate",
        "namespacew3gdatmd.html#a00a2883773de5a438e7474517ad851d1",
        "--html-dir",
        str(html_copy),
    )

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert result.stdout.strip().endswith("w3gdatmd > nx")


def test_smoke_error_goes_to_stderr(tmp_path: Path) -> None:
    result = _run("validate", "--html-dir", str(tmp_path / "missing"))

    assert result.returncode == 1
    assert "Navigation data not found" in result.stderr
    assert result.stdout == ""
