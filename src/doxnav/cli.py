"""Command-line interface."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
import yaml
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from doxnav import __version__
from doxnav.artifact import load_navtree_data
from doxnav.config import DEFAULT_CONFIG_FILE, Config, resolve_config
from doxnav.errors import NavDataError
from doxnav.loader import FileShardLoader
from doxnav.locate import locate as locate_anchor
from doxnav.model import NavTreeData, count_nodes
from doxnav.render import expand_all, render, to_markdown, to_text
from doxnav.shards import SortPolicy, resolve_shard, set_collation, shard_file_name
from doxnav.validate import find_problems, flat_fallback


class OutputFormat(str, Enum):
    TEXT = "text"
    MARKDOWN = "markdown"


def _make_logger(
    quiet: bool, verbose: bool = False
) -> tuple[Callable[..., None], Callable[..., None]]:
    """Create log and log_verbose functions for CLI output.

    Args:
        quiet: If True, suppress all output.
        verbose: If True, enable verbose logging (quiet overrides this).

    Returns:
        Tuple of (log, log_verbose) functions.
    """
    effective_verbose = verbose and not quiet

    def log(msg: str, color: str = "green", err: bool = False) -> None:
        if not quiet:
            typer.secho(msg, fg=color, err=err)

    def log_verbose(msg: str, color: str = "green", err: bool = False) -> None:
        if effective_verbose:
            typer.secho(msg, fg=color, err=err)

    return log, log_verbose


def version_callback(value: bool) -> None:
    """Print version and exit if --version flag is set."""
    if value:
        typer.echo(f"doxnav {__version__}")
        raise typer.Exit()


app = typer.Typer(
    help="Inspect Doxygen navigation tree data.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config", "-c", help=f"Path to config file (default: ./{DEFAULT_CONFIG_FILE})"
    ),
]
HtmlDirOption = Annotated[
    Path | None,
    typer.Option("--html-dir", "-d", help="Directory holding navtreedata.js"),
]
SortOrderOption = Annotated[
    SortPolicy | None,
    typer.Option("--sort-order", help="How navigation index keys are compared"),
]
QuietOption = Annotated[
    bool,
    typer.Option("--quiet", "-q", help="Suppress output (exit code only)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show detailed progress"),
]


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Inspect Doxygen navigation tree data."""


def _load(
    config: Path | None,
    html_dir: Path | None,
    sort_order: SortPolicy | None,
    log: Callable[..., None],
) -> tuple[Config, NavTreeData]:
    """Resolve configuration and read navtreedata.js, exiting on failure."""
    try:
        cfg = resolve_config(config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        log(f"Error loading config: {e}", color="red", err=True)
        raise typer.Exit(1) from None

    if html_dir is not None:
        cfg.html_dir = html_dir
    if sort_order is not None:
        cfg.sort_order = sort_order

    if cfg.sort_order is SortPolicy.LOCALE:
        try:
            set_collation(cfg.collation)
        except ValueError as e:
            log(f"Error: {e}", color="red", err=True)
            raise typer.Exit(1) from None

    if not cfg.navtree_path.exists():
        log(
            f"Error: Navigation data not found: {cfg.navtree_path}",
            color="red",
            err=True,
        )
        log(
            "Hint: Build the HTML documentation with GENERATE_TREEVIEW enabled, "
            "or pass --html-dir.",
            color="yellow",
            err=True,
        )
        raise typer.Exit(1)

    try:
        data = load_navtree_data(cfg.navtree_path, cfg.sort_order)
    except (OSError, UnicodeDecodeError, NavDataError) as e:
        log(f"Error reading {cfg.navtree_path}: {e}", color="red", err=True)
        raise typer.Exit(1) from None
    return cfg, data


@app.command()
def validate(
    config: ConfigOption = None,
    html_dir: HtmlDirOption = None,
    sort_order: SortOrderOption = None,
    deep: Annotated[
        bool,
        typer.Option("--deep", help="Also fetch and check lazily loaded children"),
    ] = False,
    quiet: QuietOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Check that the navigation data is well formed."""
    log, log_verbose = _make_logger(quiet, verbose)
    cfg, data = _load(config, html_dir, sort_order, log)

    loader = FileShardLoader(cfg.html_dir) if deep else None
    problems = find_problems(data.tree, loader)
    if problems:
        log(f"Navigation tree invalid: {cfg.navtree_path}", color="red", err=True)
        for problem in problems:
            log(f"  Error: {problem.to_error()}", color="red", err=True)
        fallback = flat_fallback(data.tree)
        log(
            f"Flat fallback would list {len(fallback)} pages.",
            color="yellow",
            err=True,
        )
        raise typer.Exit(1)

    lazy = sum(1 for _, node in data.tree.walk() if node.is_lazy)
    log(f"Navigation data valid: {cfg.navtree_path}")
    log(f"  Root: {data.tree.label}")
    log(f"  Nodes: {count_nodes(data.tree)}")
    log(f"  Lazy references: {lazy}")
    log(f"  Index shards: {len(data.index)}")
    log_verbose(f"  Sort order: {cfg.sort_order.value}")
    log_verbose(f"  Sync on message: {data.sync_messages.sync_on}")
    log_verbose(f"  Sync off message: {data.sync_messages.sync_off}")


@app.command()
def resolve(
    key: Annotated[str, typer.Argument(help="Page or page#anchor to route")],
    config: ConfigOption = None,
    html_dir: HtmlDirOption = None,
    sort_order: SortOrderOption = None,
    quiet: QuietOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Print the index shard that holds KEY."""
    log, log_verbose = _make_logger(quiet, verbose)
    _, data = _load(config, html_dir, sort_order, log)

    try:
        shard = resolve_shard(data.index, key)
    except NavDataError as e:
        log(f"Error: {e}", color="red", err=True)
        log(
            "Hint: Load the default index page instead.",
            color="yellow",
            err=True,
        )
        raise typer.Exit(1) from None

    log(f"{key} -> shard {shard} ({shard_file_name(shard)})")
    log_verbose(f"  Shard starts at: {data.index.keys[shard]}")


@app.command()
def locate(
    anchor: Annotated[str, typer.Argument(help="Page or page#anchor to find")],
    config: ConfigOption = None,
    html_dir: HtmlDirOption = None,
    sort_order: SortOrderOption = None,
    quiet: QuietOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Print the sidebar breadcrumb leading to ANCHOR."""
    log, log_verbose = _make_logger(quiet, verbose)
    cfg, data = _load(config, html_dir, sort_order, log)

    try:
        location = locate_anchor(data, FileShardLoader(cfg.html_dir), anchor)
    except NavDataError as e:
        log(f"Error: {e}", color="red", err=True)
        raise typer.Exit(1) from None

    log(" > ".join(location.breadcrumb))
    if location.key != anchor:
        log(f"  Matched page {location.key}", color="yellow")
    log_verbose(f"  Shard: {location.shard} ({shard_file_name(location.shard)})")
    log_verbose(f"  Path: {list(location.path)}")


@app.command()
def tree(
    config: ConfigOption = None,
    html_dir: HtmlDirOption = None,
    sort_order: SortOrderOption = None,
    expand: Annotated[
        bool,
        typer.Option("--expand", "-e", help="Fetch lazily loaded children"),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.TEXT,
) -> None:
    """Print the navigation sidebar."""
    log, _ = _make_logger(quiet=False)
    cfg, data = _load(config, html_dir, sort_order, log)

    ui_tree = render(data.tree)
    if expand:
        try:
            ui_tree = expand_all(ui_tree, FileShardLoader(cfg.html_dir))
        except NavDataError as e:
            log(f"Error: {e}", color="red", err=True)
            raise typer.Exit(1) from None

    if output_format is OutputFormat.MARKDOWN:
        typer.echo(to_markdown(ui_tree), nl=False)
    else:
        typer.echo(to_text(ui_tree))


def _new_config(html_dir: str, sort_order: SortPolicy) -> CommentedMap:
    """Build a fresh doxnav.yml mapping with explanatory comments."""
    data = CommentedMap()
    data["html_dir"] = html_dir
    data["sort_order"] = sort_order.value
    data.yaml_set_start_comment("doxnav configuration")
    data.yaml_add_eol_comment("bytes | casefold | locale", "sort_order")
    return data


@app.command()
def init(
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Path to config file to write"),
    ] = Path(DEFAULT_CONFIG_FILE),
    html_dir: Annotated[
        str,
        typer.Option("--html-dir", "-d", help="Directory holding navtreedata.js"),
    ] = "html",
    sort_order: Annotated[
        SortPolicy,
        typer.Option("--sort-order", help="How navigation index keys are compared"),
    ] = SortPolicy.BYTES,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Update an existing config file"),
    ] = False,
    quiet: QuietOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Write a doxnav.yml config file."""
    log, log_verbose = _make_logger(quiet, verbose)

    yaml_rt = YAML()
    yaml_rt.preserve_quotes = True

    if not config.exists():
        with open(config, "w", encoding="utf-8") as f:
            yaml_rt.dump(_new_config(html_dir, sort_order), f)
        log(f"Created {config}")
        return

    if not force:
        log(f"Error: Config file already exists: {config}", color="red", err=True)
        log(
            "Use --force to update it.",
            color="yellow",
            err=True,
        )
        raise typer.Exit(1)

    with open(config, encoding="utf-8") as f:
        data = yaml_rt.load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        log(f"Error: Config file must be a mapping: {config}", color="red", err=True)
        raise typer.Exit(1)

    data["html_dir"] = html_dir
    data["sort_order"] = sort_order.value

    # Round-trip dump keeps the user's comments and key order
    with open(config, "w", encoding="utf-8") as f:
        yaml_rt.dump(data, f)

    log(f"Updated {config}")
    log_verbose(f"  html_dir: {html_dir}")
    log_verbose(f"  sort_order: {sort_order.value}")


if __name__ == "__main__":
    app()
