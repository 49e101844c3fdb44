from __future__ import annotations

import json
import logging
from typing import Optional

import click
from tabulate import tabulate

from vstlib.config import Config, ConfigError, load_config
from vstlib.decoder import decode_value
from vstlib.errors import (
    DecodeFailed,
    DisplaySurfaceFailed,
    VstorageError,
    format_config_error,
    format_error_message,
    suggest_troubleshooting_steps,
)
import vstlib.clients as clients


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.option(
    "--json-output",
    "json_output",
    is_flag=True,
    help="Output JSON instead of tables (pretty-printed)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging to stderr (what the CLI is doing)",
)
@click.option("--base-url", "base_url", help="vstorage REST endpoint; overrides api_base_url")
@click.option("--root", "root_path", help="Root path to browse; overrides root_path")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    base_url: Optional[str],
    root_path: Optional[str],
) -> None:
    """VStorage viewer.

    Browse the vstorage tree in a column view (the default when no command is
    given), or query single nodes. Configuration is loaded via XDG or the
    VSTCTL_CONFIG environment variable; built-in defaults apply otherwise.
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["verbose"] = verbose
    ctx.obj["base_url"] = base_url
    ctx.obj["root_path"] = root_path

    # Configure logging once per process
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    if ctx.invoked_subcommand is None:
        ctx.invoke(browse)


def _load_config(ctx: click.Context, log: logging.Logger) -> Config:
    try:
        log.info("Loading config...")
        cfg = load_config().with_overrides(ctx.obj.get("base_url"), ctx.obj.get("root_path"))
        log.info("Loaded config from %s", cfg.source_path or "<defaults>")
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(2)
    return cfg


def _report_failure(ctx: click.Context, operation: str, error: Exception, cfg: Config, path: str) -> None:
    error_msg = format_error_message(operation, error, {"path": path, "base_url": cfg.api_base_url})
    click.echo(error_msg, err=True)
    if ctx.obj.get("verbose"):
        suggestions = suggest_troubleshooting_steps(operation, error)
        if suggestions:
            click.echo("\nTroubleshooting suggestions:", err=True)
            for suggestion in suggestions[:3]:  # Show top 3 suggestions
                click.echo(f"  • {suggestion}", err=True)


@cli.command()
@click.pass_context
def browse(ctx: click.Context) -> None:
    """Launch the interactive column browser."""
    log = logging.getLogger("vstctl.browse")
    cfg = _load_config(ctx, log)
    try:
        from vsttui.app import run_tui
        run_tui(cfg)
    except ImportError as e:
        click.echo(f"TUI dependencies not available: {e}", err=True)
        raise SystemExit(1)
    except DisplaySurfaceFailed as e:
        log.error("Display surface failed: %s", e)
        click.echo(f"Error running application: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        error_msg = format_error_message("launch TUI", e, {})
        click.echo(error_msg, err=True)
        raise SystemExit(1)


@cli.command("children")
@click.argument("path", required=False)
@click.pass_context
def children_cmd(ctx: click.Context, path: Optional[str]) -> None:
    """List the children of PATH (the root path if omitted)."""
    log = logging.getLogger("vstctl.children")
    cfg = _load_config(ctx, log)
    path = path or cfg.root_path

    try:
        log.info("Listing children of '%s'", path)
        labels = clients.list_children(cfg, path)
        log.info("Found %d children", len(labels))
    except VstorageError as e:  # surface helpful error without stack
        _report_failure(ctx, "list children", e, cfg, path)
        raise SystemExit(2)

    if ctx.obj.get("json"):
        out = {"path": path, "children": labels}
        click.echo(json.dumps(out, indent=2))
        return

    if not labels:
        click.echo(f"No children found; '{path}' is a leaf")
        return

    rows = [[label, f"{path}.{label}"] for label in labels]
    log.info("Rendering %d children", len(rows))
    click.echo(tabulate(rows, headers=["CHILD", "PATH"]))


@cli.command("data")
@click.argument("path")
@click.option("--raw", is_flag=True, help="Print the response body without decoding")
@click.pass_context
def data_cmd(ctx: click.Context, path: str, raw: bool) -> None:
    """Print the decoded value stored at PATH."""
    log = logging.getLogger("vstctl.data")
    cfg = _load_config(ctx, log)

    try:
        log.info("Fetching data for '%s'", path)
        body = clients.get_leaf(cfg, path)
    except VstorageError as e:
        _report_failure(ctx, "fetch data", e, cfg, path)
        raise SystemExit(2)

    if raw:
        click.echo(body)
        return

    try:
        pretty = decode_value(body)
    except DecodeFailed as e:
        log.warning("Value at '%s' did not decode: %s", path, e)
        if e.cleaned is not None:
            click.echo(e.cleaned)
        _report_failure(ctx, "decode data", e, cfg, path)
        raise SystemExit(2)

    click.echo(pretty)


@cli.command("config")
@click.pass_context
def config_cmd(ctx: click.Context) -> None:
    """Show the effective configuration."""
    log = logging.getLogger("vstctl.config")
    cfg = _load_config(ctx, log)

    if ctx.obj.get("json"):
        click.echo(cfg.to_json())
        return

    rows = [
        ["api_base_url", cfg.api_base_url],
        ["root_path", cfg.root_path],
        ["column_count", cfg.column_count],
        ["timeout", cfg.timeout],
        ["connect_timeout", cfg.connect_timeout],
        ["log_file", cfg.log_file],
        ["source", str(cfg.source_path) if cfg.source_path else "—"],
    ]
    log.info("Rendering configuration")
    click.echo(tabulate(rows, headers=["FIELD", "VALUE"]))


def main() -> None:  # entry point
    cli(standalone_mode=True)


if __name__ == "__main__":  # pragma: no cover
    main()
