"""Docker registry tree viewer CLI."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console

from repo_tree import __version__, formatters
from repo_tree.errors import ManifestError, RegistryError
from repo_tree.history import parse_manifest_history
from repo_tree.output import OutputFormat
from repo_tree.registry import RegistryClient, RegistryConfig, load_catalog, resolve_registry_config
from repo_tree.tree import DisplayRow, flatten_catalog

log = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"repo-tree {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="repo-tree",
    help="Browse a Docker registry as a namespace/repository/tag tree.",
    invoke_without_command=True,
)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(log_file: Path | None) -> None:
    """Send debug logs to *log_file*; the TUI owns the terminal otherwise."""
    if log_file is None:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ─── error handling ───────────────────────────────────────────


def _friendly_error(e: Exception, config: RegistryConfig, reference: str | None = None) -> None:
    """Print a friendly error message instead of a raw traceback."""
    status = getattr(e, "status_code", None)
    msg = str(e).lower()

    if isinstance(e, RegistryError) and status == 404:
        err_console.print(
            f"[red bold]Not found:[/red bold] '{reference or 'unknown'}'\n"
            "  Run [bold]repo-tree list[/bold] to see available repositories and tags."
        )
    elif isinstance(e, RegistryError) and status in (401, 403):
        err_console.print(
            f"[red bold]Access denied:[/red bold] {config.url} refused the request.\n"
            "  repo-tree only talks to registries that allow anonymous reads."
        )
    elif isinstance(e, RegistryError) and status is None and (
        "connect" in msg or "refused" in msg or "resolve" in msg or "failed" in msg
    ):
        err_console.print(
            f"[red bold]Connection failed:[/red bold] Could not connect to registry at {config.url}\n"
            "  Check the address, or pass [bold]--registry <URL>[/bold]."
        )
    elif isinstance(e, ManifestError):
        err_console.print(
            f"[red bold]Unexpected manifest:[/red bold] {e}\n"
            f"  The registry returned something other than a manifest for '{reference}'."
        )
    else:
        err_console.print(f"[red bold]Error:[/red bold] {e}")
    raise SystemExit(1)


def _run(fn, config: RegistryConfig, reference: str | None = None):
    """Execute *fn* with friendly error handling."""
    try:
        return fn()
    except SystemExit:
        raise
    except Exception as e:
        _friendly_error(e, config, reference)


def _load_rows(client: RegistryClient) -> list[DisplayRow]:
    """Flatten the registry catalog, exiting when there is nothing to browse."""
    rows = flatten_catalog(load_catalog(client))
    if not rows:
        err_console.print(
            f"[red bold]Warning:[/red bold] Could not connect to the registry at "
            f"'{client.config.url}', or it has no repositories.\n"
            "  Check the registry URL or add the [bold]--registry <URL>[/bold] option "
            "to specify a valid Docker registry."
        )
        raise SystemExit(1)
    return rows


# ─── global callback ─────────────────────────────────────────


@app.callback()
def main(
    ctx: typer.Context,
    registry: str | None = typer.Option(
        None, "--registry", "-r", metavar="URL", help="Docker registry URL"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Request timeout in seconds (default: none)"
    ),
    env_file: Path | None = typer.Option(  # noqa: B008
        None,
        "--env-file",
        "-e",
        help="Path to .env file to load",
        exists=True,
        dir_okay=False,
    ),
    log_file: Path | None = typer.Option(  # noqa: B008
        None, "--log-file", help="Write debug logs to this file", dir_okay=False
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Browse a Docker registry as a namespace/repository/tag tree."""
    if env_file:
        load_dotenv(env_file, override=True)
    else:
        load_dotenv()

    _configure_logging(log_file)
    ctx.ensure_object(dict)

    try:
        ctx.obj["registry_config"] = resolve_registry_config(
            registry_url=registry, timeout=timeout
        )
    except ValueError as exc:
        err_console.print(f"[red bold]Config error:[/red bold] {exc}")
        if "referenced in config but not set" in str(exc):
            err_console.print(
                "\n  Your config file uses ${VAR} placeholders that need matching\n"
                "  environment variables. Export them, or put them in a .env file."
            )
        raise SystemExit(1) from None

    if ctx.invoked_subcommand is None:
        browse(ctx)


# ─── browse ───────────────────────────────────────────────────


@app.command()
def browse(ctx: typer.Context) -> None:
    """Launch the interactive tree viewer (the default command)."""
    from repo_tree.tui.app import RepoTreeApp

    config: RegistryConfig = ctx.obj["registry_config"]
    with RegistryClient(config) as client:
        rows = _load_rows(client)
        log.info("Loaded %d rows from %s", len(rows), config.url)
        tui_app = RepoTreeApp(client=client, rows=rows)
        try:
            tui_app.run()
        except Exception as exc:
            err_console.print(
                f"[red bold]TUI crashed:[/red bold] {exc}\n"
                "  Try the CLI commands instead, e.g. [bold]repo-tree list[/bold]"
            )
            raise SystemExit(1) from None


# ─── list ─────────────────────────────────────────────────────


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    output: OutputFormat = typer.Option(  # noqa: B008
        OutputFormat.TABLE, "--output", "-o", help="Output format (table, json, csv)"
    ),
) -> None:
    """Print every namespace, repository and tag as a tree."""
    config: RegistryConfig = ctx.obj["registry_config"]
    with RegistryClient(config) as client:
        rows = _load_rows(client)
    formatters.render_tree(console, rows, fmt=output, title=config.url)


# ─── history ──────────────────────────────────────────────────


@app.command()
def history(
    ctx: typer.Context,
    image: str = typer.Argument(help="Repository path (namespace/repository)"),
    tag: str = typer.Argument(help="Tag name"),
    raw: bool = typer.Option(False, "--raw", help="Also print the full manifest"),
    output: OutputFormat = typer.Option(  # noqa: B008
        OutputFormat.TABLE, "--output", "-o", help="Output format (table, json, csv)"
    ),
) -> None:
    """Show the layer history of IMAGE:TAG."""
    config: RegistryConfig = ctx.obj["registry_config"]
    reference = f"{image}:{tag}"

    def _do():
        with RegistryClient(config) as client:
            manifest = client.fetch_manifest(image, tag)
        rows, full_text = parse_manifest_history(manifest)
        formatters.render_history(
            console,
            rows,
            fmt=output,
            title=reference,
            full_manifest=full_text if raw else None,
        )

    _run(_do, config, reference)
