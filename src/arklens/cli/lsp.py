"""
LSP (Language Server Protocol) CLI commands.

- run: serve the arklens language server over stdio or TCP
- check: report which LSP libraries are installed
"""

import logging
from importlib.metadata import PackageNotFoundError, version
from types import ModuleType

import typer
from rich.table import Table

from arklens.cli.utils import console

# Distributions the ``lsp`` extra installs.
LSP_DISTRIBUTIONS = ("pygls", "lsprotocol")

INSTALL_HINT = "Install with: pip install arklens[lsp]"

lsp_app = typer.Typer(
    help="Language Server Protocol (LSP) commands.",
    no_args_is_help=True,
)


def _load_server_module() -> ModuleType:
    try:
        import arklens.lsp.server as server_module
    except ImportError as e:
        typer.echo(f"Error: LSP dependencies not installed: {e}\n{INSTALL_HINT}", err=True)
        raise typer.Exit(code=1)
    return server_module


def _apply_log_level(level: str | None) -> None:
    if level is None:
        return
    name = level.upper()
    if name not in logging.getLevelNamesMapping():
        typer.echo(f"Error: unknown log level '{level}'", err=True)
        raise typer.Exit(code=1)
    logging.getLogger("arklens").setLevel(name)


@lsp_app.command("run")
def lsp_run(
    tcp: bool = typer.Option(
        False,
        "--tcp",
        help="Listen on TCP instead of stdio (for debugging)",
    ),
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        help="Interface to bind (only used with --tcp)",
    ),
    port: int = typer.Option(
        2087,
        "--port",
        help="TCP port (only used with --tcp)",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Level for arklens loggers, overriding the workspace config",
    ),
) -> None:
    """
    Start the arklens LSP server.

    Editors talk to the server over stdio. Use --tcp to attach a debugging
    client to a running server instead.
    """
    _apply_log_level(log_level)
    server_module = _load_server_module()

    try:
        if tcp:
            typer.echo(f"Serving arklens LSP on {host}:{port}...", err=True)
            server_module.server.start_tcp(host, port)
        else:
            server_module.start_server()
    except KeyboardInterrupt:
        typer.echo("\nLSP server stopped.", err=True)


@lsp_app.command("check")
def lsp_check() -> None:
    """
    Show the installed version of each LSP library.

    Exits with code 1 when any of them is missing.
    """
    table = Table(title="LSP dependencies")
    table.add_column("Package", style="cyan")
    table.add_column("Version")

    missing = []
    for distribution in LSP_DISTRIBUTIONS:
        try:
            table.add_row(distribution, version(distribution))
        except PackageNotFoundError:
            table.add_row(distribution, "[red]not installed[/red]")
            missing.append(distribution)

    console.print(table)

    if missing:
        typer.echo(f"\nMissing dependencies: {', '.join(missing)}\n{INSTALL_HINT}", err=True)
        raise typer.Exit(code=1)

    typer.echo("\nAll LSP dependencies installed.")
