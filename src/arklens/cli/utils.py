"""
arklens CLI Utilities.

Shared helpers used across CLI modules.
"""

import json
import logging
import platform
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from arklens._version import get_version
from arklens.core.config import ArklensConfig, discover_config, load_config
from arklens.core.errors import ArklensError

console = Console()


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"arklens version {get_version()}")
        typer.echo(f"  Python:    {platform.python_implementation()} {platform.python_version()}")
        typer.echo(f"  Platform:  {platform.system()} {platform.release()}")

        lsp_available = False
        try:
            # Quieten pygls before the server module registers its features
            logging.getLogger("pygls").setLevel(logging.ERROR)

            import arklens.lsp.server  # noqa: F401 - availability check

            lsp_available = True
        except ImportError:
            pass
        typer.echo(f"  LSP:       {'available' if lsp_available else 'not installed (pip install arklens[lsp])'}")
        raise typer.Exit()


def resolve_config(config_path: Path | None) -> ArklensConfig:
    """Load an explicit config file, or discover one in the working directory."""
    try:
        if config_path is not None:
            config = load_config(config_path)
        else:
            config = discover_config(Path.cwd())
    except ArklensError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    logging.getLogger("arklens").setLevel(config.logging.level)
    return config


def read_source(file: Path) -> str:
    try:
        return file.read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"Error: cannot read {file}: {e}", err=True)
        raise typer.Exit(code=1)


def echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))
