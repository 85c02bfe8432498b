"""
arklens CLI Package.

- analysis.py: tokens, aliases, complete and resolve commands
- lsp.py: LSP server commands
- utils.py: Shared utilities
"""

import typer

from arklens.cli.analysis import aliases, complete, resolve, tokens
from arklens.cli.lsp import lsp_app
from arklens.cli.utils import version_callback

app = typer.Typer(
    help="Editor assistance for ArkType type expressions.",
    no_args_is_help=True,
)


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information.",
    ),
) -> None:
    pass


app.command("tokens")(tokens)
app.command("aliases")(aliases)
app.command("complete")(complete)
app.command("resolve")(resolve)
app.add_typer(lsp_app, name="lsp")


def main(argv: list[str] | None = None) -> None:
    """Console-script entry point."""
    app(args=argv)


__all__ = ["app", "main"]
