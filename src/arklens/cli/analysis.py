"""
Analysis CLI commands.

Run the analysis core against an expression or a host file from the
command line. Offsets are character offsets into the host file.
"""

from pathlib import Path
from typing import NoReturn

import typer
from rich.table import Table

from arklens.cli.utils import console, echo_json, read_source, resolve_config
from arklens.core.errors import ArklensError
from arklens.core.tokenizer import tokenize
from arklens.document import HostDocument

ConfigOption = typer.Option(None, "--config", "-c", help="Path to arklens.toml or pyproject.toml")
OffsetOption = typer.Option(..., "--offset", "-o", help="Character offset in the host file")
JsonOption = typer.Option(False, "--json", help="Print JSON instead of a table")


def _document(file: Path, config_path: Path | None) -> HostDocument:
    config = resolve_config(config_path)
    return HostDocument(read_source(file), config)


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def tokens(
    expression: str = typer.Argument(..., help="Type expression, e.g. 'string.date | User[]'"),
    config: Path | None = ConfigOption,
    as_json: bool = JsonOption,
) -> None:
    """Show how a type expression is tokenized."""
    catalog = resolve_config(config).build_catalog()
    result = list(tokenize(expression, catalog=catalog))

    if as_json:
        echo_json(
            [{"kind": str(t.kind), "start": t.start, "end": t.end, "text": t.text} for t in result]
        )
        return

    table = Table(title="Tokens")
    table.add_column("Kind", style="cyan")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Text")
    for token in result:
        table.add_row(str(token.kind), str(token.start), str(token.end), repr(token.text))
    console.print(table)


def aliases(
    file: Path = typer.Argument(..., help="Host source file"),
    offset: int = OffsetOption,
    config: Path | None = ConfigOption,
    as_json: bool = JsonOption,
) -> None:
    """List the scope aliases visible at an offset."""
    document = _document(file, config)
    try:
        symbols = document.aliases_at(offset)
    except ArklensError as e:
        _fail(str(e))

    if as_json:
        echo_json([{"name": s.name, "offset": s.declaring_offset} for s in symbols])
        return
    if not symbols:
        typer.echo("No aliases visible at this offset.")
        return

    table = Table(title=f"Aliases visible at {offset}")
    table.add_column("Alias", style="green")
    table.add_column("Declared at", justify="right")
    for symbol in symbols:
        table.add_row(symbol.name, str(symbol.declaring_offset))
    console.print(table)


def complete(
    file: Path = typer.Argument(..., help="Host source file"),
    offset: int = OffsetOption,
    config: Path | None = ConfigOption,
    as_json: bool = JsonOption,
) -> None:
    """Show completion proposals at an offset inside an ArkType string."""
    document = _document(file, config)
    try:
        if document.expression_at(offset) is None:
            _fail(f"offset {offset} is not inside an ArkType expression")
        suggestions = document.complete(offset)
    except ArklensError as e:
        _fail(str(e))

    if as_json:
        echo_json([s.model_dump(mode="json") for s in suggestions])
        return

    table = Table(title=f"Completions at {offset}")
    table.add_column("Text", style="green")
    table.add_column("Category")
    table.add_column("Detail")
    table.add_column("Chain")
    for suggestion in suggestions:
        table.add_row(
            suggestion.text,
            str(suggestion.category),
            suggestion.detail,
            "." if suggestion.chain else "",
        )
    console.print(table)


def resolve(
    file: Path = typer.Argument(..., help="Host source file"),
    offset: int = OffsetOption,
    config: Path | None = ConfigOption,
    as_json: bool = JsonOption,
) -> None:
    """Find the declaration of the alias referenced at an offset."""
    document = _document(file, config)
    try:
        if document.expression_at(offset) is None:
            _fail(f"offset {offset} is not inside an ArkType expression")
        declaration = document.definition(offset)
    except ArklensError as e:
        _fail(str(e))

    if as_json:
        echo_json(declaration.model_dump() if declaration else None)
        return
    if declaration is None:
        typer.echo("No declaration found.")
        return

    line = document.text.count("\n", 0, declaration.host_offset) + 1
    typer.echo(
        f"{declaration.name}: {file}:{line} (offset {declaration.host_offset}) "
        f"{declaration.host_text}"
    )
