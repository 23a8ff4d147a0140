from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from jsonmapper.example import run_example
from jsonmapper.functions import resolve_function, table_resolver
from jsonmapper.load import load_document
from jsonmapper.mapper import Mapper

app = typer.Typer(help="json-mapper CLI")


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("jsonmapper")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[jsonmapper] %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _build_mapper(
    definition: Path,
    input_schema: Path,
    output_schema: Path,
    origin: str,
    lookups: Optional[Path],
) -> Mapper:
    tables = load_document(lookups) if lookups else {}
    if not isinstance(tables, dict):
        raise typer.BadParameter("lookups file must hold an object of named tables", param_hint="--lookups")

    mapper = Mapper(
        origin=origin,
        function_resolver=resolve_function,
        lookup_resolver=table_resolver(tables),
    )
    mapper.compile(
        load_document(definition),
        load_document(input_schema),
        load_document(output_schema),
    )
    return mapper


def _fail(e: Exception) -> None:
    typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("apply")
def apply_cmd(
    definition: Path = typer.Argument(..., help="Mapping definition (JSON or YAML)"),
    input_schema: Path = typer.Argument(..., help="Input schema (JSON or YAML)"),
    output_schema: Path = typer.Argument(..., help="Output schema (JSON or YAML)"),
    data: Path = typer.Argument(..., help="Input document: one object or a list of objects"),
    origin: str = typer.Option("mapper", "--origin", help="Label stamped as dataOrigin on array elements"),
    lookups: Optional[Path] = typer.Option(None, "--lookups", help="Named lookup tables (JSON or YAML)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write JSON here instead of stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Compile a definition and apply it to a data document."""
    _configure_logging(verbose)
    try:
        mapper = _build_mapper(definition, input_schema, output_schema, origin, lookups)
        doc = load_document(data)
        result: Any
        if isinstance(doc, list):
            result = [mapper.apply_to(d) for d in doc]
        else:
            result = mapper.apply_to(doc)
    except (ValueError, FileNotFoundError) as e:
        _fail(e)

    # YAML data may carry dates and timestamps
    text = json.dumps(result, indent=2, default=str)
    if out:
        out.write_text(text + "\n", encoding="utf-8")
        typer.secho(f"Wrote {out}", fg=typer.colors.GREEN)
    else:
        typer.echo(text)


@app.command("check")
def check_cmd(
    definition: Path = typer.Argument(..., help="Mapping definition (JSON or YAML)"),
    input_schema: Path = typer.Argument(..., help="Input schema (JSON or YAML)"),
    output_schema: Path = typer.Argument(..., help="Output schema (JSON or YAML)"),
    lookups: Optional[Path] = typer.Option(None, "--lookups", help="Named lookup tables (JSON or YAML)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Compile a definition and print the compiled strategy tree."""
    _configure_logging(verbose)
    try:
        mapper = _build_mapper(definition, input_schema, output_schema, "mapper", lookups)
    except (ValueError, FileNotFoundError) as e:
        _fail(e)
    typer.echo(json.dumps(mapper.mapping.summary(), indent=2))


@app.command("example")
def example_cmd(origin: str = typer.Option("example", "--origin")):
    """Run the built-in example and print its input and output."""
    data, output = run_example(origin=origin)
    typer.echo("*** Input Data ****")
    typer.echo(json.dumps(data, indent=2))
    typer.echo("")
    typer.echo("*** Output Data ****")
    typer.echo(json.dumps(output, indent=2))


if __name__ == "__main__":
    app()
