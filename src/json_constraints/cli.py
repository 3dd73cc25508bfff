"""
cli.py

PURPOSE: Command-line tool for inspecting and exporting the example schemas.
DEPENDENCIES: typer, rich

ARCHITECTURE NOTES:
The CLI is a developer convenience around the library, not part of the
compilers. It provides commands for:
- list: Show the example schemas
- show: Print the grammar, template and hints of one schema
- export: Write <Name>.gbnf and <Name>_template.json files
- check: Validate a JSON file against an example schema
- config: Show current settings
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from json_constraints import __version__
from json_constraints.config import get_settings
from json_constraints.examples import EXAMPLE_SCHEMAS
from json_constraints.grammar import compile_grammar
from json_constraints.models import CompositeField, iter_fields
from json_constraints.template import compile_hints, compile_template
from json_constraints.validator import validate_json

app = typer.Typer(
    name="json-constraints",
    help="Compile JSON field schemas into GBNF grammars, templates and validators.",
    add_completion=False,
)

console = Console()


def print_error(text: str) -> None:
    """Print an error message."""
    console.print(f"[red]{escape(text)}[/red]")


def print_success(text: str) -> None:
    """Print a success message."""
    console.print(f"[green]{escape(text)}[/green]")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"json-constraints version {__version__}")
        raise typer.Exit()


def _load_schema(name: str) -> CompositeField:
    builder = EXAMPLE_SCHEMAS.get(name)
    if builder is None:
        print_error(f"Unknown schema '{name}'. Available: {', '.join(EXAMPLE_SCHEMAS)}")
        raise typer.Exit(1)
    return builder()


@app.callback()
def main(
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """JSON constraints - grammars, templates and validation for LLM output."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.effective_log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command("list")
def list_schemas() -> None:
    """List the example schemas."""
    for name, builder in EXAMPLE_SCHEMAS.items():
        schema = builder()
        count = sum(1 for _ in iter_fields(schema)) - 1
        console.print(f"[bold]{name}[/bold]  ({count} fields)")


@app.command()
def show(
    name: Annotated[str, typer.Argument(help="Name of the example schema")],
    grammar: Annotated[
        bool,
        typer.Option("--grammar/--no-grammar", help="Print the GBNF grammar"),
    ] = True,
    template: Annotated[
        bool,
        typer.Option("--template/--no-template", help="Print the JSON template"),
    ] = True,
    hints: Annotated[
        bool,
        typer.Option("--hints/--no-hints", help="Print field hints"),
    ] = False,
) -> None:
    """Print the artifacts compiled from one example schema."""
    schema = _load_schema(name)
    settings = get_settings()

    if grammar:
        console.print(Panel(Text(compile_grammar(schema).rstrip()), title=f"{name}.gbnf"))
    if template:
        text = compile_template(schema, indent=settings.template_indent)
        console.print(Panel(Syntax(text, "json"), title=f"{name}_template.json"))
    if hints:
        console.print(Panel(Text(compile_hints(schema) or "(no hints)"), title="Hints"))


@app.command()
def export(
    names: Annotated[
        list[str] | None,
        typer.Argument(help="Schemas to export (default: all)"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output-dir",
            "-o",
            help="Directory to write files to",
        ),
    ] = None,
) -> None:
    """Write <Name>.gbnf and <Name>_template.json for example schemas."""
    settings = get_settings()
    if output_dir is not None:
        settings.output_dir = output_dir
    target = settings.ensure_output_dir()

    for name in names or list(EXAMPLE_SCHEMAS):
        schema = _load_schema(name)
        compile_grammar(schema, output_path=target / f"{name}.gbnf")
        compile_template(
            schema,
            output_path=target / f"{name}_template.json",
            indent=settings.template_indent,
        )
        console.print(f"Generated {name}.gbnf and {name}_template.json")

    console.print(f"\nFiles saved to: {target}")


@app.command()
def check(
    name: Annotated[str, typer.Argument(help="Name of the example schema")],
    json_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the JSON document",
            exists=True,
            readable=True,
        ),
    ],
) -> None:
    """Validate a JSON file against an example schema."""
    schema = _load_schema(name)
    try:
        text = json_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        print_error(f"Cannot read {json_file} as UTF-8: {e}")
        raise typer.Exit(1) from None

    is_valid, errors = validate_json(text, schema)

    if not is_valid:
        print_error(f"{json_file} does not match {name}:")
        for error in errors:
            print_error(f"  {error}")
        raise typer.Exit(1)

    print_success(f"Valid {name}: {json_file}")


@app.command("config")
def config_cmd() -> None:
    """Show current settings."""
    settings = get_settings()
    console.print("[bold]Settings:[/bold]")
    console.print(f"  Output directory: {settings.output_dir}")
    console.print(f"  Log level: {settings.log_level}")
    console.print(f"  Debug: {settings.debug}")
    console.print(f"  Template indent: {settings.template_indent}")


if __name__ == "__main__":
    app()
