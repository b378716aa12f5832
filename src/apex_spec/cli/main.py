"""CLI entry point for apex-spec.

Invoked as::

    apex-spec [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m apex_spec.cli.main

Commands
--------
validate     Parse and validate an APEX document
parse        Dump the parsed AST to JSON or YAML
plan         Print the execution plan
fmt          Format an APEX document to canonical style
constraints  Show canonical and classified constraints
version      Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from apex_spec.errors import ApexError
from apex_spec.grammar.tokens import ParseMode

if TYPE_CHECKING:
    from apex_spec.parser.parser import ParseResult
    from apex_spec.validator.views import ValidatedDocument

console = Console()
err_console = Console(stderr=True)

_tolerant_option = click.option(
    "--tolerant",
    is_flag=True,
    default=False,
    help="Repair header case, unknown headers and stray text instead of failing",
)


def _mode(tolerant: bool) -> ParseMode:
    return ParseMode.TOLERANT if tolerant else ParseMode.STRICT


def _read_source(path: str) -> str:
    """Read an APEX source file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)


def _exit_with(exc: ApexError, path: str) -> NoReturn:
    err_console.print(
        f"[red]Error[/red] in {escape(path)}: {escape(str(exc))}", highlight=False, soft_wrap=True
    )
    sys.exit(1)


def _parse_or_exit(source: str, path: str, mode: ParseMode) -> "ParseResult":
    """Parse APEX source, printing the error and exiting on failure."""
    from apex_spec.parser import parse

    try:
        return parse(source, mode)
    except ApexError as exc:
        _exit_with(exc, path)


def _validate_or_exit(source: str, path: str, mode: ParseMode) -> "ValidatedDocument":
    """Parse and validate APEX source, printing the error and exiting on failure."""
    from apex_spec.validator import validate

    result = _parse_or_exit(source, path, mode)
    try:
        return validate(result.document, mode=mode, fixes=result.fixes)
    except ApexError as exc:
        _exit_with(exc, path)


def _print_fixes(validated: "ValidatedDocument") -> None:
    for fix in validated.fixes:
        err_console.print(f"[yellow]fixed[/yellow] {escape(str(fix))}", highlight=False)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="apex-spec")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log pipeline decisions at DEBUG level")
def cli(verbose: bool) -> None:
    """APEX agent-task documents: parser, validator and plan builder."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from apex_spec import __version__
    from apex_spec.validator import SUPPORTED_VERSIONS

    formats = ", ".join(
        f"{major}.{minor}" for major, minors in SUPPORTED_VERSIONS.items() for minor in sorted(minors)
    )
    table = Table(show_header=False, box=None)
    table.add_row("[bold]apex-spec[/bold]", f"v{__version__}")
    table.add_row("Document versions", formats)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# validate command
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.argument("file", type=click.Path(exists=False))
@_tolerant_option
def validate_command(file: str, tolerant: bool) -> None:
    """Parse and validate an APEX document.

    FILE is the path to the document.  Warnings are reported but do not
    change the exit status.
    """
    source = _read_source(file)
    validated = _validate_or_exit(source, file, _mode(tolerant))
    _print_fixes(validated)

    if validated.warnings:
        table = Table(title=f"Validation: {file}", show_lines=True)
        table.add_column("Severity", style="bold", min_width=10)
        table.add_column("Code", min_width=8)
        table.add_column("Line", min_width=6)
        table.add_column("Message")
        for d in validated.warnings:
            table.add_row(
                f"[yellow]{d.severity.name}[/yellow]",
                d.code,
                str(d.line) if d.line is not None else "-",
                escape(d.message) + (f"\n[dim]hint: {escape(d.suggestion)}[/dim]" if d.suggestion else ""),
            )
        console.print(table)

    console.print(
        f"[green]OK[/green] {file}: version {validated.version}, "
        f"{len(validated.fixes)} fix(es), {len(validated.warnings)} warning(s)",
        highlight=False,
        soft_wrap=True,
    )


# ---------------------------------------------------------------------------
# parse command
# ---------------------------------------------------------------------------


@cli.command(name="parse")
@click.argument("file", type=click.Path(exists=False))
@_tolerant_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="AST output format",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def parse_command(file: str, tolerant: bool, output_format: str, output: str | None) -> None:
    """Parse an APEX document and dump the AST.

    FILE is the path to the document.
    """
    from apex_spec.ast import AstSerializer

    source = _read_source(file)
    result = _parse_or_exit(source, file, _mode(tolerant))
    for fix in result.fixes:
        err_console.print(f"[yellow]fixed[/yellow] {escape(str(fix))}", highlight=False)

    serializer = AstSerializer()
    if output_format.lower() == "json":
        text = serializer.to_json(result.document, indent=2)
        lang = "json"
    else:
        text = serializer.to_yaml(result.document)
        lang = "yaml"

    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]AST written to[/green] {output}")
    else:
        console.print(Syntax(text, lang, line_numbers=True))


# ---------------------------------------------------------------------------
# plan command
# ---------------------------------------------------------------------------


@cli.command(name="plan")
@click.argument("file", type=click.Path(exists=False))
@_tolerant_option
@click.option(
    "--strategy",
    type=click.Choice(["auto", "positional", "keyword"], case_sensitive=False),
    default="auto",
    help="How PLAN steps are bound to TOOLS entries",
)
@click.option(
    "--registry",
    "registry_path",
    type=click.Path(exists=False),
    default=None,
    help="YAML tool registry; unknown tool names fail the command",
)
def plan_command(file: str, tolerant: bool, strategy: str, registry_path: str | None) -> None:
    """Build and print the execution plan of an APEX document.

    FILE is the path to the document.
    """
    from apex_spec.interpreter import BindingStrategy, build_plan
    from apex_spec.registry import ToolRegistry

    source = _read_source(file)
    validated = _validate_or_exit(source, file, _mode(tolerant))
    _print_fixes(validated)
    plan = build_plan(validated, BindingStrategy(strategy.lower()))

    console.print(f"[bold]Task:[/bold] {escape(plan.task)}", highlight=False)
    console.print(f"[bold]Version:[/bold] {plan.version}", highlight=False)
    for goal in plan.goals:
        console.print(f"  [cyan]goal[/cyan] {escape(goal)}", highlight=False)
    for constraint in plan.constraints:
        console.print(f"  [magenta]constraint[/magenta] {escape(constraint)}", highlight=False)

    if plan.is_empty:
        console.print("[dim]No PLAN steps.[/dim]")
    else:
        table = Table(title="Steps")
        table.add_column("#", justify="right")
        table.add_column("Step")
        table.add_column("Tool")
        for step in plan.steps:
            table.add_row(
                str(step.number),
                escape(step.description),
                escape(str(step.tool)) if step.tool is not None else "[dim]unbound[/dim]",
            )
        console.print(table)

    for condition in plan.validation:
        console.print(f"  [green]check[/green] {escape(condition)}", highlight=False)

    if registry_path is None:
        return
    try:
        registry = ToolRegistry.from_yaml(registry_path)
    except (ValueError, OSError) as exc:
        err_console.print(
            f"[red]Error:[/red] Cannot load registry {registry_path}: {escape(str(exc))}",
            highlight=False,
            soft_wrap=True,
        )
        sys.exit(1)
    unknown = registry.unknown_tools(plan)
    if unknown:
        err_console.print(
            f"[red]Unknown tool(s)[/red] in {file}: {', '.join(unknown)}", highlight=False, soft_wrap=True
        )
        sys.exit(1)


# ---------------------------------------------------------------------------
# fmt command
# ---------------------------------------------------------------------------


@cli.command(name="fmt")
@click.argument("file", type=click.Path(exists=False))
@_tolerant_option
@click.option("--check", is_flag=True, default=False, help="Check if file is already formatted")
@click.option("--in-place", is_flag=True, default=False, help="Rewrite the file in place")
def fmt_command(file: str, tolerant: bool, check: bool, in_place: bool) -> None:
    """Format an APEX document to canonical style.

    FILE is the path to the document.

    Without --check or --in-place, writes the formatted text to stdout.
    """
    from apex_spec.formatter import format_document

    source = _read_source(file)
    result = _parse_or_exit(source, file, _mode(tolerant))
    formatted = format_document(result.document)

    if check:
        if formatted == source:
            console.print(f"[green]OK[/green] {file}: already formatted", highlight=False, soft_wrap=True)
            sys.exit(0)
        else:
            console.print(f"[yellow]NEEDS FORMATTING[/yellow] {file}", highlight=False, soft_wrap=True)
            sys.exit(1)
    elif in_place:
        Path(file).write_text(formatted, encoding="utf-8")
        console.print(f"[green]Formatted[/green] {file}", highlight=False)
    else:
        click.echo(formatted, nl=False)


# ---------------------------------------------------------------------------
# constraints command
# ---------------------------------------------------------------------------


@cli.command(name="constraints")
@click.argument("file", type=click.Path(exists=False))
@_tolerant_option
def constraints_command(file: str, tolerant: bool) -> None:
    """Show each constraint with its canonical form and classification.

    FILE is the path to the document.
    """
    from apex_spec.semantics import LtLoc, Semantics, normalize

    source = _read_source(file)
    validated = _validate_or_exit(source, file, _mode(tolerant))

    if validated.constraints is None:
        console.print(f"[dim]{file} has no CONSTRAINTS block.[/dim]", highlight=False, soft_wrap=True)
        return

    semantics = Semantics.from_validated(validated)
    table = Table(title=f"Constraints: {file}")
    table.add_column("Raw")
    table.add_column("Canonical", style="bold")
    table.add_column("Class")
    for raw, constraint in zip(validated.constraints.rules, semantics.constraints):
        label = type(constraint).__name__
        if isinstance(constraint, LtLoc):
            label = f"{label}({constraint.limit})"
        table.add_row(escape(raw), normalize(raw), label)
    console.print(table)


if __name__ == "__main__":
    cli()
