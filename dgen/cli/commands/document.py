"""Document command: generate reStructuredText documentation for a project."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dgen.config import SETTINGS_FILE, load_settings
from dgen.directives.diagnostics import DirectiveReport
from dgen.environment import Environment

console = Console()


@click.command()
@click.argument("path", default=".", required=False)
@click.option("--output", "-o", default=None, help="Output directory (settings paths.output_path by default)")
@click.option("--settings", "settings_file", default=None, help="Settings file")
@click.option("--strict", is_flag=True, help="Fail when a directive reports an error")
def document(path: str, output: Optional[str], settings_file: Optional[str], strict: bool) -> None:
    """Generate file documentation for the project at PATH."""
    project_path = Path(path)
    try:
        settings = load_settings(Path(settings_file) if settings_file else project_path / SETTINGS_FILE)
    except ValueError as e:
        console.print(f"[red]Error reading settings:[/red] {e}")
        raise SystemExit(1)

    env = Environment(settings)
    try:
        units = env.autoload(project_path)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("There were errors while reading the code and comments. Stopping.")
        raise SystemExit(1)

    if not units:
        console.print(f"[yellow]No source files found in {project_path}[/yellow]")
        return

    files = env.generate()
    report = env.report
    if report is not None and report.issues:
        _print_report(report)

    output_path = Path(output) if output else project_path / settings.paths.output_path
    try:
        written = env.output(files, output_path)
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("There were errors while writing the documentation.")
        raise SystemExit(1)

    console.print(f"[green]RST documentation written to[/green] {output_path} ({len(written)} files)")

    if strict and report is not None and not report.passed:
        console.print(f"[red]{report.error_count} directive error(s)[/red]")
        raise SystemExit(1)


def _print_report(report: DirectiveReport) -> None:
    """Print directive issues as a table."""
    table = Table(show_header=True, title="Directive Issues")
    table.add_column("Severity")
    table.add_column("Location")
    table.add_column("Directive")
    table.add_column("Message")

    for issue in report.issues:
        style = "red" if issue.severity.value == "error" else "yellow"
        table.add_row(
            f"[{style}]{issue.severity.value}[/{style}]",
            escape(issue.location),
            issue.verb or "",
            escape(issue.message),
        )

    console.print(table)
