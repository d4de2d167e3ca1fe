"""Inspection commands: parsed blocks of a file and roots of a project."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from dgen.code.block import Block, Level
from dgen.code.unit import CodeUnit
from dgen.config import SETTINGS_FILE, load_settings
from dgen.environment import Environment

console = Console()


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--nested/--no-nested", default=False, help="Also list blocks of parsed bodies")
def blocks(file: str, nested: bool) -> None:
    """List the blocks parsed from FILE."""
    unit = CodeUnit(Path(file).read_text(encoding="utf-8"), 1, Path(file).name)

    table = Table(show_header=True, title=f"Blocks: {file}")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Rows")
    table.add_column("Blank")
    table.add_column("Links")
    table.add_column("Name")
    table.add_column("Text")

    for depth, block in _walk(unit.blocks, nested):
        table.add_row(*_block_row(block, depth))

    console.print(table)
    console.print(
        f"{unit.content.block_count} blocks, "
        f"{len(unit.declared_functions)} functions, "
        f"{len(unit.declared_classes)} classes, "
        f"{len(unit.imported_objects)} imports"
    )


def _walk(items: list[Block], nested: bool, depth: int = 0):
    """Yield ``(depth, block)`` in document order."""
    for block in items:
        yield depth, block
        if nested and block.content is not None:
            yield from _walk(block.content.blocks, nested, depth + 1)


def _block_row(block: Block, depth: int) -> list[str]:
    """Table cells for one block."""
    end = block.starting_row + block.row_count - 1
    rows = str(block.starting_row) if end == block.starting_row else f"{block.starting_row}-{end}"
    links = "".join(
        mark if block.next(level) is not None else "."
        for level, mark in ((Level.ADJACENT, "1"), (Level.SECTION, "2"))
    )
    text = block.raw_text.strip().split("\n")[0]
    if len(text) > 50:
        text = text[:50] + "..."
    return [
        "  " * depth + str(block.index),
        block.kind.value,
        rows,
        f"{block.blank_rows_before}/{block.blank_rows_after}",
        links,
        escape(block.display_name or ""),
        escape(text),
    ]


@click.command()
@click.argument("path", default=".", required=False)
def roots(path: str) -> None:
    """Show the root units of the project at PATH and the units they require."""
    project_path = Path(path)
    try:
        settings = load_settings(project_path / SETTINGS_FILE)
        env = Environment(settings)
        env.autoload(project_path)
    except ValueError as e:
        console.print(f"[red]Error reading settings:[/red] {e}")
        raise SystemExit(1)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if not env.graph.units:
        console.print(f"[yellow]No source files found in {project_path}[/yellow]")
        return

    for root in env.graph.find_roots():
        tree_widget = Tree(f"[bold]{escape(root.path or '')}[/bold]")
        _add_required_to_tree(root, tree_widget, [root])
        console.print(tree_widget)


def _add_required_to_tree(unit: CodeUnit, tree_widget: Tree, seen: list[CodeUnit]) -> None:
    """Recursively add required units, marking repeated ones."""
    for required in unit.get_prev():
        if required in seen:
            tree_widget.add(f"{escape(required.path or '')} [dim](see above)[/dim]")
            continue
        branch = tree_widget.add(escape(required.path or ""))
        _add_required_to_tree(required, branch, seen + [required])
