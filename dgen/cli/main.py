"""Main CLI entry point for dgen-one."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from dgen import __version__
from dgen.cli.commands.config import config
from dgen.cli.commands.document import document
from dgen.cli.commands.inspect_code import blocks, roots


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool) -> None:
    """dgen-one - documentation generator for JavaScript projects.

    Reads source files, attaches comments to the code they document, applies
    @directives found in comments and writes reStructuredText pages.

    \b
    GETTING STARTED:
      dgen config default                Write default settings to the current directory
      dgen config get output.maxColumns  Read a setting
      dgen config set output.maxColumns 100
      dgen document [PATH]               Generate file documentation

    \b
    INSPECTION:
      dgen blocks FILE                   List the blocks parsed from a file
      dgen roots [PATH]                  Show root units and what they require
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register individual commands
cli.add_command(document)
cli.add_command(blocks)
cli.add_command(roots)

# Register command groups
cli.add_command(config)


if __name__ == "__main__":
    cli()
