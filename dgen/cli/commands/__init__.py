"""CLI commands for dgen-one."""

from dgen.cli.commands.config import config
from dgen.cli.commands.document import document
from dgen.cli.commands.inspect_code import blocks, roots

__all__ = [
    "blocks",
    "config",
    "document",
    "roots",
]
