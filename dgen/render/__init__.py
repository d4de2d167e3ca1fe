"""Documentation rendering."""

from dgen.render.generator import GeneratedFile, Generator, VariableGroup, exported_names
from dgen.render.text import TextElement, inter_rows, text_rows, to_rows

__all__ = [
    "GeneratedFile",
    "Generator",
    "TextElement",
    "VariableGroup",
    "exported_names",
    "inter_rows",
    "text_rows",
    "to_rows",
]
