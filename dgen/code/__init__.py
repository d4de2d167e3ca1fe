"""Source parsing: block classifier, block model, units and the link graph."""

from __future__ import annotations

from dgen.code.patterns import BlockKind, BlockMeta, classify
from dgen.code.block import (
    COMMENT_KINDS,
    DECLARATION_KINDS,
    AssignmentInfo,
    Block,
    ClassInfo,
    CommentInfo,
    Directive,
    FunctionInfo,
    ImportInfo,
    Level,
    MethodInfo,
    VariableInfo,
)
from dgen.code.content import Content, ContentParser
from dgen.code.unit import (
    CodeUnit,
    DeclaredClass,
    DeclaredFunction,
    DeclaredValue,
    ImportedObject,
)
from dgen.code.graph import CodeTree
from dgen.code.sections import CommentSection, comment_sections, split_sections


def parse_unit(
    source: str,
    starting_row: int = 1,
    path: str | None = None,
    name: str | None = None,
    description: str | None = None,
) -> CodeUnit:
    """Parse one source file into a unit."""
    return CodeUnit(source, starting_row, path, name, description)


__all__ = [
    "AssignmentInfo",
    "Block",
    "BlockKind",
    "BlockMeta",
    "COMMENT_KINDS",
    "ClassInfo",
    "CodeTree",
    "CodeUnit",
    "CommentInfo",
    "CommentSection",
    "Content",
    "ContentParser",
    "DECLARATION_KINDS",
    "DeclaredClass",
    "DeclaredFunction",
    "DeclaredValue",
    "Directive",
    "FunctionInfo",
    "ImportInfo",
    "ImportedObject",
    "Level",
    "MethodInfo",
    "VariableInfo",
    "classify",
    "comment_sections",
    "parse_unit",
    "split_sections",
]
