"""Comment sections: paragraphs, bullet lists and literal blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Union

from dgen.code.block import Block
from dgen.code.text import common_indent, trim, trim_rows

_DEFINITION = re.compile(r"^[ \t]*`.+`:")
_BULLET = re.compile(r"^[ \t]*(\*|-|\+|>|->|=>|#)[ \t]+")
_LITERAL = re.compile(r"^[ \t]*::")

DEFINITION_BULLET = "``:"


def row_bullet(row: str) -> str | None:
    """Extract the bullet of a row, e.g. ``" * "`` or ``" - "``.

    Rows starting with a `` `name`: `` definition give the indentation
    followed by ``"``:"``.

    Returns:
        The bullet string, or None if the row has no bullet.
    """
    if _DEFINITION.match(row):
        return row[:row.index("`")] + DEFINITION_BULLET
    match = _BULLET.match(row)
    return match.group(0) if match else None


@dataclass
class CommentSection:
    """One paragraph of comment text, possibly holding a bullet list.

    ``items`` holds the text of each bullet; an item becomes a nested
    section when a different bullet follows it.
    """

    starting_row: int = 0
    rows_before: int = 0
    rows_after: int = 0
    row_count: int = 0
    rows: list[str] = field(default_factory=list)
    text: str = ""
    format: str = "paragraph"
    bullet: str | None = None
    items: list[Union[str, CommentSection]] = field(default_factory=list)
    indent: str = ""

    @property
    def is_definition_list(self) -> bool:
        """Check if the bullets are `` `name`: `` definitions."""
        return self.bullet is not None and self.bullet.endswith(DEFINITION_BULLET)

    def add_item(self, row: str) -> None:
        """Append the text of a bullet row."""
        if self.is_definition_list:
            self.items.append(trim(row))
        else:
            self.items.append(row[len(self.bullet or ""):])

    def continue_item(self, row: str) -> None:
        """Join a continuation row to the last bullet."""
        if self.items and isinstance(self.items[-1], str):
            self.items[-1] = trim(self.items[-1]) + " " + trim(row)
        else:
            self.items.append(trim(row))

    def close(self, row: int) -> None:
        """Finalize text and row count once the last row has been read."""
        self.indent = common_indent(self.rows)
        if self.rows and _LITERAL.match(self.rows[0]):
            self.format = "block"
            rows = trim_rows([r.replace("::", "", 1) if i == 0 else r for i, r in enumerate(self.rows)])
            indent = common_indent(rows)
            self.rows = [r[len(indent):] for r in rows]
            self.text = "\n".join(self.rows)
        else:
            self.format = "paragraph"
            self.text = " ".join(trim(r) for r in trim_rows(self.rows))
        self.row_count = row - self.starting_row

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "text": self.text,
            "format": self.format,
            "bullet": self.bullet,
            "items": [i.to_dict() if isinstance(i, CommentSection) else i for i in self.items],
            "indent": self.indent,
            "starting_row": self.starting_row,
            "row_count": self.row_count,
            "rows_before": self.rows_before,
            "rows_after": self.rows_after,
        }


def split_sections(rows: list[str], starting_row: int = 1) -> list[CommentSection]:
    """Split comment rows into sections.

    A section ends at an empty row, or at a row that is neither a bullet nor
    the continuation of one once the section has started a bullet list. A
    bullet different from the current one nests under the last item, unless
    an enclosing list already uses it, in which case the nested lists are
    closed.

    Args:
        rows: Comment rows, markers already removed.
        starting_row: Source row of the first comment row.

    Returns:
        Sections in order.
    """
    sections: list[CommentSection] = []
    pending = list(rows)
    row_number = starting_row
    empty = 0
    previous: CommentSection | None = None
    current: CommentSection | None = None
    enclosing: list[CommentSection] = []

    def finish(section: CommentSection, row: int) -> CommentSection:
        while enclosing:
            section.close(row)
            section = enclosing.pop()
        section.close(row)
        sections.append(section)
        return section

    while pending:
        row = pending.pop(0)
        section_end = False
        reread = False

        if not row.strip(" \t"):
            if current is not None:
                section_end = True
            empty += 1
        else:
            if current is None:
                current = CommentSection(starting_row=row_number, rows_before=empty)
                if previous is not None:
                    previous.rows_after = empty
                empty = 0

            bullet = row_bullet(row)
            if bullet is not None:
                if current.bullet is None or current.bullet == bullet:
                    current.bullet = bullet
                    current.add_item(row)
                else:
                    depth = -1
                    for i, section in enumerate(enclosing):
                        if section.bullet == bullet:
                            depth = i
                            break
                    if depth == -1:
                        nested = CommentSection(starting_row=row_number - 1)
                        if current.items and isinstance(current.items[-1], str):
                            nested.rows.append(current.items.pop())
                        current.items.append(nested)
                        enclosing.append(current)
                        current = nested
                        current.bullet = bullet
                        current.add_item(row)
                    else:
                        while len(enclosing) > depth:
                            current.close(row_number)
                            current = enclosing.pop()
                        current.add_item(row)
            elif current.bullet is None:
                current.rows.append(row)
            elif row.startswith(" " * len(current.bullet)):
                current.continue_item(row)
            else:
                # the list is over: the row starts the next section
                section_end = True
                pending.insert(0, row)
                reread = True

        if section_end and current is not None:
            previous = finish(current, row_number)
            current = None

        if not reread:
            row_number += 1

    if current is not None:
        previous = finish(current, row_number)
    if previous is not None:
        previous.rows_after = empty

    return sections


def comment_sections(block: Block) -> list[CommentSection]:
    """Sections of a comment block (empty for other kinds)."""
    if not block.is_comment:
        return []
    return split_sections(block.text, block.starting_row)
