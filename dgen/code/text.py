"""Small text helpers shared by the parser and the renderer."""

from __future__ import annotations

import posixpath
import re

_SPACES = re.compile(r"[ \t]+")
_INDENT = re.compile(r"^[ \t]+")


def trim(text: str) -> str:
    """Strip spaces and tabs (not newlines) from both ends."""
    return text.strip(" \t")


def clean(text: str) -> str:
    """Collapse runs of spaces/tabs into one space and trim."""
    return trim(_SPACES.sub(" ", text))


def get_indent(row: str) -> str:
    """Return the leading whitespace of a single row."""
    match = _INDENT.match(row)
    return match.group(0) if match else ""


def common_prefix(first: str, second: str) -> str:
    """Return the longest common prefix of two strings."""
    length = min(len(first), len(second))
    for i in range(length):
        if first[i] != second[i]:
            return first[:i]
    return first[:length]


def common_indent(rows: list[str]) -> str:
    """Return the indentation shared by all non-blank rows.

    Args:
        rows: Rows to inspect. Rows made only of whitespace are skipped.

    Returns:
        The common leading whitespace, or an empty string.
    """
    indent: str | None = None
    for row in rows:
        if not row.strip(" \t"):
            continue
        current = get_indent(row)
        indent = current if indent is None else common_prefix(indent, current)
    return indent or ""


def indent_rows(rows: list[str], indent: str = "  ") -> list[str]:
    """Prefix every row in a list with ``indent``."""
    return [indent + row for row in rows]


def deindent_block(text: str) -> str:
    """Remove the common indentation of the non-blank rows of a block."""
    rows = text.split("\n")
    indent = common_indent(rows)
    if not indent:
        return text
    return "\n".join(row[len(indent):] if row.startswith(indent) else row.lstrip(" \t") for row in rows)


def str_fill(length: int, seq: str = " ") -> str:
    """Repeat ``seq`` up to exactly ``length`` characters."""
    if not seq or length <= 0:
        return ""
    return (seq * (length // len(seq) + 1))[:length]


def trim_rows(rows: list[str]) -> list[str]:
    """Drop empty rows at both ends of a list of rows."""
    start = 0
    end = len(rows)
    while start < end and not rows[start]:
        start += 1
    while end > start and not rows[end - 1]:
        end -= 1
    return rows[start:end]


def wrap_text(text: str, max_columns: int, min_columns: int = 0) -> list[str]:
    """Wrap text on spaces so rows stay within ``max_columns``.

    A row is never broken before ``min_columns``; if no space is found between
    the two limits the row is cut hard at ``max_columns``.

    Args:
        text: Text to wrap.
        max_columns: Preferred maximum row width. Zero or less disables wrapping.
        min_columns: Minimum row width before a break is allowed.

    Returns:
        The wrapped rows.
    """
    if max_columns <= 0:
        return [text]
    rows = []
    while len(text) > max_columns:
        p = max_columns
        while p >= min_columns and text[p] != " ":
            p -= 1
        if p < min_columns or p <= 0:
            p = max_columns
        rows.append(text[:p])
        text = text[p + 1:] if text[p] == " " else text[p:]
    rows.append(text)
    return rows


def pad_block(rows: list[str], first_row: str, other_rows: str, width: int) -> list[str]:
    """Pad rows on the left, using a distinct prefix for the first row.

    Both prefixes are right-aligned in a field of ``width`` characters.
    """
    first = first_row.rjust(width)
    other = other_rows.rjust(width)
    return [(first if i == 0 else other) + row for i, row in enumerate(rows)]


def join_paths(*paths: str) -> str:
    """Join and normalise posix paths (``..`` and ``.`` are collapsed)."""
    joined = posixpath.join(*[p for p in paths if p]) if any(paths) else "."
    return posixpath.normpath(joined)


def concat_unique(*sequences):
    """Concatenate sequences keeping the first occurrence of each item."""
    ret = []
    seen = set()
    for sequence in sequences:
        for item in sequence:
            if id(item) in seen:
                continue
            seen.add(id(item))
            ret.append(item)
    return ret
