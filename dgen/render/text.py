"""Text elements and their layout as reStructuredText rows."""

from __future__ import annotations

from dataclasses import dataclass

from dgen.code.text import indent_rows, pad_block, str_fill, wrap_text
from dgen.config import OutputSettings

HEADING_STYLES = ("h1", "h2", "h3", "h4", "h5")

# Left padding of each bullet level, bullet included.
LIST_WIDTHS = {
    "l": 2,
    "l1": 2,
    "l2": 5,
    "l3": 8,
    "l4": 11,
    "l5": 14,
    "l6": 17,
    "l7": 20,
    "l8": 23,
}


@dataclass
class TextElement:
    """A piece of styled text: ``h1``-``h5``, ``p``, ``b``, ``l``/``l1``-``l8`` or ``code``."""

    style: str
    text: str | None

    @property
    def is_heading(self) -> bool:
        """Check if the element is a heading."""
        return self.style in HEADING_STYLES

    @property
    def is_list_item(self) -> bool:
        """Check if the element is a bullet."""
        return self.style in LIST_WIDTHS


def list_style(depth: int) -> str:
    """Bullet style for a nesting depth starting at 1."""
    return f"l{max(1, min(depth, 8))}"


def inter_rows(before: TextElement, after: TextElement) -> list[str]:
    """Empty rows separating two consecutive elements."""
    if after.is_list_item:
        return [""] if before.style != after.style else []
    if after.is_heading:
        return ["", ""]
    return [""]


def _heading_lines(element: TextElement, settings: OutputSettings) -> tuple[str | None, str]:
    underlines = settings.section_underlines
    rank = min(HEADING_STYLES.index(element.style), len(underlines) - 1)
    marks = underlines[rank]
    length = len(element.text or "")
    over = str_fill(length, marks[0]) if len(marks) > 1 else None
    return over, str_fill(length, marks[-1])


def text_rows(element: TextElement, settings: OutputSettings) -> list[str]:
    """Lay out one element as rows.

    Headings get an underline (and an overline for two-character marks),
    bullets are padded by nesting level, and everything else is wrapped
    between ``min_columns`` and ``max_columns``.
    """
    if not element.text:
        return []
    low = settings.min_columns
    high = settings.max_columns

    if element.is_heading:
        over, under = _heading_lines(element, settings)
        rows = [] if over is None else [over]
        return rows + [element.text, under]
    if element.style == "b":
        return wrap_text(f"**{element.text}**", high, low)
    if element.is_list_item:
        width = LIST_WIDTHS[element.style]
        return pad_block(wrap_text(element.text, high - width, low), "* ", "", width)
    if element.style == "code":
        return ["::", ""] + indent_rows(element.text.split("\n"), "  ")
    return wrap_text(element.text, high, low)


def to_rows(elements: list[TextElement], settings: OutputSettings) -> list[str]:
    """Lay out a sequence of elements, skipping elements without text."""
    rows: list[str] = []
    previous = None
    for element in elements:
        if not element.text:
            continue
        if previous is not None:
            rows.extend(inter_rows(previous, element))
        rows.extend(text_rows(element, settings))
        previous = element
    return rows
