"""Content sequences and the recursive content parser."""

from __future__ import annotations

import re
import weakref
from typing import Any, Iterable

from dgen.code.block import COMMENT_KINDS, Block, Level
from dgen.code.patterns import BlockKind, classify

# Spaces ending a block row, with the newline if any.
_LINE_END = re.compile(r"[ \t]*\n?")
# Blank rows (possibly holding spaces), or trailing spaces at the end of text.
_GAP = re.compile(r"(?:[ \t]*\n)*(?:[ \t]+\Z)?")


class Content:
    """An ordered sequence of blocks produced by one parse pass.

    Content owns its blocks. Nested content (a class body, a function body
    opted in with ``@parse``) keeps a weak reference to the declaration that
    owns it, so paths can be rebuilt without an ownership cycle.
    """

    def __init__(self, text: str = "", starting_row: int = 1, owner: Any = None) -> None:
        """Initialize content, parsing ``text`` when given.

        Args:
            text: Source text to parse.
            starting_row: Row number of the first row of ``text``.
            owner: Block or unit holding this content.
        """
        self.text = ""
        self.starting_row = starting_row
        self.leading_gap = ""
        self._blocks: list[Block] = []
        self._owner: weakref.ref | None = None
        if owner is not None:
            self.owner = owner
        if text:
            self.load(text, starting_row)

    @property
    def owner(self) -> Any:
        """Block or unit holding this content, if still alive."""
        return self._owner() if self._owner is not None else None

    @owner.setter
    def owner(self, value: Any) -> None:
        self._owner = weakref.ref(value) if value is not None else None

    def load(self, text: str, starting_row: int = 1) -> None:
        """Replace the blocks with the result of parsing ``text``."""
        for block in self._blocks:
            block.attach(None, -1)
        self._blocks = []
        ContentParser().parse_into(self, text, starting_row)

    # Sequence access

    @property
    def blocks(self) -> list[Block]:
        """Copy of the block list in document order."""
        return list(self._blocks)

    @property
    def block_count(self) -> int:
        """Number of blocks."""
        return len(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self):
        return iter(list(self._blocks))

    def block_at(self, index: int) -> Block:
        """Block at ``index`` in document order."""
        return self._blocks[index]

    def index_of(self, block: Block) -> int:
        """Position of ``block``, or -1 when it does not belong here."""
        if block.parent is self and 0 <= block.index < len(self._blocks):
            return block.index
        return -1

    @property
    def first_block(self) -> Block | None:
        """First block, if any."""
        return self._blocks[0] if self._blocks else None

    @property
    def last_block(self) -> Block | None:
        """Last block, if any."""
        return self._blocks[-1] if self._blocks else None

    def append(self, block: Block) -> None:
        """Append a block and attach it to this content."""
        block.attach(self, len(self._blocks))
        self._blocks.append(block)

    def truncate(self, end: int) -> None:
        """Keep only the blocks before ``end``; later blocks are detached."""
        if end >= len(self._blocks):
            return
        for block in self._blocks[end:]:
            block.attach(None, -1)
        self._blocks = self._blocks[:end]

    @property
    def leading_blank_rows(self) -> int:
        """Blank rows before the first block."""
        return self.leading_gap.count("\n")

    def source_text(self) -> str:
        """Rebuild the parsed text from the blocks and the blank rows between them."""
        parts = [self.leading_gap]
        for block in self._blocks:
            parts.append(block.raw_text)
            parts.append(block.line_end)
            parts.append(block.gap_after)
        return "".join(parts)

    # Queries

    def blocks_by_kind(self, kind: BlockKind) -> list[Block]:
        """All blocks of one kind."""
        return [b for b in self._blocks if b.kind == kind]

    def blocks_by_variant(self, kinds: Iterable[BlockKind]) -> list[Block]:
        """All blocks whose kind is in ``kinds``."""
        kinds = frozenset(kinds)
        return [b for b in self._blocks if b.kind in kinds]

    def block_by_identifier(self, name: str) -> Block | None:
        """First block declaring ``name``."""
        for block in self._blocks:
            if block.identifier_name == name:
                return block
        return None

    def block_by_field(self, name: str) -> Block | None:
        """First member block named ``name``."""
        for block in self._blocks:
            if block.field_name == name:
                return block
        return None

    def block_by_path(self, path: list[str] | str) -> Block | None:
        """Resolve a dotted path by repeated lookup-by-name.

        Args:
            path: Path segments (or a dotted string), e.g.
                ``["MyClass", "prototype", "myMethod"]``.

        Returns:
            The resolved block, or None if any segment does not resolve.
        """
        if isinstance(path, str):
            path = path.split(".")
        if not path:
            return None
        first = self.block_by_identifier(path[0])
        if first is None:
            first = self.block_by_field(path[0])
        if len(path) == 1 or first is None:
            return first
        return first.block_by_path(list(path[1:]))

    def assigned_fields_list(self, prefix: list[str] | None = None) -> dict[str, Any]:
        """Assigned fields keyed by dotted path ``prefix.block.field``."""
        ret: dict[str, Any] = {}
        for block in self._blocks:
            for name, value in block.assigned_fields.items():
                ret[".".join([*(prefix or []), block.display_name or "", name])] = value
        return ret

    def assigned_fields_tree(self) -> dict[str, dict[str, Any]]:
        """Assigned fields grouped by block name."""
        tree: dict[str, dict[str, Any]] = {}
        for block in self._blocks:
            for name, value in block.assigned_fields.items():
                tree.setdefault(block.display_name or "", {})[name] = value
        return tree

    def assigned_fields_paths(self, prefix: list[str] | None = None) -> list[list[str]]:
        """Assigned fields as path lists."""
        return [
            [*(prefix or []), block.display_name or "", name]
            for block in self._blocks
            for name in block.assigned_fields
        ]

    def __repr__(self) -> str:
        return f"Content(blocks={len(self._blocks)}, row={self.starting_row})"


class ContentParser:
    """Recursive parser slicing text into a flat sequence of blocks.

    Class bodies are always parsed into nested content. Function bodies (and
    function values of assignments) are parsed only when the nearest comment
    linked before them at level 1 carries a ``@parse`` directive.
    """

    def parse(self, text: str, starting_row: int = 1, owner: Any = None) -> Content:
        """Parse text into a new Content.

        Args:
            text: Text to parse.
            starting_row: Row number of the first row of ``text``.
            owner: Block or unit that will own the content.

        Returns:
            Parsed Content. Empty text gives empty content.
        """
        content = Content(owner=owner)
        self.parse_into(content, text, starting_row)
        return content

    def parse_into(self, content: Content, text: str, starting_row: int = 1) -> None:
        """Parse ``text`` and append the blocks to ``content``."""
        content.text = text
        content.starting_row = starting_row

        gap = _GAP.match(text).group(0)
        content.leading_gap = gap
        blank_rows = gap.count("\n")
        row = starting_row + blank_rows
        pos = len(gap)

        while pos < len(text):
            meta = classify(text[pos:])
            block = Block(meta.kind, text[pos:pos + meta.length], starting_row=row)
            block.blank_rows_before = blank_rows
            pos += meta.length
            row += block.row_count - 1

            block.line_end = _LINE_END.match(text, pos).group(0)
            pos += len(block.line_end)
            if block.trailing_newline:
                row += 1

            block.gap_after = _GAP.match(text, pos).group(0)
            pos += len(block.gap_after)
            blank_rows = block.gap_after.count("\n")
            block.blank_rows_after = blank_rows
            row += blank_rows

            content.append(block)
            self.build_meta(block)

    def build_meta(self, block: Block) -> None:
        """Parse nested content for a block once it is linked into place."""
        if block.kind == BlockKind.CLASS:
            self._parse_body(block)
        elif block.kind in (BlockKind.FUNCTION, BlockKind.ASSIGNMENT) and block.body is not None:
            if self.requests_parse(block):
                self._parse_body(block)

    @staticmethod
    def requests_parse(block: Block) -> bool:
        """Check if the comment documenting ``block`` asks for its body to be parsed."""
        comment = block.prev(Level.ADJACENT, COMMENT_KINDS)
        return comment is not None and bool(comment.directives_by_verb("parse"))

    def _parse_body(self, block: Block) -> None:
        block.content = self.parse(block.body or "", block.body_row, owner=block)
