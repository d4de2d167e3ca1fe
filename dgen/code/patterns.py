"""Block classifier.

Maps the text at a cursor to the kind of the first block found there and the
number of characters that block consumes. Patterns are tried in a fixed order:
declarations introduced by reserved words come before the generic assignment
pattern, which would otherwise match them too.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

# First lines longer than this are treated as minified code.
MINIFIED_LINE_LENGTH = 1000

_WS = r"[ \t\n]"
_NAME = r"[a-zA-Z0-9_$]+"

PATTERNS: dict[str, re.Pattern[str]] = {
    "comment_line": re.compile(r"^[ \t\n]*//.*(\n|$)"),
    "comment_block": re.compile(r"^[ \t\n]*/\*.*(\n|$)"),
    "require_module": re.compile(
        rf"^{_WS}*(var|const|let){_WS}+{_NAME}{_WS}*={_WS}*require\(['\"].+['\"]\)"
    ),
    "import_module": re.compile(
        rf"^{_WS}*import{_WS}+(\*{_WS}+as{_WS}+{_NAME}|{_NAME}|\{{[^}}]*\}}){_WS}+from{_WS}+['\"].+['\"]"
    ),
    "fun_declaration": re.compile(
        rf"^{_WS}*(((let|var|const){_WS}+{_NAME}{_WS}*={_WS}*(async{_WS}+)?function)"
        rf"|((async{_WS}+)?function{_WS}+{_NAME})){_WS}*\([^()]*\){_WS}*{{"
    ),
    "var_declaration": re.compile(rf"^{_WS}*(const|var|let){_WS}+{_NAME}{_WS}*=(?!=){_WS}*.*"),
    "class_declaration": re.compile(
        rf"^{_WS}*class{_WS}+{_NAME}{_WS}*({_WS}extends{_WS}+[a-zA-Z0-9_$.]+{_WS}*)?{{"
    ),
    "assignment": re.compile(
        r"^[ \t\n]*[a-zA-Z0-9_.$]+[ \t\n]*=(?![=>])[ \t\n]*(.*;|.*[{(\[][ \t]*(\n|$))"
    ),
    "method_declaration": re.compile(
        rf"^{_WS}*(?!(if|for|while|switch|catch|with|function|return)\b)"
        rf"(static{_WS}+|async{_WS}+|get{_WS}+|set{_WS}+)*{_NAME}{_WS}*\([^()]*\){_WS}*{{"
    ),
}

_COMMENT_ROW = re.compile(r"^[ \t]*//.*(\n|$)")
_OPENERS = {"{": "}", "(": ")", "[": "]"}
_CLOSERS = {"}", ")", "]"}
_QUOTES = {"'", '"', "`"}


class BlockKind(Enum):
    """Kind of a parsed block."""

    COMMENT_LINE = "commentLine"
    COMMENT_BLOCK = "commentBlock"
    REQUIRE = "requireModule"
    FUNCTION = "funDeclaration"
    VARIABLE = "varDeclaration"
    CLASS = "classDeclaration"
    METHOD = "methodDeclaration"
    ASSIGNMENT = "assignment"
    UNKNOWN = "unknown"

    @property
    def is_comment(self) -> bool:
        """Check if this kind is one of the two comment kinds."""
        return self in (BlockKind.COMMENT_LINE, BlockKind.COMMENT_BLOCK)


@dataclass(frozen=True)
class BlockMeta:
    """Result of classifying the text at a cursor."""

    kind: BlockKind
    length: int


def block_length(text: str) -> int:
    """Length of a brace-delimited construct, from the start to its matching ``}``.

    Braces inside strings or regex literals are counted like any other brace.
    Semicolons directly after the closing brace are consumed as well.
    """
    pos = text.find("{")
    if pos == -1:
        return _line_length(text)
    depth = 0
    while pos < len(text):
        if text[pos] == "{":
            depth += 1
        elif text[pos] == "}":
            depth -= 1
        pos += 1
        if depth == 0:
            break
    while pos < len(text) and text[pos] == ";":
        pos += 1
    return pos


def statement_length(text: str, start: int) -> int:
    """Length of a statement ending at the end of the line containing ``start``.

    When the line leaves brackets open (``= {``, ``= foo(``), the statement is
    extended to the end of the row where they are all closed again.

    Args:
        text: Text at the cursor.
        start: Offset inside the first line where the statement body begins.

    Returns:
        Number of characters consumed.
    """
    stack: list[str] = []
    pos = start
    while pos < len(text):
        char = text[pos]
        if char == "\n" and not stack:
            return pos
        if char in _QUOTES:
            pos = _skip_string(text, pos)
            continue
        if char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in _CLOSERS:
            if not stack or stack[-1] != char:
                # unbalanced: fall back to the end of the first line
                return _line_length(text)
            stack.pop()
        pos += 1
    if stack:
        return _line_length(text)
    return len(text)


def _skip_string(text: str, pos: int) -> int:
    """Return the offset just past the string literal opening at ``pos``."""
    quote = text[pos]
    pos += 1
    while pos < len(text):
        if text[pos] == "\\":
            pos += 2
            continue
        if text[pos] == quote:
            return pos + 1
        if text[pos] == "\n" and quote != "`":
            return pos
        pos += 1
    return pos


def _line_length(text: str) -> int:
    newline = text.find("\n")
    return len(text) if newline == -1 else newline


def _comment_line_meta(text: str) -> BlockMeta:
    length = 0
    rest = text
    first = True
    while True:
        match = (PATTERNS["comment_line"] if first else _COMMENT_ROW).match(rest)
        if match is None:
            break
        first = False
        length += match.end()
        rest = rest[match.end():]
        if not match.group(1):
            break
    # the newline ending the last comment row is not part of the block
    if text[:length].endswith("\n"):
        length -= 1
    return BlockMeta(BlockKind.COMMENT_LINE, length)


def _comment_block_meta(text: str) -> BlockMeta:
    end = text.find("*/", text.find("/*") + 2)
    if end == -1:
        return BlockMeta(BlockKind.COMMENT_BLOCK, len(text))
    return BlockMeta(BlockKind.COMMENT_BLOCK, end + 2)


def _require_meta(text: str) -> BlockMeta:
    return BlockMeta(BlockKind.REQUIRE, _line_length(text))


def _var_meta(text: str) -> BlockMeta:
    start = text.find("=")
    return BlockMeta(BlockKind.VARIABLE, statement_length(text, start + 1))


def _assignment_meta(text: str) -> BlockMeta:
    start = text.find("=")
    return BlockMeta(BlockKind.ASSIGNMENT, statement_length(text, start + 1))


def _unknown_meta(text: str) -> BlockMeta:
    return BlockMeta(BlockKind.UNKNOWN, _line_length(text))


_CLASSIFIERS = [
    ("comment_line", _comment_line_meta),
    ("comment_block", _comment_block_meta),
    ("require_module", _require_meta),
    ("import_module", _require_meta),
    ("fun_declaration", lambda text: BlockMeta(BlockKind.FUNCTION, block_length(text))),
    ("var_declaration", _var_meta),
    ("class_declaration", lambda text: BlockMeta(BlockKind.CLASS, block_length(text))),
    ("assignment", _assignment_meta),
    ("method_declaration", lambda text: BlockMeta(BlockKind.METHOD, block_length(text))),
]


def classify(text: str) -> BlockMeta:
    """Classify the first block at the start of ``text``.

    Args:
        text: Remaining unparsed content.

    Returns:
        BlockMeta with the block kind and the number of characters it consumes.
        The length is always at least 1 for non-empty text.
    """
    if not text:
        return BlockMeta(BlockKind.UNKNOWN, 0)
    if _line_length(text) > MINIFIED_LINE_LENGTH:
        return _unknown_meta(text)

    for name, meta_fn in _CLASSIFIERS:
        if PATTERNS[name].match(text) is not None:
            meta = meta_fn(text)
            if meta.length > 0:
                return meta
            break

    meta = _unknown_meta(text)
    if meta.length == 0:
        # text starts with a newline the parser did not strip
        return BlockMeta(BlockKind.UNKNOWN, 1)
    return meta
