"""Placeholder expressions in directive arguments.

An argument may hold ``{element}`` or ``{element/regex/}`` placeholders.
They are filled in from the assignment blocks directly below the directive:

- ``target``: the assignment target, e.g. ``module.exports.run``
- ``value``: the assigned value
- ``arg[N]``: the Nth argument of the call in the value (``arg[1][0]``
  reads into nested calls)

With a regex, its first match in the extracted text is used instead. A
directive with placeholders expands to one argument list per assignment
block all of whose placeholders resolve.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from dgen.code.block import AssignmentInfo, Block, Level
from dgen.code.patterns import BlockKind
from dgen.directives.arguments import read_arg_at

PLACEHOLDER = re.compile(r"\{(?:[^{}]|\{[^{}]*\})+\}")

_ARG_ELEMENT = re.compile(r"^arg((?:\[[0-9]+\])+)$")
_ELEMENTS = ("target", "value")


@dataclass
class Placeholder:
    """A parsed ``{element/regex/}`` expression."""

    expression: str
    element: str
    index: list[int] = field(default_factory=list)
    regex: re.Pattern[str] | None = None

    def extract(self, block: Block) -> str | None:
        """Extract the text this placeholder stands for from an assignment block.

        Returns:
            The extracted text, or None when the block does not provide it.
        """
        if not isinstance(block.info, AssignmentInfo):
            return None
        if self.element == "target":
            text = block.info.target
        elif self.element == "value":
            text = block.info.value
        else:
            arg = read_arg_at(block.info.value, self.index)
            if not isinstance(arg, str):
                return None
            text = arg
        if self.regex is not None:
            match = self.regex.search(text)
            if match is None:
                return None
            text = match.group(0)
        return text


def parse_placeholder(expression: str) -> Placeholder:
    """Parse one ``{...}`` expression.

    Raises:
        ValueError: If the element is unknown or the regex does not compile.
    """
    sliced = expression[1:-1]
    regex = None
    element = sliced
    slash = sliced.find("/")
    if slash != -1:
        if not sliced.endswith("/") or len(sliced) == slash + 1:
            raise ValueError(f"Unterminated regex in expression '{expression}'")
        try:
            regex = re.compile(sliced[slash + 1:-1])
        except re.error as e:
            raise ValueError(f"Bad regex in expression '{expression}': {e}") from e
        element = sliced[:slash]

    if element in _ELEMENTS:
        return Placeholder(expression, element, regex=regex)
    match = _ARG_ELEMENT.match(element)
    if match is not None:
        index = [int(i) for i in re.findall(r"[0-9]+", match.group(1))]
        return Placeholder(expression, "arg", index, regex)
    raise ValueError(f"Unknown element '{element}' in expression")


def parse_placeholders(args: list[str]) -> list[list[Placeholder]]:
    """Parse the placeholders of every argument (one list per argument).

    Raises:
        ValueError: If any placeholder is malformed.
    """
    return [[parse_placeholder(m.group(0)) for m in PLACEHOLDER.finditer(arg)] for arg in args]


def has_placeholders(args: list[str]) -> bool:
    """Check if any argument contains a placeholder."""
    return any(PLACEHOLDER.search(arg) for arg in args)


def fill(arg: str, placeholders: list[Placeholder], block: Block) -> str | None:
    """Replace the placeholders of one argument with text from ``block``."""
    for placeholder in placeholders:
        text = placeholder.extract(block)
        if text is None:
            return None
        arg = arg.replace(placeholder.expression, text, 1)
    return arg


def expand_args(args: list[str], target: Block | None, include_target: bool = True) -> list[list[str]]:
    """Expand placeholder arguments over the assignments following ``target``.

    Args:
        args: Directive arguments.
        target: Block the directive applies to.
        include_target: Also use ``target`` itself as a candidate.

    Returns:
        Argument lists, one per matching assignment block. Arguments without
        placeholders are returned unchanged as the only list.

    Raises:
        ValueError: If a placeholder is malformed.
    """
    parsed = parse_placeholders(args)
    if not any(parsed):
        return [list(args)]
    if target is None:
        return []

    candidates = target.all_next(Level.ADJACENT)
    if include_target:
        candidates.insert(0, target)

    ret: list[list[str]] = []
    for block in candidates:
        if block.kind != BlockKind.ASSIGNMENT:
            continue
        expanded = []
        for arg, placeholders in zip(args, parsed):
            filled = fill(arg, placeholders, block)
            if filled is None:
                break
            expanded.append(filled)
        else:
            ret.append(expanded)
    return ret
