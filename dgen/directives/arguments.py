"""Balanced-parenthesis splitter for call expressions.

Not an expression parser: only parentheses and string literals are
tracked, which is enough to pull arguments out of calls such as
``register("name", make(Base, "x"))``.
"""

from __future__ import annotations

from typing import Union

from dgen.code.text import trim

ArgTree = Union[str, list["ArgTree"]]

_QUOTES = ("'", '"', "`")


def split_top_level_args(text: str) -> list[str] | None:
    """Split an argument list on commas that are not inside parentheses.

    Args:
        text: Argument list without the enclosing parentheses, e.g.
            ``1, null, fn(1, 2, 3)``.

    Returns:
        Trimmed arguments, or None if the parentheses are unbalanced.
    """
    if not trim(text):
        return []
    ret: list[str] = []
    depth = 0
    start = 0
    quote = None
    i = 0
    while i < len(text):
        char = text[i]
        if quote is not None:
            if char == "\\":
                i += 1
            elif char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return None
        elif char == "," and depth == 0:
            ret.append(trim(text[start:i]))
            start = i + 1
        i += 1
    if depth != 0:
        return None
    ret.append(trim(text[start:]))
    return ret


def build_arg_tree(call: str) -> ArgTree | None:
    """Build the argument tree of a (nested) call.

    ``myFun(1, other(2, 3))`` gives ``["1", ["2", "3"]]``. Text without
    parentheses is returned as is.

    Returns:
        The tree, or None when the parentheses do not match.
    """
    left = call.find("(")
    right = call.rfind(")")
    if left == -1 and right == -1:
        return call
    if left == -1 or right == -1 or right < left:
        return None
    args = split_top_level_args(call[left + 1:right])
    if args is None:
        return None
    ret: list[ArgTree] = []
    for arg in args:
        node = build_arg_tree(arg)
        if node is None:
            return None
        ret.append(node)
    return ret


def read_arg_at(call: str, path: list[int]) -> ArgTree | None:
    """Read the argument at ``path`` from a nested call.

    Args:
        call: Call expression, e.g. ``myFun(1, other(2, 3));``.
        path: Argument indexes, outermost first, e.g. ``[1, 1]`` gives ``"3"``.

    Returns:
        The argument (a string, or a list for a nested call), or None.
    """
    current = build_arg_tree(call)
    for index in path:
        if not isinstance(current, list) or index >= len(current):
            return None
        current = current[index]
    return current
