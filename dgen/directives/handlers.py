"""Directive handlers.

Each handler receives the directive context (unit, comment, target block)
and the directive arguments, and mutates the unit or its blocks. Problems
are reported on the context and never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from dgen.code.block import Block
from dgen.code.unit import CodeUnit
from dgen.directives.diagnostics import DirectiveReport, IssueSeverity
from dgen.directives.expressions import expand_args, has_placeholders


@dataclass
class DirectiveContext:
    """Where a directive is applied."""

    unit: CodeUnit
    comment: Block
    target: Block | None
    report: DirectiveReport
    verb: str = ""

    def error(self, message: str, severity: IssueSeverity = IssueSeverity.ERROR) -> None:
        """Report a problem at the comment holding the directive."""
        self.report.add(message, self.unit.path, self.comment.starting_row, self.verb, severity)

    def resolve(self, path: str) -> Block | None:
        """Resolve a dotted path in the unit, reporting failures."""
        block = self.unit.block_by_path(path.split("."))
        if block is None:
            self.error(f"No such path in code unit: {path}")
        return block

    def expand(self, args: list[str]) -> list[list[str]]:
        """Expand placeholder arguments, reporting malformed or unmatched ones."""
        try:
            expanded = expand_args(args, self.target, include_target=True)
        except ValueError as e:
            self.error(str(e))
            return []
        if not expanded and has_placeholders(args):
            self.error("Expression expansion did not find any matching code", IssueSeverity.WARNING)
        return expanded


Handler = Callable[[DirectiveContext, list], None]


def _bad_count(ctx: DirectiveContext, expected: str, args: list[str]) -> None:
    ctx.error(f"Bad argument count for {ctx.verb}, expected {expected}, got {len(args)}")


def alias(ctx: DirectiveContext, args: list[str]) -> None:
    """``alias <name>`` or ``alias <path> <name>``."""
    if len(args) == 1:
        if ctx.target is None:
            ctx.error("alias directive cannot be applied to code unit")
            return
        ctx.target.add_alias(args[0])
        return
    if len(args) != 2:
        _bad_count(ctx, "1 or 2", args)
        return
    for path, name in ctx.expand(args):
        block = ctx.resolve(path)
        if block is not None:
            block.add_alias(name)


def assign(ctx: DirectiveContext, args: list[str]) -> None:
    """``assign <target.field> <value>``: document ``value`` as a field of target."""
    if len(args) != 2:
        _bad_count(ctx, "2", args)
        return
    for target_path, value_path in ctx.expand(args):
        parts = target_path.split(".")
        name = parts.pop()
        if not parts or not name:
            ctx.error(f"No field name in assign target: {target_path}")
            continue
        target = ctx.resolve(".".join(parts))
        if target is None:
            continue
        value = ctx.resolve(value_path)
        if value is None:
            continue
        target.assign_field(name, value)


def export(ctx: DirectiveContext, args: list[str]) -> None:
    """``export <name>`` or ``export <path> <name>``.

    With one argument and no code after the comment, the unit itself is
    renamed.
    """
    if len(args) == 1:
        if ctx.target is None:
            ctx.unit.exported_name = args[0]
        else:
            ctx.target.exported_name = args[0]
        return
    if len(args) != 2:
        _bad_count(ctx, "1 or 2", args)
        return
    for path, name in ctx.expand(args):
        block = ctx.resolve(path)
        if block is not None:
            block.exported_name = name


def parse(ctx: DirectiveContext, args: list[str]) -> None:
    """Handled by the engine, which descends into the target body."""


def stop(ctx: DirectiveContext, args: list[str]) -> None:
    """Handled by the engine, which truncates the content."""


def pattern(ctx: DirectiveContext, args: list[str]) -> None:
    """``pattern <name> [args]``, e.g. ``pattern singleton instanceName``."""
    if not args:
        _bad_count(ctx, "at least 1", args)
        return
    ctx.unit.set_meta("pattern", args[0])
    if args[0] == "singleton":
        if len(args) < 2:
            _bad_count(ctx, "2", args)
            return
        ctx.unit.set_meta("exportedInstance", args[1])
    else:
        ctx.error(f"Unknown value for pattern ({args[0]})", IssueSeverity.WARNING)


HANDLERS: dict[str, Handler] = {
    "alias": alias,
    "assign": assign,
    "export": export,
    "parse": parse,
    "pattern": pattern,
    "stop": stop,
}
