"""Directive engine.

Directives are ``@verb arg1 arg2`` rows inside comments. They apply to the
first code block following the comment; a directive with no code after it
applies to the unit itself.

Available directives:

- ``alias <name>``: the following block is also known as ``name``
- ``alias <path> <name>``: adds ``name`` as an alias of the block at ``path``
- ``assign <path.field> <value>``: documents ``value`` as ``field`` of ``path``
- ``export <name>``: sets the exported name of the following block (of the
  unit, at the end of the file)
- ``export <path> <name>``: sets the exported name of the block at ``path``
- ``parse``: parses the body of the following block and applies the
  directives found inside it
- ``pattern <type> <args>``: records a design pattern, for now only
  ``pattern singleton <instanceName>``
- ``stop``: drops every block after the comment

Paths are dotted (``MyClass.prototype.method``) and may contain
``{element/regex/}`` placeholders, see ``dgen.directives.expressions``.
"""

from __future__ import annotations

import logging

from dgen.code.block import COMMENT_KINDS, Block, Level
from dgen.code.content import Content
from dgen.code.graph import CodeTree
from dgen.code.patterns import BlockKind
from dgen.code.unit import CodeUnit
from dgen.directives.diagnostics import DirectiveReport
from dgen.directives.handlers import HANDLERS, DirectiveContext, Handler

logger = logging.getLogger(__name__)

CODE_KINDS = frozenset(kind for kind in BlockKind if kind not in COMMENT_KINDS)


class DirectiveEngine:
    """Applies comment directives to the units of a graph."""

    def __init__(self, handlers: dict[str, Handler] | None = None):
        """Initialize the engine.

        Args:
            handlers: Extra or replacement handlers by verb.
        """
        self.handlers: dict[str, Handler] = dict(HANDLERS)
        if handlers:
            self.handlers.update(handlers)

    def run(self, graph: CodeTree) -> DirectiveReport:
        """Apply directives to every unit, roots first.

        Args:
            graph: Fully linked graph.

        Returns:
            Report with the issues found. Units are mutated in place.
        """
        report = DirectiveReport()
        for unit in graph.ordered_units():
            self.run_unit(unit, report)
        logger.info(
            "Applied %d directives to %d units (%d errors)",
            report.directives_applied, len(report.units_processed), report.error_count,
        )
        return report

    def run_unit(self, unit: CodeUnit, report: DirectiveReport | None = None) -> DirectiveReport:
        """Apply the directives of a single unit."""
        if report is None:
            report = DirectiveReport()
        self.run_content(unit.content, unit, report)
        report.units_processed.append(unit.path or "")
        return report

    def run_content(self, content: Content, unit: CodeUnit, report: DirectiveReport) -> None:
        """Walk a content in document order and apply each directive comment."""
        current = content.first_block
        while current is not None:
            if current.is_comment and current.has_directives:
                self._apply(current, content, unit, report)
            current = current.next(Level.ALL)

    def _apply(self, comment: Block, content: Content, unit: CodeUnit, report: DirectiveReport) -> None:
        target = comment.next(Level.ALL, CODE_KINDS)
        verbs = set()

        for directive in comment.directives:
            verbs.add(directive.verb)
            ctx = DirectiveContext(unit, comment, target, report, directive.verb)
            handler = self.handlers.get(directive.verb)
            if handler is None:
                ctx.error(f"Unknown directive {directive.verb}")
                continue
            logger.debug("Applying @%s %s at %s:%d", directive.verb, directive.args, unit.path, directive.row)
            handler(ctx, directive.args)
            report.directives_applied += 1

        if "parse" in verbs:
            if target is None or target.body is None:
                where = f"row {target.starting_row}" if target is not None else "end of file"
                ctx = DirectiveContext(unit, comment, target, report, "parse")
                ctx.error(f"Bad target ({where}) for parse directive")
            else:
                nested = unit.parse_body(target)
                if nested is not None:
                    self.run_content(nested, unit, report)

        if "stop" in verbs:
            content.truncate(content.index_of(comment) + 1)
            if content is unit.content:
                unit.build_meta()
