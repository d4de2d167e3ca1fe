"""Comment directives: argument splitting, placeholders, handlers and the engine."""

from dgen.directives.arguments import build_arg_tree, read_arg_at, split_top_level_args
from dgen.directives.diagnostics import DirectiveIssue, DirectiveReport, IssueSeverity
from dgen.directives.engine import DirectiveEngine
from dgen.directives.expressions import Placeholder, expand_args, parse_placeholder
from dgen.directives.handlers import HANDLERS, DirectiveContext

__all__ = [
    "DirectiveContext",
    "DirectiveEngine",
    "DirectiveIssue",
    "DirectiveReport",
    "HANDLERS",
    "IssueSeverity",
    "Placeholder",
    "build_arg_tree",
    "expand_args",
    "parse_placeholder",
    "read_arg_at",
    "split_top_level_args",
]
