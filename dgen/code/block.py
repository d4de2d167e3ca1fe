"""Block data structures.

A block is one classified span of source text: a comment, a declaration, an
assignment. Blocks of one parse pass live in an ordered ``Content`` sequence
and are linked on three levels, all derived from that order and from the
blank rows counted around each block:

- level 0: every block before or after, in document order
- level 1: only blocks with no blank row in between
- level 2: like level 0, but an isolated comment (a comment followed by a
  blank row) starts a new section and is not linked on either side

For example::

    1: <comment block> (section header 1)

    2: <comment block> (function documentation)
    3: <function block>

    4: <comment block> (section header 2)

    5: <comment block> (variable documentation)
    6: <variable block>
    7: <variable block>

    level 0: (1, 2, 3, 4, 5, 6, 7)
    level 1: (1), (2, 3), (4), (5, 6, 7)
    level 2: (1), (2, 3), (4), (5, 6, 7)

Inserting blank rows between 3 and 5 without the header comment 4 gives a
single level-2 group (2, 3, 5, 6, 7) while level 1 still breaks.
"""

from __future__ import annotations

import dataclasses
import re
import weakref
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Iterable, Union

from dgen.code.patterns import BlockKind
from dgen.code.text import clean, deindent_block, trim

if TYPE_CHECKING:
    from dgen.code.content import Content

COMMENT_KINDS = frozenset({BlockKind.COMMENT_LINE, BlockKind.COMMENT_BLOCK})
DECLARATION_KINDS = frozenset(
    {BlockKind.REQUIRE, BlockKind.FUNCTION, BlockKind.VARIABLE, BlockKind.CLASS}
)

KindFilter = Union[BlockKind, Iterable[BlockKind], None]

_DIRECTIVE_ROW = re.compile(r"^[ \t]*@[a-zA-Z0-9_]+")
_ARGLIST = re.compile(r"\(.*\)")
_MODIFIERS = ("static", "async", "get", "set")


class Level(IntEnum):
    """Linking level between blocks of the same content."""

    ALL = 0
    ADJACENT = 1
    SECTION = 2


@dataclass
class Directive:
    """A ``@verb arg1 arg2`` annotation found in a comment."""

    verb: str
    args: list[str] = field(default_factory=list)
    row: int = 0


@dataclass
class CommentInfo:
    """Comment text with markers and directive rows removed."""

    text: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)


@dataclass
class ImportInfo:
    """A module import (``require`` or ``import ... from``)."""

    keyword: str
    name: str
    path: str
    field: str | None = None
    module_type: str = "external"
    bindings: list[tuple[str, str | None]] = dataclasses.field(default_factory=list)


@dataclass
class FunctionInfo:
    """A function declaration."""

    keyword: str
    name: str
    args: list[str] = field(default_factory=list)
    body: str = ""
    body_row: int = 0


@dataclass
class VariableInfo:
    """A ``const``, ``let`` or ``var`` declaration."""

    keyword: str
    name: str
    value: str = ""


@dataclass
class ClassInfo:
    """A class declaration. The parsed members live in the block's content."""

    name: str
    superclass: str | None = None
    body: str = ""
    body_row: int = 0


@dataclass
class MethodInfo:
    """A class member method."""

    name: str
    args: list[str] = field(default_factory=list)
    modifiers: list[str] = field(default_factory=list)
    body: str = ""
    body_row: int = 0


@dataclass
class AssignmentInfo:
    """A ``target = value;`` statement.

    When the value is a function expression, ``args`` and ``body`` describe it.
    """

    target: str
    value: str
    args: list[str] | None = None
    body: str | None = None
    body_row: int = 0


BlockInfo = Union[
    CommentInfo, ImportInfo, FunctionInfo, VariableInfo, ClassInfo, MethodInfo, AssignmentInfo, None
]


def _kind_set(kind: KindFilter) -> frozenset[BlockKind] | None:
    if kind is None:
        return None
    if isinstance(kind, BlockKind):
        return frozenset({kind})
    return frozenset(kind)


@dataclass(eq=False, repr=False)
class Block:
    """A typed span of source text.

    Position fields are fixed at parse time. ``line_end`` holds the spaces and
    the newline ending the block row, ``gap_after`` the blank rows that follow
    (rows holding only spaces count as blank). ``exported_name``, ``aliases``
    and ``assigned_fields`` are only written by directives after parsing.
    """

    kind: BlockKind
    raw_text: str
    starting_row: int = 1
    blank_rows_before: int = 0
    blank_rows_after: int = 0
    line_end: str = ""
    gap_after: str = ""
    exported_name: str | None = None
    assigned_fields: dict[str, Any] = field(default_factory=dict)
    info: BlockInfo = field(init=False, default=None)
    content: Content | None = field(init=False, default=None)
    _aliases: dict[str, None] = field(init=False, default_factory=dict)
    _parent: weakref.ref | None = field(init=False, default=None)
    _index: int = field(init=False, default=-1)

    def __post_init__(self) -> None:
        """Build the kind-specific info from the raw text."""
        self.info = build_info(self.kind, self.raw_text, self.starting_row)

    def __repr__(self) -> str:
        text = self.raw_text.replace("\n", "\\n").replace("\t", "\\t")
        if len(text) > 60:
            text = text[:60] + " ..."
        return f"Block({self.kind.value}, row={self.starting_row}, {text!r})"

    @property
    def row_count(self) -> int:
        """Number of rows spanned by the raw text."""
        return self.raw_text.count("\n") + 1

    @property
    def trailing_newline(self) -> bool:
        """Check if the row of the block ends right after it."""
        return self.line_end.endswith("\n")

    @property
    def is_comment(self) -> bool:
        """Check if this block is a comment."""
        return self.kind in COMMENT_KINDS

    @property
    def is_isolated_comment(self) -> bool:
        """Check if this is a comment followed by at least one blank row."""
        return self.is_comment and self.blank_rows_after > 0

    # Identity

    @property
    def identifier_name(self) -> str | None:
        """Declared identifier for imports, functions, variables and classes."""
        if isinstance(self.info, (ImportInfo, FunctionInfo, VariableInfo, ClassInfo)):
            return self.info.name
        return None

    @property
    def identifier_type(self) -> str | None:
        """Declaration keyword (``const``, ``function``, ``class`` ...)."""
        if isinstance(self.info, (ImportInfo, FunctionInfo, VariableInfo)):
            return self.info.keyword
        if isinstance(self.info, ClassInfo):
            return "class"
        return None

    @property
    def field_name(self) -> str | None:
        """Member name for methods."""
        if isinstance(self.info, MethodInfo):
            return self.info.name
        return None

    @property
    def display_name(self) -> str | None:
        """Exported name if one was assigned, else the declared name."""
        if self.exported_name:
            return self.exported_name
        return self.identifier_name or self.field_name

    @property
    def arguments(self) -> list[str]:
        """Argument names for functions, methods and function assignments."""
        if isinstance(self.info, (FunctionInfo, MethodInfo)):
            return list(self.info.args)
        if isinstance(self.info, AssignmentInfo) and self.info.args is not None:
            return list(self.info.args)
        return []

    @property
    def body(self) -> str | None:
        """De-indented body text for block-delimited kinds."""
        if isinstance(self.info, (FunctionInfo, ClassInfo, MethodInfo, AssignmentInfo)):
            return self.info.body
        return None

    @property
    def body_row(self) -> int:
        """Row of the opening brace of the body."""
        return getattr(self.info, "body_row", self.starting_row)

    # Comments

    @property
    def directives(self) -> list[Directive]:
        """Directives of a comment block (empty for other kinds)."""
        if isinstance(self.info, CommentInfo):
            return list(self.info.directives)
        return []

    @property
    def has_directives(self) -> bool:
        """Check if this comment carries at least one directive."""
        return isinstance(self.info, CommentInfo) and bool(self.info.directives)

    def directives_by_verb(self, verb: str) -> list[Directive]:
        """Return the directives of this comment with the given verb."""
        return [d for d in self.directives if d.verb == verb]

    @property
    def text(self) -> list[str]:
        """Comment rows with markers and directives removed."""
        if isinstance(self.info, CommentInfo):
            return list(self.info.text)
        return []

    @property
    def trimmed_text(self) -> list[str]:
        """Comment rows without leading and trailing empty rows."""
        rows = self.text
        while rows and not rows[0]:
            rows.pop(0)
        while rows and not rows[-1]:
            rows.pop()
        return rows

    @property
    def compact_text(self) -> str:
        """Comment text joined on a single row."""
        return " ".join(row.strip() for row in self.trimmed_text)

    @property
    def trimmed_row_count(self) -> int:
        """Number of rows of the trimmed comment text."""
        return len(self.trimmed_text)

    # Aliases and fields

    @property
    def aliases(self) -> list[str]:
        """Aliases in insertion order."""
        return list(self._aliases)

    def add_alias(self, alias: str) -> bool:
        """Add an alias.

        Returns:
            True if added, False if the alias was already present.
        """
        if alias in self._aliases:
            return False
        self._aliases[alias] = None
        return True

    def assign_field(self, name: str, value: Any) -> None:
        """Record a documented field; ``value`` may be another Block."""
        self.assigned_fields[name] = value

    # Tree

    @property
    def parent(self) -> Content | None:
        """Content sequence holding this block."""
        return self._parent() if self._parent is not None else None

    def attach(self, parent: Content | None, index: int) -> None:
        """Set the back-reference to the holding content."""
        self._parent = weakref.ref(parent) if parent is not None else None
        self._index = index if parent is not None else -1

    @property
    def index(self) -> int:
        """Position inside the parent content, -1 when detached."""
        return self._index

    def owner_block(self) -> Block | None:
        """Declaration whose body holds this block (class or parsed function)."""
        parent = self.parent
        if parent is None:
            return None
        owner = parent.owner
        return owner if isinstance(owner, Block) else None

    def namespace_path(self) -> list[str]:
        """Names of this block and of its enclosing declarations, outermost first."""
        path: list[str] = []
        target: Block | None = self
        while target is not None:
            name = target.display_name
            if name:
                path.insert(0, name)
            target = target.owner_block()
        return path

    def block_by_path(self, path: list[str]) -> Block | None:
        """Resolve a path inside the nested content of this block.

        For classes, ``prototype`` descends into the member content; any other
        first segment looks for a static member.
        """
        if not path or self.content is None:
            return None
        if self.kind == BlockKind.CLASS:
            if path[0] == "prototype":
                return self.content.block_by_path(path[1:])
            member = self.content.block_by_path(path)
            if member is not None and isinstance(member.info, MethodInfo) and "static" in member.info.modifiers:
                return member
            return None
        return self.content.block_by_path(path)

    @property
    def declared_methods(self) -> list[dict[str, Any]]:
        """Member methods of a class as ``{"name", "args"}`` records."""
        if self.kind != BlockKind.CLASS or self.content is None:
            return []
        return [
            {"name": b.field_name, "args": b.arguments}
            for b in self.content.blocks_by_kind(BlockKind.METHOD)
        ]

    @property
    def superclass(self) -> str | None:
        """Name of the extended class, if any."""
        return self.info.superclass if isinstance(self.info, ClassInfo) else None

    def assigned_fields_list(self) -> dict[str, Any]:
        """Assigned fields of a class body keyed by ``Class.prototype.member.field``."""
        if self.kind != BlockKind.CLASS or self.content is None:
            return {}
        return self.content.assigned_fields_list([self.display_name or "", "prototype"])

    def assigned_fields_tree(self) -> dict[str, Any]:
        """Assigned fields of a class body as a nested mapping."""
        if self.kind != BlockKind.CLASS or self.content is None:
            return {}
        return {self.display_name: {"prototype": self.content.assigned_fields_tree()}}

    def assigned_fields_paths(self) -> list[list[str]]:
        """Assigned field paths of a class body."""
        if self.kind != BlockKind.CLASS or self.content is None:
            return []
        return self.content.assigned_fields_paths([self.display_name or "", "prototype"])

    # Linking

    def _sibling(self, offset: int) -> Block | None:
        parent = self.parent
        if parent is None:
            return None
        index = self._index + offset
        if index < 0 or index >= parent.block_count:
            return None
        return parent.block_at(index)

    @staticmethod
    def linked(before: Block, after: Block, level: int) -> bool:
        """Check whether two consecutive blocks are linked at ``level``."""
        if level == Level.ALL:
            return True
        if level == Level.ADJACENT:
            return after.blank_rows_before == 0
        if level == Level.SECTION:
            return not before.is_isolated_comment and not after.is_isolated_comment
        raise ValueError(f"Unknown link level: {level}")

    def _step(self, level: int, forward: bool) -> Block | None:
        other = self._sibling(1 if forward else -1)
        if other is None:
            return None
        before, after = (self, other) if forward else (other, self)
        return other if Block.linked(before, after, level) else None

    def _walk(self, level: int, forward: bool, kind: KindFilter = None):
        kinds = _kind_set(kind)
        block = self._step(level, forward)
        while block is not None:
            if kinds is None or block.kind in kinds:
                yield block
            block = block._step(level, forward)

    def prev(self, level: int = Level.ALL, kind: KindFilter = None) -> Block | None:
        """Previous linked block, or the first previous one of ``kind``."""
        for block in self._walk(level, False, kind):
            return block
        return None

    def next(self, level: int = Level.ALL, kind: KindFilter = None) -> Block | None:
        """Next linked block, or the first following one of ``kind``."""
        for block in self._walk(level, True, kind):
            return block
        return None

    def prev_of_kind(self, level: int, kind: KindFilter) -> Block | None:
        """Walk back along ``level`` to the first block of ``kind``."""
        return self.prev(level, kind)

    def next_of_kind(self, level: int, kind: KindFilter) -> Block | None:
        """Walk forward along ``level`` to the first block of ``kind``."""
        return self.next(level, kind)

    def head(self, level: int = Level.ALL) -> Block:
        """First block of the chain this block belongs to at ``level``."""
        block = self
        prev = block._step(level, False)
        while prev is not None:
            block = prev
            prev = block._step(level, False)
        return block

    def tail(self, level: int = Level.ALL) -> Block:
        """Last block of the chain this block belongs to at ``level``."""
        block = self
        following = block._step(level, True)
        while following is not None:
            block = following
            following = block._step(level, True)
        return block

    def all_prev(self, level: int = Level.ALL, kind: KindFilter = None) -> list[Block]:
        """All blocks before this one on ``level``, nearest first."""
        return list(self._walk(level, False, kind))

    def all_next(self, level: int = Level.ALL, kind: KindFilter = None) -> list[Block]:
        """All blocks after this one on ``level``, nearest first."""
        return list(self._walk(level, True, kind))

    def chain(self, level: int = Level.ALL, kind: KindFilter = None) -> list[Block]:
        """The full chain at ``level`` in document order, this block included."""
        kinds = _kind_set(kind)
        head = self.head(level)
        blocks = [head] + head.all_next(level)
        return [b for b in blocks if kinds is None or b.kind in kinds]


# Kind-specific info builders


def _split_args(arglist: str) -> list[str]:
    arglist = trim(arglist)
    if not arglist:
        return []
    return [trim(arg) for arg in arglist.split(",")]


def _body_of(raw: str, brace: int, starting_row: int) -> tuple[str, int]:
    body = re.sub(r"[ \t]*\}[ \t]*;*[ \t]*$", "", raw[brace + 1:])
    return deindent_block(body), starting_row + raw.count("\n", 0, brace)


def _comment_info(kind: BlockKind, raw: str, starting_row: int) -> CommentInfo:
    rows = raw.split("\n")
    if kind == BlockKind.COMMENT_LINE:
        rows = [re.sub(r"^[ \t]*//", "", row) for row in rows]
    else:
        rows = [re.sub(r"^[ \t]*(/\*+|\*)?", "", re.sub(r"(^[ \t]*)?\*/[ \t]*$", "", row)) for row in rows]
    info = CommentInfo()
    for offset, row in enumerate(rows):
        row = row.rstrip(" \t")
        if _DIRECTIVE_ROW.match(row):
            words = clean(row).split(" ")
            info.directives.append(Directive(words[0][1:], words[1:], starting_row + offset))
            continue
        info.text.append(row)
    return info


def _import_info(raw: str) -> ImportInfo:
    line = clean(raw.replace("\n", " "))
    path_match = re.search(r"[\"']([^\"']+)[\"']", line)
    path = path_match.group(1) if path_match else ""
    module_type = "internal" if re.match(r"^\.{0,2}/", path) else "external"

    if line.startswith("import"):
        spec = trim(line[len("import"):line.rfind(" from ")])
        bindings: list[tuple[str, str | None]] = []
        if spec.startswith("{"):
            for part in spec.strip("{} ").split(","):
                words = part.split(" as ")
                imported = trim(words[0])
                if not imported:
                    continue
                bindings.append((trim(words[-1]), imported))
        elif spec.startswith("*"):
            bindings.append((trim(spec.split(" as ")[-1]), None))
        else:
            bindings.append((spec, "default"))
        name, imported_field = bindings[0] if bindings else ("", None)
        return ImportInfo("import", name, path, imported_field, module_type, bindings)

    left, _, right = line.partition("=")
    words = trim(left).split(" ")
    field_match = re.search(r"\)\.([a-zA-Z0-9_.$]+);?$", right)
    imported_field = field_match.group(1) if field_match else None
    name = words[1] if len(words) > 1 else words[0]
    return ImportInfo(words[0], name, path, imported_field, module_type, [(name, imported_field)])


def _function_info(raw: str, starting_row: int) -> FunctionInfo:
    brace = raw.find("{")
    header = clean(raw[:brace].replace("\n", " "))
    arglist = _ARGLIST.search(header)
    args = _split_args(arglist.group(0)[1:-1]) if arglist else []
    words = clean(_ARGLIST.sub(" ", header).replace("=", " ")).split(" ")
    keyword = words[0] if words[0] in ("const", "var", "let") else "function"
    names = [w for w in words if w not in ("const", "var", "let", "async", "function")]
    name = names[0] if names else ""
    body, body_row = _body_of(raw, brace, starting_row)
    return FunctionInfo(keyword, name, args, body, body_row)


def _variable_info(raw: str) -> VariableInfo:
    left, _, right = raw.partition("=")
    words = clean(left.replace("\n", " ")).split(" ")
    value = clean(right.replace("\n", " "))
    value = re.sub(r";+$", "", value).rstrip()
    return VariableInfo(words[0], words[1] if len(words) > 1 else "", value)


def _class_info(raw: str, starting_row: int) -> ClassInfo:
    brace = raw.find("{")
    header = clean(raw[:brace].replace("\n", " ")).split(" extends ")
    words = header[0].split(" ")
    name = words[1] if len(words) > 1 else ""
    superclass = trim(header[1]) if len(header) == 2 else None
    body, body_row = _body_of(raw, brace, starting_row)
    return ClassInfo(name, superclass, body, body_row)


def _method_info(raw: str, starting_row: int) -> MethodInfo:
    brace = raw.find("{")
    header = clean(raw[:brace].replace("\n", " "))
    arglist = _ARGLIST.search(header)
    args = _split_args(arglist.group(0)[1:-1]) if arglist else []
    words = clean(_ARGLIST.sub(" ", header)).split(" ")
    modifiers = [w for w in words[:-1] if w in _MODIFIERS]
    body, body_row = _body_of(raw, brace, starting_row)
    return MethodInfo(words[-1], args, modifiers, body, body_row)


_FUNCTION_VALUE = re.compile(r"^(async\s+)?(function\s*[a-zA-Z0-9_$]*\s*\(([^()]*)\)|\(([^()]*)\)\s*=>|([a-zA-Z0-9_$]+)\s*=>)\s*\{")


def _assignment_info(raw: str, starting_row: int) -> AssignmentInfo:
    k = raw.find("=")
    target = raw[:k].strip()
    value = re.sub(r";+$", "", raw[k + 1:].strip()).rstrip()
    info = AssignmentInfo(target, value)
    match = _FUNCTION_VALUE.match(value)
    if match is not None:
        arglist = next((g for g in match.groups()[2:] if g is not None), "")
        info.args = _split_args(arglist)
        brace = k + 1 + (len(raw[k + 1:]) - len(raw[k + 1:].lstrip())) + match.end() - 1
        info.body, info.body_row = _body_of(raw, brace, starting_row)
    return info


def build_info(kind: BlockKind, raw: str, starting_row: int = 1) -> BlockInfo:
    """Derive the kind-specific info for a block of raw text."""
    if kind in COMMENT_KINDS:
        return _comment_info(kind, raw, starting_row)
    if kind == BlockKind.REQUIRE:
        return _import_info(raw)
    if kind == BlockKind.FUNCTION:
        return _function_info(raw, starting_row)
    if kind == BlockKind.VARIABLE:
        return _variable_info(raw)
    if kind == BlockKind.CLASS:
        return _class_info(raw, starting_row)
    if kind == BlockKind.METHOD:
        return _method_info(raw, starting_row)
    if kind == BlockKind.ASSIGNMENT:
        return _assignment_info(raw, starting_row)
    return None
