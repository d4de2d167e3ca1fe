"""Code units: one parsed source file and its symbol tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dgen.code.block import Block, ImportInfo
from dgen.code.content import Content, ContentParser
from dgen.code.patterns import BlockKind


@dataclass
class DeclaredClass:
    """A top-level class declaration."""

    name: str
    superclass: str | None = None
    methods: list[dict[str, Any]] = field(default_factory=list)
    keyword: str = "class"


@dataclass
class DeclaredFunction:
    """A top-level function declaration."""

    keyword: str
    name: str
    args: list[str] = field(default_factory=list)


@dataclass
class DeclaredValue:
    """A top-level variable declaration."""

    keyword: str
    name: str
    value: str


@dataclass
class ImportedObject:
    """A name bound to (a field of) an imported module."""

    keyword: str
    name: str
    module_type: str
    path: str
    field: str | None = None

    @property
    def is_internal(self) -> bool:
        """Check if the module path is relative or absolute (a project file)."""
        return self.module_type == "internal"


class CodeUnit:
    """A code unit is one source file.

    Units are linked in a graph by the ``CodeTree``: ``prev`` units are the
    ones this unit requires, ``next`` units are the ones requiring it.
    """

    def __init__(
        self,
        source: str,
        starting_row: int = 1,
        path: str | None = None,
        name: str | None = None,
        description: str | None = None,
    ) -> None:
        """Parse a unit.

        Args:
            source: Source text of the file.
            starting_row: Row number of the first row.
            path: File path, relative to the project base path.
            name: Optional display title.
            description: Optional description overriding the file header.
        """
        self.path = path
        self.name = name
        self.description = description
        self.exported_name: str | None = None
        self.meta: dict[str, Any] = {}
        self.prev_units: list[CodeUnit] = []
        self.next_units: list[CodeUnit] = []
        self.content = Content(owner=self)
        self.load(source, starting_row)

    def __repr__(self) -> str:
        return f"CodeUnit({self.path!r}, blocks={self.content.block_count})"

    def load(self, source: str, starting_row: int = 1) -> None:
        """(Re)parse the source and rebuild every derived table."""
        self.source = source
        self.content.load(source, starting_row)
        self.build_meta()

    def build_meta(self) -> None:
        """Derive declared, imported and exported tables from the blocks."""
        self.declared_classes: list[DeclaredClass] = []
        self.declared_functions: list[DeclaredFunction] = []
        self.declared_values: list[DeclaredValue] = []
        self.imported_objects: list[ImportedObject] = []
        self.exported_objects: list[str] = []
        self.exported_main: str | None = None

        for block in self.content:
            if block.kind == BlockKind.REQUIRE and isinstance(block.info, ImportInfo):
                for name, imported_field in block.info.bindings:
                    self.imported_objects.append(ImportedObject(
                        keyword=block.info.keyword,
                        name=name,
                        module_type=block.info.module_type,
                        path=block.info.path,
                        field=imported_field,
                    ))
            elif block.kind == BlockKind.FUNCTION:
                self.declared_functions.append(DeclaredFunction(
                    keyword=block.identifier_type or "function",
                    name=block.identifier_name or "",
                    args=block.arguments,
                ))
            elif block.kind == BlockKind.CLASS:
                self.declared_classes.append(DeclaredClass(
                    name=block.identifier_name or "",
                    superclass=block.superclass,
                    methods=block.declared_methods,
                ))

        # declarations reading a field of an imported object are imports too,
        # so they need the import table built above
        for block in self.content.blocks_by_kind(BlockKind.VARIABLE):
            value = block.info.value
            self.declared_values.append(DeclaredValue(block.info.keyword, block.info.name, value))
            source = next(
                (obj for obj in self.imported_objects if value.startswith(obj.name + ".")),
                None,
            )
            if source is None:
                continue
            self.imported_objects.append(ImportedObject(
                keyword=block.info.keyword,
                name=block.info.name,
                module_type=source.module_type,
                path=source.path,
                field=value[len(source.name) + 1:],
            ))

        for block in self.content.blocks_by_kind(BlockKind.ASSIGNMENT):
            target = block.info.target
            if not target.startswith("module.exports"):
                continue
            if target == "module.exports":
                self.exported_main = block.info.value
            self.exported_objects.append(block.info.value)

    # Blocks

    @property
    def blocks(self) -> list[Block]:
        """Top-level blocks in document order."""
        return self.content.blocks

    @property
    def first_block(self) -> Block | None:
        """First top-level block."""
        return self.content.first_block

    def blocks_by_kind(self, kind: BlockKind) -> list[Block]:
        """Top-level blocks of one kind."""
        return self.content.blocks_by_kind(kind)

    def blocks_by_variant(self, kinds) -> list[Block]:
        """Top-level blocks whose kind is in ``kinds``."""
        return self.content.blocks_by_variant(kinds)

    def block_by_path(self, path: list[str] | str) -> Block | None:
        """Resolve a dotted path from the top-level content."""
        return self.content.block_by_path(path)

    def parse_body(self, block: Block) -> Content | None:
        """Parse the body of ``block`` into nested content if not done yet.

        Returns:
            The nested content, or None when the block has no body.
        """
        if block.content is None and block.body is not None:
            block.content = ContentParser().parse(block.body, block.body_row, owner=block)
        return block.content

    # Naming

    @property
    def display_name(self) -> str | None:
        """Exported name, else the main exported value, else the file stem."""
        if self.exported_name is not None:
            return self.exported_name
        if self.exported_main is not None:
            return self.exported_main
        if self.path is not None:
            return self.path.split("/")[-1].split(".")[0]
        return None

    def set_meta(self, key: str, value: Any) -> None:
        """Store a unit-level metadata value."""
        self.meta[key] = value

    # Graph

    def link_prev(self, unit: CodeUnit) -> None:
        """Record that this unit requires ``unit``."""
        if unit not in self.prev_units:
            self.prev_units.append(unit)

    def link_next(self, unit: CodeUnit) -> None:
        """Record that ``unit`` requires this unit."""
        if unit not in self.next_units:
            self.next_units.append(unit)

    def get_prev(self) -> list[CodeUnit]:
        """Units directly required by this unit."""
        return list(self.prev_units)

    def get_next(self) -> list[CodeUnit]:
        """Units directly requiring this unit."""
        return list(self.next_units)

    def _closure(self, forward: bool) -> list[CodeUnit]:
        ret: list[CodeUnit] = []
        queue = self.get_next() if forward else self.get_prev()
        while queue:
            unit = queue.pop(0)
            if unit in ret or unit is self:
                continue
            ret.append(unit)
            queue.extend(unit.get_next() if forward else unit.get_prev())
        return ret

    def get_all_prev(self) -> list[CodeUnit]:
        """Every unit reachable through ``prev`` links (breadth first)."""
        return self._closure(forward=False)

    def get_all_next(self) -> list[CodeUnit]:
        """Every unit reachable through ``next`` links (breadth first)."""
        return self._closure(forward=True)

    def _ends(self, forward: bool) -> list[CodeUnit]:
        linked = self.get_next() if forward else self.get_prev()
        if not linked:
            return [self]
        ret: list[CodeUnit] = []
        done: list[CodeUnit] = []
        while linked:
            unit = linked.pop(0)
            if unit in done:
                continue
            done.append(unit)
            following = unit.get_next() if forward else unit.get_prev()
            if following:
                linked.extend(following)
            else:
                ret.append(unit)
        # only cycles reachable: this unit stands in for the missing end
        return ret or [self]

    def get_first(self) -> list[CodeUnit]:
        """Units at the top of the ``prev`` chains (requiring nothing)."""
        return self._ends(forward=False)

    def get_last(self) -> list[CodeUnit]:
        """Units at the end of the ``next`` chains (required by nothing)."""
        return self._ends(forward=True)
