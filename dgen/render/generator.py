"""Documentation generator.

Turns the units of a graph into reStructuredText pages, one per source file:
a header from the file's first comment, then classes, exported and internal
functions, and variable declarations grouped under title comments.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field

from dgen.code.block import COMMENT_KINDS, Block, Level
from dgen.code.content import Content
from dgen.code.graph import CodeTree
from dgen.code.patterns import BlockKind
from dgen.code.sections import CommentSection, comment_sections
from dgen.code.unit import CodeUnit
from dgen.config import Settings
from dgen.render.text import TextElement, list_style, to_rows

logger = logging.getLogger(__name__)


@dataclass
class GeneratedFile:
    """A generated documentation page."""

    path: str
    rows: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        """File content."""
        return "\n".join(self.rows) + "\n"


@dataclass
class VariableGroup:
    """Variable declarations sharing a title comment."""

    title: Block | None = None
    variables: list[tuple[Block, Block | None]] = field(default_factory=list)


def exported_names(unit: CodeUnit) -> list[str]:
    """Names exported by a unit, ``module.exports = { a, b: c }`` included."""
    names: list[str] = []
    for value in unit.exported_objects:
        value = value.strip()
        if value.startswith("{") and value.endswith("}"):
            for part in value[1:-1].split(","):
                name = part.split(":")[-1].strip()
                if name:
                    names.append(name)
        else:
            names.append(value)
    return names


class Generator:
    """Generates documentation pages for the units of a graph."""

    def __init__(self, graph: CodeTree, settings: Settings | None = None):
        """Initialize generator.

        Args:
            graph: Linked graph; directives should already be applied.
            settings: Output settings, defaults when omitted.
        """
        self.graph = graph
        self.settings = settings or Settings()

    # Comments

    def sections_to_text(self, sections: list[CommentSection]) -> list[TextElement]:
        """Convert comment sections to paragraphs, literal blocks and bullets."""
        text: list[TextElement] = []
        for section in sections:
            if section.format == "block":
                text.append(TextElement("code", section.text))
            else:
                text.append(TextElement("p", section.text))
            text.extend(self._bullets(section.items, 1))
        return text

    def _bullets(self, items, depth: int) -> list[TextElement]:
        text: list[TextElement] = []
        for item in items:
            if isinstance(item, CommentSection):
                text.append(TextElement(list_style(depth), item.text))
                text.extend(self._bullets(item.items, depth + 1))
            else:
                text.append(TextElement(list_style(depth), item))
        return text

    def comment_to_text(self, comment: Block) -> list[TextElement]:
        """Convert a comment block to text elements."""
        return self.sections_to_text(comment_sections(comment))

    def is_title_comment(self, block: Block | None) -> bool:
        """Check if a comment is a short decorated title, e.g. a boxed one-liner."""
        if block is None or not block.is_comment:
            return False
        rows = block.trimmed_row_count
        if rows == 0 or rows > self.settings.code.section_title_max_rows:
            return False
        return rows != block.row_count

    # Pieces

    def file_header(self, unit: CodeUnit, depth: int = 1) -> list[TextElement]:
        """Title, description and introduction of a file."""
        code = self.settings.code
        first = unit.first_block
        title = unit.path or ""
        description = None
        intro: list[CommentSection] = []

        if code.file_headers and first is not None and first.is_comment:
            sections = comment_sections(first)
            if (code.file_title and sections and sections[0].bullet is None
                    and sections[0].row_count <= code.file_title_max_rows):
                title = f"{sections.pop(0).text} ({unit.path})"
            if (code.file_description and sections and sections[0].bullet is None
                    and sections[0].row_count <= code.file_description_max_rows):
                description = sections.pop(0).text
            intro = sections

        if unit.name:
            title = f"{unit.name} ({unit.path})"
        if unit.description:
            description = unit.description

        text = [TextElement(f"h{depth}", title), TextElement("b", description)]
        text.extend(self.sections_to_text(intro))

        block = first.next(Level.ALL) if first is not None else None
        while block is not None and block.is_comment and block.next(Level.ADJACENT) is None:
            text.extend(self.comment_to_text(block))
            block = block.next(Level.ALL)
        return text

    def function_documentation(
        self,
        block: Block,
        comment: Block | None,
        depth: int,
        kind: str = "function",
        exported: bool = False,
    ) -> list[TextElement]:
        """Documentation of a function, method or constructor."""
        args = ", ".join(block.arguments)
        if kind == "constructor":
            name = "Constructor"
        elif kind == "method":
            path = block.namespace_path()
            member = path.pop() if path else (block.display_name or "")
            name = ".".join([*path, "prototype", member]) + f" ({args})"
        elif exported:
            name = ".".join(block.namespace_path()) + f" ({args})"
        else:
            name = f"{block.identifier_name} ({args})"

        text = [TextElement(f"h{depth}", name)]
        if comment is not None:
            text.extend(self.comment_to_text(comment))
        else:
            text.append(TextElement("b", "Arguments"))
            if block.arguments:
                text.extend(TextElement("l", f"`{arg}`") for arg in block.arguments)
            else:
                text.append(TextElement("p", f"This {kind} does not take any arguments"))
        if block.aliases:
            text.append(TextElement("p", "Also known as: " + ", ".join(f"``{a}``" for a in block.aliases)))
        return text

    def class_documentation(
        self, block: Block, comment: Block | None, depth: int, exported: bool = False
    ) -> list[TextElement]:
        """Documentation of a class: base class, constructor and member methods."""
        scope = "exported class" if exported else "internal only"
        text = [
            TextElement(f"h{depth}", f"class {block.display_name} ({scope})"),
            TextElement("p", f"**Base class:** {block.superclass or 'Object'}"),
        ]
        if comment is not None:
            text.extend(self.comment_to_text(comment))

        members = block.content if block.content is not None else Content()
        constructor = members.block_by_field("constructor")
        if constructor is not None:
            text.extend(self.function_documentation(
                constructor, constructor.prev(Level.ADJACENT, COMMENT_KINDS), depth + 1, "constructor"))

        text.append(TextElement(f"h{depth + 1}", "Member methods"))
        methods: list[TextElement] = []
        for method in members.blocks_by_kind(BlockKind.METHOD):
            if method is constructor:
                continue
            methods.extend(self.function_documentation(
                method, method.prev(Level.ADJACENT, COMMENT_KINDS), depth + 2, "method"))
        if methods:
            text.append(TextElement("p", "This class defines the following member methods"))
            text.extend(methods)
        else:
            text.append(TextElement("p", "This class does not define any member methods"))

        for name, value in block.assigned_fields.items():
            shown = value.display_name if isinstance(value, Block) else str(value)
            text.append(TextElement("l", f"``{name}``: {shown}"))
        return text

    def group_variables(self, content: Content) -> list[VariableGroup]:
        """Group top-level variable declarations under their title comments.

        Variables without a title comment share one group, placed last.
        """
        groups: list[VariableGroup] = []
        untitled: VariableGroup | None = None
        first = content.first_block
        if first is None:
            return groups
        current = first if first.kind == BlockKind.VARIABLE else first.next(Level.ALL, BlockKind.VARIABLE)

        while current is not None:
            title = current.prev(Level.ALL)
            if title is not None and title.is_comment and self.is_title_comment(title.prev(Level.ALL)):
                title = title.prev(Level.ALL)
            elif not self.is_title_comment(title):
                title = None

            if title is None:
                if untitled is None:
                    untitled = VariableGroup()
                group = untitled
            else:
                group = VariableGroup(title)
                groups.append(group)

            while current is not None and current.kind == BlockKind.VARIABLE:
                comment = current.prev(Level.ADJACENT)
                if comment is not None and (not comment.is_comment or comment is title):
                    comment = None
                group.variables.append((current, comment))
                current = current.next(Level.ALL)
                while current is not None and current.is_comment and not self.is_title_comment(current):
                    current = current.next(Level.ALL)

            if current is not None:
                current = current.next(Level.ALL, BlockKind.VARIABLE)

        if untitled is not None:
            groups.append(untitled)
        return groups

    def variable_group_documentation(
        self, group: VariableGroup, depth: int, group_count: int, exported: list[str]
    ) -> list[TextElement]:
        """Documentation of one variable group."""
        text: list[TextElement] = []
        if group.title is not None:
            text.append(TextElement(f"h{depth}", group.title.compact_text))
            depth += 1
        elif group_count > 1:
            text.append(TextElement(f"h{depth}", "Other Declared Variables"))
            depth += 1

        for block, comment in group.variables:
            text.append(TextElement(f"h{depth}", f"{block.identifier_type} {block.identifier_name}"))
            if comment is not None:
                text.append(TextElement("p", comment.compact_text))
            if block.identifier_name in exported:
                text.append(TextElement("l1", "exported as " + ".".join(block.namespace_path())))
            else:
                text.append(TextElement("l1", "not exported"))
            text.append(TextElement("l1", f"initial value: ``{block.info.value}``"))
        return text

    # Pages

    def code_documentation(self, unit: CodeUnit, depth: int = 1) -> list[TextElement]:
        """All text elements of one unit page."""
        text = self.file_header(unit, depth)
        exported = exported_names(unit)
        classes: list[TextElement] = []
        internal_classes: list[TextElement] = []
        functions: list[TextElement] = []
        internal_functions: list[TextElement] = []

        for block in unit.blocks:
            comment = block.prev(Level.ADJACENT, COMMENT_KINDS)
            is_exported = block.identifier_name in exported
            if block.kind == BlockKind.CLASS:
                target = classes if is_exported else internal_classes
                target.extend(self.class_documentation(block, comment, depth + 1, is_exported))
            elif block.kind == BlockKind.FUNCTION:
                target = functions if is_exported else internal_functions
                target.extend(self.function_documentation(block, comment, depth + 2, exported=is_exported))

        text.extend(classes)
        text.extend(internal_classes)
        if functions:
            text.append(TextElement(f"h{depth + 1}", "Exported Functions"))
            text.extend(functions)
        if internal_functions:
            text.append(TextElement(f"h{depth + 1}", "Internal Functions"))
            text.extend(internal_functions)

        groups = self.group_variables(unit.content)
        if groups:
            text.append(TextElement(f"h{depth + 1}", "Variable Declarations"))
            for group in groups:
                text.extend(self.variable_group_documentation(group, depth + 2, len(groups), exported))
        return text

    def page_path(self, unit: CodeUnit) -> str:
        """Output path of a unit page, relative to the output directory."""
        stem = posixpath.splitext(unit.path or "unit")[0]
        return posixpath.join(self.settings.paths.base_code_path, stem + ".rst")

    def generate_files(self, depth: int = 1) -> list[GeneratedFile]:
        """One page per unit, roots first, then the units they require."""
        files = []
        for unit in self.graph.ordered_units():
            rows = to_rows(self.code_documentation(unit, depth), self.settings.output)
            files.append(GeneratedFile(self.page_path(unit), rows))
            logger.debug("Generated %s (%d rows)", unit.path, len(rows))
        return files

    def generate_index(self, files: list[GeneratedFile]) -> GeneratedFile:
        """``index.rst`` with a table of contents of the generated pages."""
        project = self.settings.project
        title = project.name or "Documentation"
        text = [TextElement("h1", title)]
        if project.version:
            text.append(TextElement("b", f"Version {project.version}"))
        if project.author:
            text.append(TextElement("p", f"Author: {project.author}"))
        rows = to_rows(text, self.settings.output)
        rows += ["", ".. toctree::", "   :maxdepth: 2", ""]
        rows += ["   " + posixpath.splitext(f.path)[0] for f in files]
        return GeneratedFile("index.rst", rows)

    def generate(self, depth: int = 1) -> list[GeneratedFile]:
        """Every page, plus the index when enabled."""
        files = self.generate_files(depth)
        if self.settings.structure.generate_index:
            files.append(self.generate_index(files))
        return files
