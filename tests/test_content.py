"""Tests for Content and ContentParser."""

import pytest

from dgen.code.block import Level
from dgen.code.content import Content, ContentParser
from dgen.code.patterns import BlockKind


class TestParsing:
    """Tests for slicing text into blocks."""

    def test_empty_text(self) -> None:
        """Test that empty text gives empty content."""
        content = ContentParser().parse("")
        assert content.block_count == 0
        assert content.first_block is None

    def test_comment_and_declaration(self) -> None:
        """Test a comment directly followed by a declaration."""
        content = ContentParser().parse("// a comment\nconst x = 1;\n")

        assert [b.kind for b in content] == [BlockKind.COMMENT_LINE, BlockKind.VARIABLE]
        comment, variable = content.blocks
        assert comment.text == [" a comment"]
        assert variable.identifier_name == "x"
        assert variable.info.value == "1"
        assert comment.next(Level.ADJACENT) is variable
        assert comment.next(Level.SECTION) is variable

    def test_starting_rows(self) -> None:
        """Test that rows account for blank rows and multi-row blocks."""
        content = ContentParser().parse("// c\n\nconst a = 1;\nfunction f() {\n}\n\nx();")
        rows = [(b.kind, b.starting_row, b.row_count) for b in content]
        assert rows == [
            (BlockKind.COMMENT_LINE, 1, 1),
            (BlockKind.VARIABLE, 3, 1),
            (BlockKind.FUNCTION, 4, 2),
            (BlockKind.UNKNOWN, 7, 1),
        ]

    def test_starting_row_offset(self) -> None:
        """Test parsing text that starts further down in a file."""
        content = ContentParser().parse("\nconst a = 1;", starting_row=10)
        assert content.first_block.starting_row == 11

    def test_blank_rows_around_blocks(self) -> None:
        """Test blank row counts before and after each block."""
        content = ContentParser().parse("\n\n/* doc */\n\nfunction foo(a, b) {}\n")
        comment, function = content.blocks

        assert content.leading_blank_rows == 2
        assert comment.blank_rows_before == 2
        assert comment.blank_rows_after == 1
        assert comment.text == [" doc"]
        assert function.blank_rows_before == 1
        assert function.arguments == ["a", "b"]
        assert comment.next(Level.ADJACENT) is None
        assert comment.next(Level.SECTION) is None
        assert comment.next(Level.ALL) is function

    def test_rows_holding_spaces_are_blank(self) -> None:
        """Test that rows with only spaces and tabs do not become blocks."""
        content = ContentParser().parse("const a = 1;   \n  \t\n\nconst b = 2;\n   ")

        assert [b.identifier_name for b in content] == ["a", "b"]
        assert content.block_at(0).blank_rows_after == 2
        assert content.block_at(1).blank_rows_before == 2

    def test_index_of(self) -> None:
        """Test positions of attached and foreign blocks."""
        content = ContentParser().parse("const a = 1;\nconst b = 2;")
        other = ContentParser().parse("const c = 3;")

        assert content.index_of(content.block_at(1)) == 1
        assert content.index_of(other.block_at(0)) == -1


class TestSourceCoverage:
    """Tests that the blocks and gaps rebuild the parsed text exactly."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "\n\n\n",
            "const a = 1;",
            "// c\n\nconst a = 1;\nfunction f() {\n}\n\nx();",
            "const a = 1;   \n  \t\n\nconst b = 2;\n   ",
            "  \n\n/* open comment",
            "a = {\n  b: 1,\n  c: [1, 2]\n};\nfoo();\n",
            "x" * 1500 + "\nconst a = 1;",
            "class A {\n\tm() {}\n}\n\n\n// end",
            "}}}\n)))\n",
        ],
    )
    def test_source_text_round_trip(self, text: str) -> None:
        """Test that no character is lost or duplicated."""
        content = ContentParser().parse(text)
        assert content.source_text() == text
        assert all(block.raw_text for block in content)


class TestNestedContent:
    """Tests for class and function bodies."""

    def test_class_body_is_parsed(self) -> None:
        """Test that class members are parsed into nested content."""
        content = ContentParser().parse("class A {\n\tstatic make() {}\n\n\t// Run it\n\trun(x) {}\n}")
        cls = content.first_block

        assert cls.content is not None
        assert cls.content.owner is cls
        names = [b.field_name for b in cls.content.blocks_by_kind(BlockKind.METHOD)]
        assert names == ["make", "run"]
        run = cls.content.block_by_field("run")
        assert run.starting_row == 5
        assert run.prev(Level.ADJACENT, BlockKind.COMMENT_LINE).text == [" Run it"]
        assert run.owner_block() is cls

    def test_function_body_is_not_parsed_by_default(self) -> None:
        """Test that function bodies stay unparsed without a parse request."""
        content = ContentParser().parse("function f() {\n\tconst a = 1;\n}")
        assert content.first_block.content is None
        assert content.first_block.body == "\nconst a = 1;\n"

    def test_parse_directive_requests_function_body(self) -> None:
        """Test that a @parse comment makes the parser descend into the body."""
        content = ContentParser().parse("// @parse\nfunction f() {\n\tconst a = 1;\n}")
        function = content.block_at(1)

        assert function.content is not None
        inner = function.content.first_block
        assert inner.identifier_name == "a"
        assert inner.starting_row == 3
        assert inner.namespace_path() == ["f", "a"]

    def test_parse_request_for_function_assignment(self) -> None:
        """Test that function values of assignments can be parsed too."""
        content = ContentParser().parse("// @parse\nexports.run = function (a) {\n\tconst b = a;\n};")
        assignment = content.block_at(1)

        assert assignment.kind == BlockKind.ASSIGNMENT
        assert assignment.arguments == ["a"]
        assert assignment.content.first_block.identifier_name == "b"


class TestContentQueries:
    """Tests for Content lookups."""

    @pytest.fixture
    def content(self) -> Content:
        """Content with a class, a function and variables."""
        return ContentParser().parse(
            "class Store {\n\tget(key) {}\n\tstatic open() {}\n}\n"
            "function load() {}\n"
            "const a = 1;\n"
            "let b = 2;\n"
        )

    def test_blocks_by_kind(self, content: Content) -> None:
        """Test filtering by one kind."""
        names = [b.identifier_name for b in content.blocks_by_kind(BlockKind.VARIABLE)]
        assert names == ["a", "b"]

    def test_blocks_by_variant(self, content: Content) -> None:
        """Test filtering by several kinds."""
        blocks = content.blocks_by_variant([BlockKind.CLASS, BlockKind.FUNCTION])
        assert [b.identifier_name for b in blocks] == ["Store", "load"]

    def test_block_by_path(self, content: Content) -> None:
        """Test dotted path resolution into class members."""
        assert content.block_by_path("load").identifier_name == "load"
        assert content.block_by_path("Store.prototype.get").field_name == "get"
        assert content.block_by_path(["Store", "open"]).field_name == "open"

    def test_block_by_path_misses(self, content: Content) -> None:
        """Test that instance members need prototype and unknown names miss."""
        assert content.block_by_path("Store.get") is None
        assert content.block_by_path("Missing") is None
        assert content.block_by_path("load.inner") is None
        assert content.block_by_path([]) is None

    def test_truncate(self, content: Content) -> None:
        """Test that truncation detaches later blocks and is idempotent."""
        dropped = content.block_at(2)
        content.truncate(2)

        assert content.block_count == 2
        assert dropped.parent is None
        assert content.block_at(1).next(Level.ALL) is None

        content.truncate(5)
        assert content.block_count == 2

    def test_load_replaces_blocks(self, content: Content) -> None:
        """Test reloading content from new text."""
        old = content.first_block
        content.load("const z = 0;")

        assert content.block_count == 1
        assert old.parent is None
