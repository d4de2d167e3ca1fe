"""Tests for the directive engine and handlers."""

import logging

import pytest

from dgen.code.graph import CodeTree
from dgen.code.unit import CodeUnit
from dgen.directives.diagnostics import DirectiveReport, IssueSeverity
from dgen.directives.engine import DirectiveEngine
from dgen.directives.handlers import DirectiveContext


def run_directives(source: str, path: str = "x.js") -> tuple[CodeUnit, DirectiveReport]:
    """Parse a unit and apply its directives."""
    unit = CodeUnit(source, 1, path)
    report = DirectiveEngine().run_unit(unit)
    return unit, report


class TestExport:
    """Tests for @export."""

    def test_export_at_end_of_file_renames_unit(self) -> None:
        """Test that a trailing export names the unit itself."""
        unit, report = run_directives("function foo() {}\n// @export bar")

        assert unit.exported_name == "bar"
        assert unit.display_name == "bar"
        assert report.passed
        assert report.directives_applied == 1

    def test_export_following_block(self) -> None:
        """Test that an export names the next code block."""
        unit, _ = run_directives("// @export run\nfunction start() {}")
        start = unit.block_by_path("start")

        assert start.exported_name == "run"
        assert start.display_name == "run"

    def test_export_is_idempotent(self) -> None:
        """Test that applying exports twice keeps the same names."""
        unit, _ = run_directives("// @export run\nfunction start() {}\n// @export bar")
        report = DirectiveEngine().run_unit(unit)

        assert unit.block_by_path("start").exported_name == "run"
        assert unit.exported_name == "bar"
        assert unit.display_name == "bar"
        assert report.passed

    def test_export_by_path(self) -> None:
        """Test exporting a member through its path."""
        unit, report = run_directives("class A {\n\tgo() {}\n}\n// @export A.prototype.go launch")

        assert unit.block_by_path("A.prototype.go").exported_name == "launch"
        assert report.passed

    def test_export_missing_path(self) -> None:
        """Test that an unresolved path is reported with its location."""
        _, report = run_directives("const a = 1;\n\n// @export Missing.thing name")

        assert report.error_count == 1
        issue = report.issues[0]
        assert issue.message == "No such path in code unit: Missing.thing"
        assert issue.location == "x.js:3"
        assert issue.verb == "export"
        assert issue.severity == IssueSeverity.ERROR

    def test_export_with_placeholders(self) -> None:
        """Test exporting every function registered below the comment."""
        unit, report = run_directives(
            "function first() {}\n"
            "function second() {}\n\n"
            "// @export {value} {target/[a-zA-Z]+$/}\n"
            "module.exports.alpha = first;\n"
            "module.exports.beta = second;\n"
        )

        assert unit.block_by_path("first").exported_name == "alpha"
        assert unit.block_by_path("second").exported_name == "beta"
        assert report.passed


class TestAlias:
    """Tests for @alias."""

    def test_alias_following_block(self) -> None:
        """Test a one-argument alias."""
        unit, _ = run_directives("// @alias begin\nfunction start() {}")
        assert unit.block_by_path("start").aliases == ["begin"]

    def test_alias_is_idempotent(self) -> None:
        """Test that applying directives twice keeps one alias."""
        unit, _ = run_directives("// @alias begin\nfunction start() {}")
        DirectiveEngine().run_unit(unit)

        assert unit.block_by_path("start").aliases == ["begin"]

    def test_alias_at_end_of_file(self) -> None:
        """Test that a one-argument alias needs a code block."""
        _, report = run_directives("const a = 1;\n// @alias nothing")

        assert report.error_count == 1
        assert report.issues[0].message == "alias directive cannot be applied to code unit"

    def test_alias_by_path(self) -> None:
        """Test a two-argument alias."""
        unit, _ = run_directives("class A {\n\tgo() {}\n}\n// @alias A.prototype.go move")
        assert unit.block_by_path("A.prototype.go").aliases == ["move"]

    def test_alias_from_call_arguments(self) -> None:
        """Test placeholders reading call arguments."""
        unit, report = run_directives(
            "function handler() {}\n\n"
            "// @alias {arg[1]} {arg[0]/[a-z]+/}\n"
            'app.start = register("start", handler);\n'
        )

        assert unit.block_by_path("handler").aliases == ["start"]
        assert report.passed

    def test_expansion_without_match(self) -> None:
        """Test that placeholders matching nothing give a warning."""
        _, report = run_directives("// @alias {arg[0]} x\nmodule.exports.a = b;")

        assert report.passed
        assert report.warning_count == 1
        assert report.issues[0].message == "Expression expansion did not find any matching code"

    def test_malformed_placeholder(self) -> None:
        """Test that a malformed placeholder is an error."""
        _, report = run_directives("// @alias {nope} x\nmodule.exports.a = b;")

        assert report.error_count == 1
        assert "Unknown element 'nope'" in report.issues[0].message


class TestAssign:
    """Tests for @assign."""

    SOURCE = "class Store {\n\tget(key) {}\n}\n\nfunction load() {}\n\n"

    def test_assign_field(self) -> None:
        """Test documenting a block as a field of another."""
        unit, report = run_directives(self.SOURCE + "// @assign Store.loader load")
        store = unit.block_by_path("Store")

        assert store.assigned_fields == {"loader": unit.block_by_path("load")}
        assert report.passed

    def test_assign_member_field(self) -> None:
        """Test a field of a member method."""
        unit, _ = run_directives(self.SOURCE + "// @assign Store.prototype.get.cache load")
        store = unit.block_by_path("Store")

        assert list(store.assigned_fields_list()) == ["Store.prototype.get.cache"]

    def test_assign_argument_count(self) -> None:
        """Test that assign needs two arguments."""
        _, report = run_directives(self.SOURCE + "// @assign Store.loader")
        assert report.issues[0].message == "Bad argument count for assign, expected 2, got 1"

    def test_assign_without_field(self) -> None:
        """Test a target path without a field name."""
        _, report = run_directives(self.SOURCE + "// @assign Store load")
        assert report.issues[0].message == "No field name in assign target: Store"


class TestPattern:
    """Tests for @pattern."""

    def test_singleton(self) -> None:
        """Test recording a singleton instance."""
        unit, report = run_directives("class A {}\n// @pattern singleton instance")

        assert unit.meta == {"pattern": "singleton", "exportedInstance": "instance"}
        assert report.passed

    def test_unknown_pattern(self) -> None:
        """Test that other patterns are recorded with a warning."""
        unit, report = run_directives("// @pattern factory")

        assert unit.meta == {"pattern": "factory"}
        assert report.passed
        assert report.warning_count == 1


class TestStopAndParse:
    """Tests for @stop and @parse."""

    def test_stop_truncates(self) -> None:
        """Test that blocks after a stop comment are dropped."""
        unit, _ = run_directives("const a = 1;\n// @stop\nconst b = 2;\nconst c = 3;")

        assert unit.content.block_count == 2
        assert [v.name for v in unit.declared_values] == ["a"]

    def test_stop_twice(self) -> None:
        """Test that applying stop again changes nothing."""
        unit, _ = run_directives("const a = 1;\n// @stop\nconst b = 2;")
        DirectiveEngine().run_unit(unit)

        assert unit.content.block_count == 2

    def test_parse_applies_nested_directives(self) -> None:
        """Test that parse descends into the body of the next block."""
        unit, report = run_directives(
            "// @parse\nfunction outer() {\n\t// @export innerName\n\tfunction inner() {}\n}"
        )
        inner = unit.block_by_path("outer.inner")

        assert inner.exported_name == "innerName"
        assert inner.namespace_path() == ["outer", "innerName"]
        assert report.directives_applied == 2

    def test_parse_bad_target(self) -> None:
        """Test parse before a block without a body."""
        _, report = run_directives("// @parse\nconst x = 1;")
        assert report.issues[0].message == "Bad target (row 2) for parse directive"

    def test_parse_at_end_of_file(self) -> None:
        """Test parse with nothing after it."""
        _, report = run_directives("const x = 1;\n// @parse")
        assert report.issues[0].message == "Bad target (end of file) for parse directive"


class TestEngine:
    """Tests for DirectiveEngine."""

    def test_unknown_directive(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that unknown verbs are reported and logged."""
        with caplog.at_level(logging.WARNING):
            _, report = run_directives("// @frobnicate\nconst x = 1;")

        assert report.issues[0].message == "Unknown directive frobnicate"
        assert report.directives_applied == 0
        assert "Directive error: Unknown directive frobnicate [ x.js:1 ]" in caplog.text

    def test_run_graph(self, linked_graph: CodeTree) -> None:
        """Test that every unit is processed, roots first."""
        report = DirectiveEngine().run(linked_graph)

        assert report.units_processed == ["a.js", "b.js"]
        assert report.passed
        assert report.to_dict()["issues"] == []

    def test_custom_handler(self) -> None:
        """Test registering an extra directive."""
        seen = []

        def note(ctx: DirectiveContext, args: list) -> None:
            seen.append((ctx.target.identifier_name, args))

        unit = CodeUnit("// @note a b\nconst x = 1;", 1, "x.js")
        report = DirectiveEngine(handlers={"note": note}).run_unit(unit)

        assert seen == [("x", ["a", "b"])]
        assert report.passed
