"""Tests for the command line interface."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from dgen import __version__
from dgen.cli.main import cli
from dgen.config import SETTINGS_FILE, load_settings


@pytest.fixture
def runner() -> CliRunner:
    """Click test runner."""
    return CliRunner()


class TestConfigCommands:
    """Tests for dgen config."""

    def test_default(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test writing the default settings file."""
        result = runner.invoke(cli, ["config", "default", "--project-dir", str(temp_dir)])

        assert result.exit_code == 0
        assert "Default settings written to" in result.output
        assert (temp_dir / SETTINGS_FILE).exists()

    def test_default_refuses_overwrite(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test that an existing file needs --force."""
        runner.invoke(cli, ["config", "default", "--project-dir", str(temp_dir)])
        result = runner.invoke(cli, ["config", "default", "--project-dir", str(temp_dir)])
        assert result.exit_code == 1

        result = runner.invoke(cli, ["config", "default", "--project-dir", str(temp_dir), "--force"])
        assert result.exit_code == 0

    def test_get(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test reading a value."""
        result = runner.invoke(cli, ["config", "get", "output.maxColumns", "--project-dir", str(temp_dir)])

        assert result.exit_code == 0
        assert "output.maxColumns: 120" in result.output

    def test_get_section(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test reading a whole section."""
        result = runner.invoke(cli, ["config", "get", "paths", "--project-dir", str(temp_dir)])

        assert result.exit_code == 0
        assert "output_path: docs" in result.output

    def test_get_unknown_key(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test reading a key that does not exist."""
        result = runner.invoke(cli, ["config", "get", "nope", "--project-dir", str(temp_dir)])

        assert result.exit_code == 1
        assert "No such key in config file: nope" in result.output

    def test_set(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test changing a value in the settings file."""
        result = runner.invoke(
            cli, ["config", "set", "output.maxColumns", "100", "--project-dir", str(temp_dir)]
        )

        assert result.exit_code == 0
        assert load_settings(temp_dir / SETTINGS_FILE).output.max_columns == 100

    def test_set_bad_value(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test that a wrongly typed value is rejected."""
        result = runner.invoke(
            cli, ["config", "set", "output.maxColumns", "wide", "--project-dir", str(temp_dir)]
        )

        assert result.exit_code == 1
        assert not (temp_dir / SETTINGS_FILE).exists()

    def test_malformed_settings_file(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test that a broken settings file is reported."""
        (temp_dir / SETTINGS_FILE).write_text("output: [unclosed\n")
        result = runner.invoke(cli, ["config", "get", "--project-dir", str(temp_dir)])

        assert result.exit_code == 1


class TestDocumentCommand:
    """Tests for dgen document."""

    def test_document(self, runner: CliRunner, project_dir: Path) -> None:
        """Test generating the documentation of a project."""
        result = runner.invoke(cli, ["document", str(project_dir)])

        assert result.exit_code == 0
        assert "RST documentation written to" in result.output
        assert (project_dir / "docs" / "index.rst").exists()
        assert (project_dir / "docs" / "code" / "lib" / "c.rst").exists()

    def test_document_output_option(self, runner: CliRunner, project_dir: Path, temp_dir: Path) -> None:
        """Test the output directory option."""
        target = temp_dir / "site"
        result = runner.invoke(cli, ["document", str(project_dir), "-o", str(target)])

        assert result.exit_code == 0
        assert (target / "code" / "a.rst").exists()

    def test_document_missing_project(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test a project directory that does not exist."""
        result = runner.invoke(cli, ["document", str(temp_dir / "missing")])
        assert result.exit_code == 1

    def test_document_reports_directive_issues(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test the issue table and the strict flag."""
        (temp_dir / "a.js").write_text("// @frobnicate\nconst a = 1;\n")

        result = runner.invoke(cli, ["document", str(temp_dir)])
        assert result.exit_code == 0
        assert "Directive Issues" in result.output

        result = runner.invoke(cli, ["document", str(temp_dir), "--strict"])
        assert result.exit_code == 1

    def test_document_empty_project(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test a directory without source files."""
        result = runner.invoke(cli, ["document", str(temp_dir)])

        assert result.exit_code == 0
        assert "No source files found" in result.output


class TestInspectCommands:
    """Tests for dgen blocks and dgen roots."""

    def test_blocks(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test listing the blocks of a file."""
        source = temp_dir / "go.js"
        source.write_text("// Start\nfunction go() {}\n")
        result = runner.invoke(cli, ["blocks", str(source)])

        assert result.exit_code == 0
        assert "2 blocks, 1 functions, 0 classes, 0 imports" in result.output

    def test_blocks_missing_file(self, runner: CliRunner, temp_dir: Path) -> None:
        """Test that click rejects a missing file."""
        result = runner.invoke(cli, ["blocks", str(temp_dir / "nope.js")])
        assert result.exit_code == 2

    def test_roots(self, runner: CliRunner, project_dir: Path) -> None:
        """Test the tree of roots and required units."""
        result = runner.invoke(cli, ["roots", str(project_dir)])

        assert result.exit_code == 0
        assert "a.js" in result.output
        assert "b.js" in result.output
        assert "lib/c.js" in result.output


class TestMain:
    """Tests for the command group."""

    def test_version(self, runner: CliRunner) -> None:
        """Test the version option."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        """Test that every command is registered."""
        result = runner.invoke(cli, ["--help"])

        for command in ("config", "document", "blocks", "roots"):
            assert command in result.output
