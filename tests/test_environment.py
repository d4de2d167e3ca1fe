"""Tests for Environment."""

from pathlib import Path

import pytest

from dgen.config import Settings
from dgen.environment import Environment


class TestLoading:
    """Tests for adding units."""

    def test_autoload(self, project_dir: Path) -> None:
        """Test that filtered files and directories are skipped."""
        env = Environment()
        units = env.autoload(project_dir)

        assert [u.path for u in units] == ["a.js", "b.js", "lib/c.js"]
        assert len(env.graph) == 3

    def test_autoload_not_recursive(self, project_dir: Path) -> None:
        """Test loading only the top directory."""
        units = Environment().autoload(project_dir, recursive=False)
        assert [u.path for u in units] == ["a.js", "b.js"]

    def test_autoload_missing_directory(self, temp_dir: Path) -> None:
        """Test that a missing project directory raises."""
        with pytest.raises(FileNotFoundError):
            Environment().autoload(temp_dir / "missing")

    def test_include_paths_override_excludes(self, project_dir: Path) -> None:
        """Test forcing an excluded directory back in."""
        settings = Settings.from_dict({"project": {"includePaths": ["node_modules"]}})
        units = Environment(settings).autoload(project_dir)

        assert "node_modules/dep.js" in [u.path for u in units]

    def test_file_filters(self) -> None:
        """Test include-only and exclude file patterns."""
        env = Environment()
        assert not env.is_file_filtered("src/app.js")
        assert not env.is_file_filtered("src/app.mjs")
        assert env.is_file_filtered("README.md")

        settings = Settings.from_dict({"project": {"includeOnly": [], "excludeFiles": [r"\.min\.js$"]}})
        env = Environment(settings)
        assert env.is_file_filtered("lib/app.min.js")
        assert not env.is_file_filtered("README.md")

    def test_path_filters(self) -> None:
        """Test the default excluded directories."""
        env = Environment()
        assert env.is_path_filtered("node_modules")
        assert env.is_path_filtered("lib/node_modules")
        assert env.is_path_filtered(".git")
        assert not env.is_path_filtered("lib")

    def test_add_unit_by_path_missing(self, temp_dir: Path) -> None:
        """Test adding a file that does not exist."""
        with pytest.raises(FileNotFoundError):
            Environment(base_path=temp_dir).add_unit_by_path("nope.js")

    def test_main_unit_from_settings(self) -> None:
        """Test that project.main marks the entry point."""
        env = Environment(Settings.from_dict({"project": {"main": "./index.js"}}))
        unit = env.add_unit("", "index.js")
        env.add_unit("", "other.js")

        assert env.graph.main is unit

    def test_links_units(self, project_dir: Path) -> None:
        """Test that loaded units are linked by their imports."""
        env = Environment()
        env.autoload(project_dir)
        entry = env.graph.get_unit("a.js")

        assert entry.get_prev() == [env.graph.get_unit("b.js")]
        assert env.graph.find_roots() == [entry, env.graph.get_unit("lib/c.js")]


class TestDocumentation:
    """Tests for generating and writing pages."""

    def test_document(self, project_dir: Path) -> None:
        """Test writing every page to the output directory."""
        env = Environment()
        env.autoload(project_dir)
        written = env.document()

        output = project_dir / "docs"
        assert sorted(p.relative_to(output).as_posix() for p in written) == [
            "code/a.rst",
            "code/b.rst",
            "code/lib/c.rst",
            "index.rst",
        ]
        assert "Application entry (a.js)" in (output / "code" / "a.rst").read_text()
        assert env.report is not None and env.report.passed

    def test_output_directory(self, project_dir: Path, temp_dir: Path) -> None:
        """Test writing to an explicit directory."""
        env = Environment()
        env.autoload(project_dir)
        target = temp_dir / "out"
        env.document(target)

        assert (target / "index.rst").exists()

    def test_directives_run_once(self) -> None:
        """Test that the report of the first run is reused."""
        env = Environment()
        env.add_unit("// @frobnicate\nconst a = 1;", "a.js")

        first = env.run_directives()
        env.generate()
        assert env.run_directives() is first
        assert first.error_count == 1
