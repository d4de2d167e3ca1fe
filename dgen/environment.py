"""Environment: loads project files, applies directives and writes documentation."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from dgen.code.graph import CodeTree
from dgen.code.text import join_paths
from dgen.code.unit import CodeUnit
from dgen.config import Settings
from dgen.directives.diagnostics import DirectiveReport
from dgen.directives.engine import DirectiveEngine
from dgen.render.generator import GeneratedFile, Generator

logger = logging.getLogger(__name__)


class Environment:
    """Puts the parser, the directive engine and the generator together.

    Unit paths are posix paths relative to ``base_path``.
    """

    def __init__(self, settings: Settings | None = None, base_path: Path | str = "."):
        """Initialize environment.

        Args:
            settings: Project settings, defaults when omitted.
            base_path: Project directory.
        """
        self.settings = settings or Settings()
        self.base_path = Path(base_path)
        self.graph = CodeTree()
        self.engine = DirectiveEngine()
        self.generator = Generator(self.graph, self.settings)
        self.report: DirectiveReport | None = None

    def full_path(self, path: str) -> Path:
        """Absolute location of a project-relative path."""
        return self.base_path / path

    def add_unit(
        self,
        source: str,
        path: str,
        name: str | None = None,
        description: str | None = None,
        is_main: bool = False,
    ) -> CodeUnit:
        """Parse source text and link it into the graph.

        Args:
            source: File content.
            path: Path relative to the project directory.
            name: Optional title for the unit page.
            description: Optional description for the unit page.
            is_main: Mark the unit as the project entry point.

        Returns:
            The new unit.
        """
        unit = CodeUnit(source, 1, join_paths(path), name, description)
        main = self.settings.project.main
        if main and unit.path == join_paths(main):
            is_main = True
        self.graph.link(unit, is_main)
        logger.debug("Added unit %s (%d blocks)", unit.path, unit.content.block_count)
        return unit

    def add_unit_by_path(self, path: str, name: str | None = None, description: str | None = None) -> CodeUnit:
        """Read a project file and add it.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        full_path = self.full_path(path)
        if not full_path.is_file():
            raise FileNotFoundError(f"No such file: {full_path}")
        return self.add_unit(full_path.read_text(encoding="utf-8"), path, name, description)

    def is_file_filtered(self, path: str) -> bool:
        """Check if a file is excluded by the file name filters."""
        filename = path.split("/")[-1]
        project = self.settings.project
        if project.include_only:
            return not any(re.search(pattern, filename) for pattern in project.include_only)
        return any(re.search(pattern, filename) for pattern in project.exclude_files)

    def is_path_filtered(self, path: str) -> bool:
        """Check if a directory is excluded by the path filters.

        A directory matching an include pattern is never excluded.
        """
        project = self.settings.project
        if any(re.search(pattern, path) for pattern in project.include_paths):
            return False
        return any(re.search(pattern, path) for pattern in project.exclude_paths)

    def autoload(self, path: Path | str | None = None, recursive: bool | None = None) -> list[CodeUnit]:
        """Add every source file of the project directory.

        Args:
            path: Project directory; replaces the base path when given.
            recursive: Descend into subdirectories (settings default).

        Returns:
            Units added, in path order.

        Raises:
            FileNotFoundError: If the directory does not exist.
        """
        if path is not None:
            self.base_path = Path(path)
        if not self.base_path.is_dir():
            raise FileNotFoundError(f"Project directory not found: {self.base_path}")
        if recursive is None:
            recursive = self.settings.project.recursive
        units = self._autoload(".", recursive)
        logger.info("Loaded %d units from %s", len(units), self.base_path)
        return units

    def _autoload(self, directory: str, recursive: bool) -> list[CodeUnit]:
        units = []
        for entry in sorted(self.full_path(directory).iterdir()):
            relative = join_paths(directory, entry.name)
            if entry.is_dir():
                if recursive and not self.is_path_filtered(relative):
                    units.extend(self._autoload(relative, recursive))
                continue
            if self.is_file_filtered(relative):
                continue
            units.append(self.add_unit_by_path(relative))
        return units

    def run_directives(self) -> DirectiveReport:
        """Apply directives once; later calls return the first report."""
        if self.report is None:
            self.report = self.engine.run(self.graph)
        return self.report

    def generate(self) -> list[GeneratedFile]:
        """Apply directives and generate the documentation pages."""
        self.run_directives()
        return self.generator.generate()

    def output(self, files: list[GeneratedFile], path: Path | str | None = None) -> list[Path]:
        """Write generated files, creating directories as needed.

        Args:
            files: Files to write.
            path: Output directory, ``paths.output_path`` of the project by default.

        Returns:
            Paths written.
        """
        output_dir = Path(path) if path is not None else self.full_path(self.settings.paths.output_path)
        written = []
        for generated in files:
            target = output_dir / generated.path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(generated.text, encoding="utf-8")
            written.append(target)
        logger.info("Wrote %d files to %s", len(written), output_dir)
        return written

    def document(self, path: Path | str | None = None) -> list[Path]:
        """Generate and write the documentation."""
        return self.output(self.generate(), path)
