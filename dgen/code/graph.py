"""Link graph between code units.

Anything "above" a unit (prev) is required by it, anything "below" it
(next) uses it.
"""

from __future__ import annotations

import logging

from dgen.code.text import concat_unique, join_paths
from dgen.code.unit import CodeUnit

logger = logging.getLogger(__name__)

# Suffixes tried when an import path names a module without its file.
RESOLVE_SUFFIXES = ("", ".js", "/index.js")


class CodeTree:
    """Owns every unit of a project and the import edges between them."""

    def __init__(self, basepath: str = ".") -> None:
        """Initialize an empty graph.

        Args:
            basepath: Directory unit paths are relative to.
        """
        self.basepath = basepath
        self.units: list[CodeUnit] = []
        self.paths: dict[str, CodeUnit] = {}
        self.main: CodeUnit | None = None

    def __len__(self) -> int:
        return len(self.units)

    def __iter__(self):
        return iter(list(self.units))

    def unit_path(self, unit: CodeUnit) -> str:
        """Normalised path of a unit inside this graph."""
        return join_paths(self.basepath, unit.path or "")

    def _import_paths(self, unit: CodeUnit, path: str) -> list[str]:
        """Candidate paths for every internal import of a unit at ``path``."""
        base = path.rsplit("/", 1)[0] if "/" in path else ""
        ret: list[str] = []
        for obj in unit.imported_objects:
            if not obj.is_internal:
                continue
            for suffix in RESOLVE_SUFFIXES:
                candidate = join_paths(base, obj.path + suffix)
                if candidate not in ret:
                    ret.append(candidate)
        return ret

    def link(self, unit: CodeUnit, is_main: bool = False) -> None:
        """Add a unit and connect it with the units already present.

        Args:
            unit: Unit to add.
            is_main: Mark the unit as the project entry point.
        """
        path = self.unit_path(unit)

        # linked units requiring the new one
        for other_path, other in self.paths.items():
            if path in self._import_paths(other, other_path):
                other.link_prev(unit)
                unit.link_next(other)

        # linked units the new one requires
        for candidate in self._import_paths(unit, path):
            other = self.paths.get(candidate)
            if other is not None and other is not unit:
                other.link_next(unit)
                unit.link_prev(other)

        if path in self.paths:
            logger.warning("Unit path linked twice: %s", path)
        else:
            self.units.append(unit)
        self.paths[path] = unit
        logger.debug("Linked %s (prev=%d, next=%d)", path, len(unit.prev_units), len(unit.next_units))

        if is_main:
            self.main = unit

    def get_unit(self, path: str) -> CodeUnit | None:
        """Look up a unit by path, relative to the base path."""
        return self.paths.get(join_paths(self.basepath, path))

    def find_roots(self) -> list[CodeUnit]:
        """Find the units nothing else depends on.

        Walking backwards (``get_all_prev``) from the returned roots covers
        every unit of the graph. A unit whose forward walk only meets cycles
        is its own root.

        Returns:
            Roots in discovery order.
        """
        ret: list[CodeUnit] = []
        covered: list[CodeUnit] = []
        while len(covered) < len(self.units):
            unit = next(u for u in self.units if u not in covered)
            roots = unit.get_last()
            ret = concat_unique(ret, roots)
            covered = concat_unique(covered, roots, [unit])
            for root in roots:
                covered = concat_unique(covered, root.get_all_prev())
        return ret

    def ordered_units(self) -> list[CodeUnit]:
        """Every unit once: each root followed by the units it requires."""
        ret: list[CodeUnit] = []
        for root in self.find_roots():
            ret = concat_unique(ret, [root], root.get_all_prev())
        return concat_unique(ret, self.units)
