"""Directive diagnostics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class IssueSeverity(Enum):
    """Severity of directive issues."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class DirectiveIssue:
    """A problem found while applying one directive."""

    severity: IssueSeverity
    message: str
    unit_path: str | None = None
    row: int | None = None
    verb: str | None = None

    @property
    def location(self) -> str:
        """``path:row`` of the comment holding the directive."""
        return f"{self.unit_path}:{self.row}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "severity": self.severity.value,
            "message": self.message,
            "unit_path": self.unit_path,
            "row": self.row,
            "verb": self.verb,
        }


@dataclass
class DirectiveReport:
    """Issues collected by one directive pass."""

    issues: list[DirectiveIssue] = field(default_factory=list)
    units_processed: list[str] = field(default_factory=list)
    directives_applied: int = 0

    def add(
        self,
        message: str,
        unit_path: str | None,
        row: int | None,
        verb: str | None = None,
        severity: IssueSeverity = IssueSeverity.ERROR,
    ) -> DirectiveIssue:
        """Record an issue and log it.

        Args:
            message: What went wrong.
            unit_path: Path of the unit holding the directive.
            row: Starting row of the comment holding the directive.
            verb: Directive verb, when known.
            severity: Issue severity.

        Returns:
            The recorded issue.
        """
        issue = DirectiveIssue(severity, message, unit_path, row, verb)
        self.issues.append(issue)
        logger.warning("Directive error: %s [ %s ]", message, issue.location)
        return issue

    @property
    def error_count(self) -> int:
        """Count of errors."""
        return sum(1 for i in self.issues if i.severity == IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        """Count of warnings."""
        return sum(1 for i in self.issues if i.severity == IssueSeverity.WARNING)

    @property
    def passed(self) -> bool:
        """Check if every directive applied cleanly (no errors)."""
        return self.error_count == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "passed": self.passed,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "directives_applied": self.directives_applied,
            "units_processed": self.units_processed,
            "issues": [i.to_dict() for i in self.issues],
        }
