"""Severity and result data structures for the validation engine.

This module defines how classified changes and the overall outcome of a
schema comparison are represented.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..diff import ChangeCategory, ChangeEvent


class Severity(str, Enum):
    """Risk tier of a change, ordered NOTICE < WARNING < FAILURE."""

    NOTICE = "NOTICE"
    WARNING = "WARNING"
    FAILURE = "FAILURE"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {Severity.NOTICE: 0, Severity.WARNING: 1, Severity.FAILURE: 2}


@dataclass(frozen=True)
class ClassifiedChange:
    """A change event together with the severity assigned to it."""

    event: ChangeEvent
    severity: Severity

    @property
    def code(self) -> str:
        return self.event.code.value

    @property
    def category(self) -> ChangeCategory:
        return self.event.category

    @property
    def path(self) -> str:
        return self.event.path

    def to_dict(self) -> dict[str, str]:
        return {**self.event.to_dict(), "severity": self.severity.value}

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.event}"


@dataclass(frozen=True)
class ValidationResult:
    """Complete outcome of comparing two schema versions.

    ``passed`` is false exactly when the overall severity is FAILURE.
    """

    changes: tuple[ClassifiedChange, ...] = ()
    overall_severity: Severity = Severity.NOTICE
    usage_data_available: bool = False
    schema_errors: tuple[str, ...] = field(default=())

    @property
    def passed(self) -> bool:
        return self.overall_severity != Severity.FAILURE

    @property
    def change_count(self) -> int:
        return len(self.changes)

    def count(self, severity: Severity) -> int:
        """Number of changes classified at ``severity``."""
        return sum(1 for change in self.changes if change.severity == severity)

    @property
    def failure_count(self) -> int:
        return self.count(Severity.FAILURE)

    @property
    def warning_count(self) -> int:
        return self.count(Severity.WARNING)

    @property
    def notice_count(self) -> int:
        return self.count(Severity.NOTICE)

    def to_dict(self) -> dict[str, Any]:
        """Export as plain data for JSON/YAML output and the HTTP API."""
        output: dict[str, Any] = {
            "passed": self.passed,
            "overall_severity": self.overall_severity.value,
            "usage_data_available": self.usage_data_available,
            "summary": {
                "total": self.change_count,
                "failures": self.failure_count,
                "warnings": self.warning_count,
                "notices": self.notice_count,
            },
            "changes": [change.to_dict() for change in self.changes],
        }
        if self.schema_errors:
            output["schema_errors"] = list(self.schema_errors)
        return output

    def __str__(self) -> str:
        status = "✅ Passed" if self.passed else "❌ Failed"
        lines = [
            f"{status} ({self.failure_count} failures, {self.warning_count} warnings, "
            f"{self.notice_count} notices)"
        ]
        for change in self.changes:
            lines.append(f"  - {change}")
        return "\n".join(lines)
