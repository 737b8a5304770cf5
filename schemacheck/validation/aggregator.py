"""Assembly of classified changes into the final validation result."""

from collections.abc import Iterable

from ..core import InvalidSchemaError
from ..diff import ChangeCategory, ChangeCode, ChangeEvent
from .errors import ClassifiedChange, Severity, ValidationResult

# Riskiest shapes first
CATEGORY_ORDER: dict[ChangeCategory, int] = {
    ChangeCategory.REMOVAL: 0,
    ChangeCategory.UPDATE: 1,
    ChangeCategory.ADDITION: 2,
}


class ResultAggregator:
    """Orders, deduplicates and summarizes classified changes."""

    def aggregate(
        self, changes: Iterable[ClassifiedChange], usage_data_available: bool
    ) -> ValidationResult:
        """Build the result for a completed comparison.

        Changes are deduplicated on ``(code, path)``, keeping the most severe
        classification, then sorted by category group and ascending path.
        """
        unique: dict[tuple[ChangeCode, str], ClassifiedChange] = {}
        for change in changes:
            key = (change.event.code, change.event.path)
            existing = unique.get(key)
            if existing is None or change.severity > existing.severity:
                unique[key] = change

        ordered = sorted(unique.values(), key=self.sort_key)
        overall = max((change.severity for change in ordered), default=Severity.NOTICE)

        return ValidationResult(
            changes=tuple(ordered),
            overall_severity=overall,
            usage_data_available=usage_data_available,
        )

    def invalid_schema(self, error: InvalidSchemaError, which: str = "new") -> ValidationResult:
        """Build the short-circuit result for a schema that failed to construct.

        No diff is attempted; the result holds a single INVALID_SCHEMA failure.
        """
        event = ChangeEvent.create(
            ChangeCode.INVALID_SCHEMA,
            which,
            f"The {which} schema is invalid: {error}",
        )
        return ValidationResult(
            changes=(ClassifiedChange(event=event, severity=Severity.FAILURE),),
            overall_severity=Severity.FAILURE,
            usage_data_available=False,
            schema_errors=tuple(error.errors),
        )

    @staticmethod
    def sort_key(change: ClassifiedChange) -> tuple[int, str, str]:
        return (
            CATEGORY_ORDER[change.event.category],
            change.event.path,
            change.event.code.value,
        )
