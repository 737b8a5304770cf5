"""Check policy applied on top of a validation result.

The classifier never escalates on its own; whether warnings should fail a
check when no usage data exists at all is a decision for whoever turns the
result into an exit code or a status.
"""

from dataclasses import dataclass

from .errors import Severity, ValidationResult


@dataclass(frozen=True)
class CheckPolicy:
    """How a validation result maps to a pass/fail verdict.

    Attributes:
        fail_warnings_without_usage: Warnings fail the check when no usage
            data exists at all
        strict: Warnings always fail the check
        oracle_has_data: The usage oracle held records when the check ran,
            whether or not any change needed to consult it
    """

    fail_warnings_without_usage: bool = True
    strict: bool = False
    oracle_has_data: bool = False

    def effective_severity(self, result: ValidationResult) -> Severity:
        """Overall severity after escalation."""
        if result.overall_severity == Severity.WARNING and self.escalates(result):
            return Severity.FAILURE
        return result.overall_severity

    def escalates(self, result: ValidationResult) -> bool:
        """Whether warnings in ``result`` count as failures under this policy."""
        if self.strict:
            return True
        has_usage = self.oracle_has_data or result.usage_data_available
        return self.fail_warnings_without_usage and not has_usage

    def passed(self, result: ValidationResult) -> bool:
        """Final verdict; never passes a result the engine marked as failed."""
        return result.passed and self.effective_severity(result) != Severity.FAILURE
