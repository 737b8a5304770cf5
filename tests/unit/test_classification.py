"""Tests for severity classification and result aggregation."""

import pytest

from schemacheck.core import InvalidSchemaError
from schemacheck.diff import ChangeCategory, ChangeCode, ChangeEvent
from schemacheck.usage import UsageAnswer
from schemacheck.validation import (
    ClassifiedChange,
    ResultAggregator,
    Severity,
    SeverityClassifier,
    ValidationResult,
)


def _event(code, path, required_argument=False):
    return ChangeEvent.create(code, path, f"{code.value} at {path}", required_argument)


def _classified(code, path, severity):
    return ClassifiedChange(event=_event(code, path), severity=severity)


class TestSeverity:
    """Test severity ordering."""

    def test_ordering(self):
        """NOTICE < WARNING < FAILURE."""
        assert Severity.NOTICE < Severity.WARNING < Severity.FAILURE
        assert max([Severity.WARNING, Severity.FAILURE, Severity.NOTICE]) == Severity.FAILURE

    def test_string_values(self):
        """Severities serialize as their names."""
        assert Severity.WARNING.value == "WARNING"


class TestSeverityClassifier:
    """Test the classification rules."""

    @pytest.fixture
    def classifier(self):
        return SeverityClassifier()

    @pytest.mark.parametrize(
        "code",
        [
            ChangeCode.TYPE_ADDED,
            ChangeCode.FIELD_ADDED,
            ChangeCode.ARG_ADDED,
            ChangeCode.ENUM_VALUE_ADDED,
            ChangeCode.UNION_MEMBER_ADDED,
        ],
    )
    def test_additions_are_notice(self, classifier, code):
        """Additions are NOTICE and never need usage."""
        event = _event(code, "Query.x")
        assert classifier.needs_usage(event) is False
        assert classifier.classify(event) == Severity.NOTICE

    @pytest.mark.parametrize(
        "code",
        [
            ChangeCode.TYPE_KIND_CHANGED,
            ChangeCode.FIELD_CHANGED_KIND,
            ChangeCode.FIELD_DEPRECATION_ADDED,
            ChangeCode.FIELD_DEPRECATION_REMOVED,
            ChangeCode.ARG_CHANGED_KIND,
            ChangeCode.ARG_DEFAULT_VALUE_CHANGE,
        ],
    )
    def test_updates_are_warning(self, classifier, code):
        """Updates are WARNING regardless of usage."""
        event = _event(code, "Query.x")
        for answer in (None, UsageAnswer.USED, UsageAnswer.UNUSED, UsageAnswer.NO_DATA):
            assert classifier.classify(event, answer) == Severity.WARNING

    def test_required_argument_is_warning(self, classifier):
        """A required argument is WARNING but its field's usage is looked up."""
        event = _event(ChangeCode.ARG_ADDED, "Query.user.tenant", required_argument=True)
        assert event.category == ChangeCategory.UPDATE
        assert classifier.needs_usage(event) is True
        assert classifier.classify(event, UsageAnswer.USED) == Severity.WARNING

    @pytest.mark.parametrize(
        "answer,expected",
        [
            (UsageAnswer.USED, Severity.FAILURE),
            (UsageAnswer.UNUSED, Severity.NOTICE),
            (UsageAnswer.NO_DATA, Severity.FAILURE),
            (None, Severity.FAILURE),
        ],
    )
    def test_removals_depend_on_usage(self, classifier, answer, expected):
        """Only confirmed-unused removals are downgraded."""
        event = _event(ChangeCode.FIELD_REMOVED, "Query.user")
        assert classifier.needs_usage(event) is True
        assert classifier.classify(event, answer) == expected

    def test_invalid_schema_is_failure(self, classifier):
        """INVALID_SCHEMA is always FAILURE and never queried."""
        event = _event(ChangeCode.INVALID_SCHEMA, "new")
        assert classifier.needs_usage(event) is False
        assert classifier.classify(event, UsageAnswer.UNUSED) == Severity.FAILURE

    def test_usage_data_available(self, classifier):
        """Data is available when any answer is not NO_DATA."""
        assert classifier.usage_data_available([]) is False
        assert classifier.usage_data_available([UsageAnswer.NO_DATA]) is False
        assert (
            classifier.usage_data_available([UsageAnswer.NO_DATA, UsageAnswer.UNUSED])
            is True
        )


class TestResultAggregator:
    """Test ordering, deduplication and overall severity."""

    @pytest.fixture
    def aggregator(self):
        return ResultAggregator()

    def test_empty(self, aggregator):
        """No changes is a passing NOTICE result."""
        result = aggregator.aggregate([], usage_data_available=False)
        assert result.changes == ()
        assert result.overall_severity == Severity.NOTICE
        assert result.passed is True

    def test_ordering(self, aggregator):
        """Removals, then updates, then additions, each by path."""
        changes = [
            _classified(ChangeCode.FIELD_ADDED, "A.b", Severity.NOTICE),
            _classified(ChangeCode.FIELD_CHANGED_KIND, "B.a", Severity.WARNING),
            _classified(ChangeCode.FIELD_REMOVED, "Z.z", Severity.FAILURE),
            _classified(ChangeCode.ENUM_VALUE_REMOVED, "C.X", Severity.NOTICE),
            _classified(ChangeCode.TYPE_ADDED, "A", Severity.NOTICE),
        ]

        result = aggregator.aggregate(changes, usage_data_available=True)

        assert [change.path for change in result.changes] == ["C.X", "Z.z", "B.a", "A", "A.b"]
        assert result.overall_severity == Severity.FAILURE
        assert result.passed is False
        assert result.usage_data_available is True

    def test_ties_broken_by_code(self, aggregator):
        """Same category and path order by code."""
        changes = [
            _classified(ChangeCode.FIELD_DEPRECATION_ADDED, "A.b", Severity.WARNING),
            _classified(ChangeCode.FIELD_CHANGED_KIND, "A.b", Severity.WARNING),
        ]
        result = aggregator.aggregate(changes, usage_data_available=False)
        assert [change.code for change in result.changes] == [
            "FIELD_CHANGED_KIND",
            "FIELD_DEPRECATION_ADDED",
        ]

    def test_deduplication_keeps_most_severe(self, aggregator):
        """Duplicate (code, path) pairs collapse to the worst severity."""
        changes = [
            _classified(ChangeCode.FIELD_REMOVED, "Query.user", Severity.NOTICE),
            _classified(ChangeCode.FIELD_REMOVED, "Query.user", Severity.FAILURE),
            _classified(ChangeCode.FIELD_REMOVED, "Query.user", Severity.NOTICE),
        ]
        result = aggregator.aggregate(changes, usage_data_available=True)
        assert len(result.changes) == 1
        assert result.changes[0].severity == Severity.FAILURE

    def test_warning_result_passes(self, aggregator):
        """WARNING overall still passes."""
        changes = [_classified(ChangeCode.FIELD_CHANGED_KIND, "A.b", Severity.WARNING)]
        result = aggregator.aggregate(changes, usage_data_available=False)
        assert result.overall_severity == Severity.WARNING
        assert result.passed is True

    def test_invalid_schema(self, aggregator):
        """An invalid schema yields a single failing INVALID_SCHEMA change."""
        error = InvalidSchemaError("Schema is invalid (1 problem(s))", ["bad field"])

        result = aggregator.invalid_schema(error, which="old")

        assert result.passed is False
        assert result.usage_data_available is False
        assert len(result.changes) == 1
        assert result.changes[0].code == "INVALID_SCHEMA"
        assert result.changes[0].path == "old"
        assert result.schema_errors == ("bad field",)


class TestValidationResult:
    """Test result counters and export."""

    def test_to_dict(self):
        """Plain-data export includes summary counts and changes."""
        result = ValidationResult(
            changes=(
                _classified(ChangeCode.FIELD_REMOVED, "Query.user", Severity.FAILURE),
                _classified(ChangeCode.FIELD_ADDED, "Query.me", Severity.NOTICE),
            ),
            overall_severity=Severity.FAILURE,
            usage_data_available=True,
        )

        data = result.to_dict()

        assert data["passed"] is False
        assert data["overall_severity"] == "FAILURE"
        assert data["summary"] == {"total": 2, "failures": 1, "warnings": 0, "notices": 1}
        assert data["changes"][0]["severity"] == "FAILURE"
        assert data["changes"][0]["code"] == "FIELD_REMOVED"
        assert "schema_errors" not in data

    def test_str(self):
        """The text rendering lists every change."""
        result = ValidationResult(
            changes=(_classified(ChangeCode.FIELD_ADDED, "Query.me", Severity.NOTICE),),
        )
        text = str(result)
        assert text.startswith("✅ Passed")
        assert "NOTICE: FIELD_ADDED Query.me" in text
