"""Validation engine that runs the schema comparison pipeline.

This module implements the SchemaChangeValidator class, which builds both
schema models, diffs them, consults the usage oracle for risky changes and
aggregates everything into a ValidationResult:

    documents -> SchemaModel x2 -> SchemaDiffer -> SeverityClassifier
    (+ UsageOracle, queried concurrently) -> ResultAggregator
"""

import asyncio
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from ..core import InvalidSchemaError, OperationTimer, SchemaModel, build_schema, get_logger
from ..diff import ChangeEvent, SchemaDiffer
from ..usage import OracleQueryError, UsageAnswer, UsageOracle
from .aggregator import ResultAggregator
from .classifier import SeverityClassifier
from .errors import ClassifiedChange, ValidationResult

logger = get_logger(__name__)

DEFAULT_WINDOW = timedelta(days=30)
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_CONCURRENCY = 16

SchemaDocument = Mapping[str, Any]


class SchemaChangeValidator:
    """Compares two schema versions and classifies every change by risk.

    Usage lookups are the only step with external latency, so they are
    issued concurrently (bounded by ``max_concurrency``) and joined before
    aggregation. A lookup that raises or exceeds ``timeout_seconds`` is
    answered as NO_DATA.
    """

    def __init__(
        self,
        usage_oracle: UsageOracle,
        window: timedelta = DEFAULT_WINDOW,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        """Initialize the validator.

        Args:
            usage_oracle: Source of usage answers for removals
            window: How far back usage counts as current
            timeout_seconds: Timeout for a single usage lookup
            max_concurrency: Maximum usage lookups in flight at once
        """
        self.usage_oracle = usage_oracle
        self.window = window
        self.timeout_seconds = timeout_seconds
        self.max_concurrency = max_concurrency

        self.differ = SchemaDiffer()
        self.classifier = SeverityClassifier()
        self.aggregator = ResultAggregator()

    async def validate(
        self, old_schema: SchemaDocument, new_schema: SchemaDocument
    ) -> ValidationResult:
        """Validate the change from ``old_schema`` to ``new_schema``.

        Args:
            old_schema: Parsed document of the schema consumers rely on
            new_schema: Parsed document of the proposed schema

        Returns:
            The ordered, classified result

        Raises:
            InvalidSchemaError: If either document fails to build a model
        """
        old_model = self._build("old", old_schema)
        new_model = self._build("new", new_schema)
        return await self.validate_models(old_model, new_model)

    async def validate_models(
        self, old_model: SchemaModel, new_model: SchemaModel
    ) -> ValidationResult:
        """Validate two already-built schema models."""
        with OperationTimer(logger, "diff"):
            events = self.differ.diff(old_model, new_model)

        logger.info("Schema changes detected", change_count=len(events))

        answers = await self._query_usage(events)

        classified = [
            ClassifiedChange(
                event=event,
                severity=self.classifier.classify(event, answers.get(index)),
            )
            for index, event in enumerate(events)
        ]

        result = self.aggregator.aggregate(
            classified,
            usage_data_available=self.classifier.usage_data_available(answers.values()),
        )

        logger.info(
            "Schema validation completed",
            passed=result.passed,
            overall_severity=result.overall_severity.value,
            failures=result.failure_count,
            warnings=result.warning_count,
            notices=result.notice_count,
            usage_data_available=result.usage_data_available,
        )
        return result

    async def check(
        self, old_schema: SchemaDocument, new_schema: SchemaDocument
    ) -> ValidationResult:
        """Like validate, but report an invalid schema as a failing result.

        When either document fails to build, no diff is attempted and the
        result holds a single INVALID_SCHEMA failure.
        """
        try:
            old_model = self._build("old", old_schema)
        except InvalidSchemaError as e:
            return self.aggregator.invalid_schema(e, which="old")

        try:
            new_model = self._build("new", new_schema)
        except InvalidSchemaError as e:
            return self.aggregator.invalid_schema(e, which="new")

        return await self.validate_models(old_model, new_model)

    def validate_sync(
        self, old_schema: SchemaDocument, new_schema: SchemaDocument
    ) -> ValidationResult:
        """Synchronous version of validate for callers without an event loop."""
        return asyncio.run(self.validate(old_schema, new_schema))

    def _build(self, which: str, document: SchemaDocument) -> SchemaModel:
        try:
            return build_schema(document)
        except InvalidSchemaError as e:
            logger.info(
                "Schema failed to build",
                schema=which,
                error=str(e),
                problems=e.errors,
            )
            raise

    async def _query_usage(self, events: list[ChangeEvent]) -> dict[int, UsageAnswer]:
        """Ask the oracle about every event that needs it, concurrently."""
        pending = {
            index: event
            for index, event in enumerate(events)
            if self.classifier.needs_usage(event)
        }
        if not pending:
            return {}

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def query(event: ChangeEvent) -> UsageAnswer:
            async with semaphore:
                return await self._query_one(event)

        with OperationTimer(logger, "usage_lookup") as timer:
            timer.log_progress("Querying usage oracle", query_count=len(pending))
            results = await asyncio.gather(*(query(event) for event in pending.values()))

        return dict(zip(pending.keys(), results, strict=True))

    async def _query_one(self, event: ChangeEvent) -> UsageAnswer:
        coordinate = event.usage_coordinate
        try:
            return await asyncio.wait_for(
                self.usage_oracle.has_usage(coordinate, self.window),
                timeout=self.timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "Usage lookup timed out, treating as no data",
                coordinate=coordinate,
                timeout_seconds=self.timeout_seconds,
            )
        except OracleQueryError as e:
            logger.warning(
                "Usage lookup failed, treating as no data",
                coordinate=coordinate,
                error=str(e),
            )
        except Exception as e:
            logger.warning(
                "Usage lookup raised unexpectedly, treating as no data",
                coordinate=coordinate,
                error=str(e),
                exc_info=True,
            )
        return UsageAnswer.NO_DATA

    async def oracle_has_data(self) -> bool:
        """Whether the oracle holds any usage records at all.

        This is independent of the comparison: a change set with no removals
        never queries the oracle, yet usage data may still be loaded.
        An oracle whose status cannot be read counts as holding no data.
        """
        try:
            status = await asyncio.wait_for(
                self.usage_oracle.status(), timeout=self.timeout_seconds
            )
        except Exception as e:
            logger.warning("Usage oracle status unavailable", error=str(e))
            return False
        return status.record_count > 0

    def get_validator_info(self) -> dict[str, Any]:
        """Get information about the validator configuration."""
        return {
            "oracle": type(self.usage_oracle).__name__,
            "window_days": self.window.days,
            "timeout_seconds": self.timeout_seconds,
            "max_concurrency": self.max_concurrency,
        }


async def validate(
    old_schema: SchemaDocument,
    new_schema: SchemaDocument,
    usage_oracle: UsageOracle,
    window: timedelta = DEFAULT_WINDOW,
) -> ValidationResult:
    """Compare two schema documents and classify every change.

    Raises:
        InvalidSchemaError: If either document fails to build a model
    """
    validator = SchemaChangeValidator(usage_oracle, window=window)
    return await validator.validate(old_schema, new_schema)
