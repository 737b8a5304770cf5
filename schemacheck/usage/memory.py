"""In-memory usage oracle.

Holds usage records in a list and answers lookups by scanning them. Used for
tests, for the HTTP service when records are posted directly, and as the base
of the file-backed oracle.
"""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta

from ..core.logging import get_logger
from .interface import UsageOracle
from .models import OracleStatus, UsageAnswer, UsageRecord

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InMemoryUsageOracle(UsageOracle):
    """Usage oracle backed by a list of usage records.

    When ``tag`` is set only records observed against that schema tag are
    considered. An oracle with no (matching) records answers NO_DATA for every
    coordinate.
    """

    backend_type = "memory"

    def __init__(
        self,
        records: Iterable[UsageRecord] = (),
        tag: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.tag = tag
        self.clock = clock
        self.records: list[UsageRecord] = []
        self.add_records(records)

    def add_records(self, records: Iterable[UsageRecord]) -> None:
        """Add records, dropping those observed against a different tag."""
        for record in records:
            if self.tag is None or record.tag == self.tag:
                self.records.append(record)

    async def has_usage(self, coordinate: str, window: timedelta) -> UsageAnswer:
        """Answer from the stored records; see UsageOracle.has_usage."""
        if not self.records:
            return UsageAnswer.NO_DATA

        cutoff = self.clock() - window
        for record in self.records:
            if record.covers(coordinate) and record.last_seen >= cutoff:
                logger.debug(
                    "Usage found",
                    coordinate=coordinate,
                    matched=record.coordinate,
                    client=record.client,
                )
                return UsageAnswer.USED

        return UsageAnswer.UNUSED

    async def status(self) -> OracleStatus:
        return OracleStatus(
            backend_type=self.backend_type,
            record_count=len(self.records),
            tag=self.tag,
            additional_info={
                "clients": sorted({r.client for r in self.records if r.client}),
            },
        )
