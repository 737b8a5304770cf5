"""Usage-informed severity classification of change events."""

from collections.abc import Iterable

from ..diff import ChangeCategory, ChangeCode, ChangeEvent
from ..usage import UsageAnswer
from .errors import Severity


class SeverityClassifier:
    """Maps a change event and the usage oracle's answer to a severity.

    Rules, in priority order:

    * an INVALID_SCHEMA event is always FAILURE
    * additions are NOTICE and never consult usage
    * updates (including adding a required argument) are WARNING
    * removals are NOTICE only when usage data confirms the element is
      unused; USED and NO_DATA are both FAILURE
    """

    def needs_usage(self, event: ChangeEvent) -> bool:
        """Whether the oracle must be asked about this event."""
        if event.code == ChangeCode.INVALID_SCHEMA:
            return False
        if event.category == ChangeCategory.REMOVAL:
            return True
        return event.code == ChangeCode.ARG_ADDED and event.category == ChangeCategory.UPDATE

    def classify(self, event: ChangeEvent, answer: UsageAnswer | None = None) -> Severity:
        """Classify a single event.

        Args:
            event: The change event
            answer: Oracle answer for the event's usage coordinate; None when
                the oracle was not consulted

        Returns:
            The event's severity
        """
        if event.code == ChangeCode.INVALID_SCHEMA:
            return Severity.FAILURE

        if event.category == ChangeCategory.ADDITION:
            return Severity.NOTICE

        if event.category == ChangeCategory.UPDATE:
            return Severity.WARNING

        if answer == UsageAnswer.UNUSED:
            return Severity.NOTICE

        # USED, NO_DATA and a missing answer all fail safe
        return Severity.FAILURE

    @staticmethod
    def usage_data_available(answers: Iterable[UsageAnswer]) -> bool:
        """True when at least one oracle answer carried real data."""
        return any(answer != UsageAnswer.NO_DATA for answer in answers)
