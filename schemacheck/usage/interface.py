"""Abstract usage oracle interface.

The validation engine depends only on this narrow contract; backends may keep
telemetry in any storage engine.
"""

from abc import ABC, abstractmethod
from datetime import timedelta

from .models import OracleStatus, UsageAnswer


class UsageOracle(ABC):
    """Answers whether schema elements have seen real traffic recently."""

    @abstractmethod
    async def has_usage(self, coordinate: str, window: timedelta) -> UsageAnswer:
        """Report whether any operation used ``coordinate`` within ``window``.

        Args:
            coordinate: Schema coordinate such as ``Query.user`` or ``User``
            window: How far back from now usage counts

        Returns:
            USED, UNUSED, or NO_DATA when no telemetry exists at all

        Raises:
            OracleQueryError: If the lookup cannot be answered
        """
        pass

    @abstractmethod
    async def status(self) -> OracleStatus:
        """Describe the backend and how much telemetry it holds."""
        pass
