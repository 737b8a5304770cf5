"""Health check service layer.

Business logic for health and status reporting, separated from the HTTP
routing layer for testability.
"""

import time
from typing import Any

from ... import __version__
from ...core.config import Settings
from ...usage import OracleStatus, UsageOracle

_app_start_time: float = time.time()


class HealthService:
    """Service class for health check operations."""

    def __init__(self, oracle: UsageOracle, settings: Settings):
        self.oracle = oracle
        self.settings = settings

    async def get_health(self) -> dict[str, Any]:
        """Basic health status, including whether any usage data is loaded.

        A service without usage records still answers checks, but every
        removal will fail, so it reports itself as degraded.
        """
        oracle_status = await self.oracle.status()
        return {
            "status": "healthy" if oracle_status.record_count else "degraded",
            "version": __version__,
            "usage": oracle_status.model_dump(),
        }

    async def get_oracle_status(self) -> OracleStatus:
        return await self.oracle.status()

    async def get_detailed_status(self) -> dict[str, Any]:
        """Detailed status for debugging and monitoring."""
        oracle_status = await self.oracle.status()
        return {
            "api": {
                "name": "schemacheck",
                "version": __version__,
                "environment": self.settings.environment,
                "uptime_seconds": round(time.time() - _app_start_time, 1),
            },
            "usage": oracle_status.model_dump(),
            "policy": {
                "usage_window_days": self.settings.usage_window_days,
                "oracle_timeout_seconds": self.settings.oracle_timeout_seconds,
                "fail_warnings_without_usage": self.settings.fail_warnings_without_usage,
            },
        }
