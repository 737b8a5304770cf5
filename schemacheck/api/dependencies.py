"""FastAPI dependency injection for the schemacheck API.

This module provides dependency injection functions for FastAPI endpoints:
the usage oracle backend and the application settings.
"""

from typing import Annotated

from fastapi import Depends, HTTPException

from ..core.config import Settings, get_settings
from ..usage import UsageOracle

# Global oracle instance (set by the application lifespan)
_oracle: UsageOracle | None = None


def set_usage_oracle(oracle: UsageOracle | None) -> None:
    """Set the global usage oracle instance.

    This is called during application startup to inject the oracle backend.
    """
    global _oracle  # noqa: PLW0603
    _oracle = oracle


def get_usage_oracle() -> UsageOracle:
    """FastAPI dependency to get the current usage oracle.

    Raises:
        HTTPException: If the oracle is not initialized
    """
    if _oracle is None:
        raise HTTPException(
            status_code=500,
            detail="Usage oracle not initialized. Check server configuration.",
        )
    return _oracle


def get_usage_oracle_unsafe() -> UsageOracle | None:
    """Get the oracle without raising HTTP exceptions."""
    return _oracle


UsageOracleDep = Annotated[UsageOracle, Depends(get_usage_oracle)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
