"""Usage telemetry lookups for schema change classification.

This package defines the usage oracle contract consumed by the validation
engine together with in-memory and file-backed implementations.
"""

from .exceptions import (
    OracleQueryError,
    UsageConfigurationError,
    UsageDataError,
    UsageError,
)
from .factory import create_usage_oracle, validate_usage_config
from .file import FileUsageOracle, load_usage_records
from .interface import UsageOracle
from .memory import InMemoryUsageOracle
from .models import OracleStatus, UsageAnswer, UsageConfig, UsageRecord

__all__ = [
    "FileUsageOracle",
    "InMemoryUsageOracle",
    "OracleQueryError",
    "OracleStatus",
    "UsageAnswer",
    "UsageConfig",
    "UsageConfigurationError",
    "UsageDataError",
    "UsageError",
    "UsageOracle",
    "UsageRecord",
    "create_usage_oracle",
    "load_usage_records",
    "validate_usage_config",
]
