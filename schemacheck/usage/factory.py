"""Usage oracle factory.

Creates usage oracle backends from configuration.
"""

from ..core.logging import get_logger
from .exceptions import UsageConfigurationError
from .file import FileUsageOracle
from .interface import UsageOracle
from .memory import InMemoryUsageOracle
from .models import UsageConfig

logger = get_logger(__name__)

SUPPORTED_BACKENDS = ("memory", "file")


def create_usage_oracle(config: UsageConfig) -> UsageOracle:
    """Create a usage oracle based on configuration.

    Args:
        config: Usage configuration specifying backend type and settings

    Returns:
        UsageOracle: Configured oracle instance

    Raises:
        UsageConfigurationError: If the backend type is unsupported or config is invalid
        UsageDataError: If the file backend cannot load its records
    """
    validate_usage_config(config)
    backend_type = config.backend_type.lower()

    logger.info("Creating usage oracle", backend_type=backend_type, tag=config.tag)

    if backend_type == "file":
        return FileUsageOracle(config.path or "", tag=config.tag)

    return InMemoryUsageOracle(tag=config.tag)


def validate_usage_config(config: UsageConfig) -> None:
    """Validate usage configuration.

    Raises:
        UsageConfigurationError: If configuration is invalid
    """
    backend_type = config.backend_type.lower()

    if backend_type not in SUPPORTED_BACKENDS:
        raise UsageConfigurationError(
            f"Unsupported usage backend: {config.backend_type}. "
            f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
        )

    if backend_type == "file" and not config.path:
        raise UsageConfigurationError("The file usage backend requires a path")
