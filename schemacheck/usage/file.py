"""File-backed usage oracle.

Reads usage records exported from a telemetry store. The file is YAML or JSON
holding either a list of records or a mapping with a ``records`` list::

    records:
      - coordinate: Query.user
        last_seen: 2024-05-01T12:00:00Z
        count: 1200
        client: web
        tag: production
"""

from collections.abc import Callable
from datetime import datetime
import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError
import yaml

from ..core.logging import get_logger
from .exceptions import UsageDataError
from .memory import InMemoryUsageOracle, _utcnow
from .models import OracleStatus, UsageRecord

logger = get_logger(__name__)


def load_usage_records(path: str | Path) -> list[UsageRecord]:
    """Load usage records from a YAML or JSON file.

    Args:
        path: Path to the usage file

    Returns:
        Parsed usage records

    Raises:
        UsageDataError: If the file is missing, unparseable or malformed
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise UsageDataError(f"Cannot read usage file {file_path}: {e}", e) from e

    try:
        if file_path.suffix.lower() == ".json":
            data: Any = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise UsageDataError(f"Cannot parse usage file {file_path}: {e}", e) from e

    if isinstance(data, dict):
        data = data.get("records", [])
    if data is None:
        data = []
    if not isinstance(data, list):
        raise UsageDataError(f"Usage file {file_path} must contain a list of records")

    records = []
    for index, item in enumerate(data):
        try:
            records.append(UsageRecord.model_validate(item))
        except PydanticValidationError as e:
            raise UsageDataError(
                f"Invalid usage record #{index + 1} in {file_path}: {e}", e
            ) from e

    logger.info("Usage records loaded", path=str(file_path), record_count=len(records))
    return records


class FileUsageOracle(InMemoryUsageOracle):
    """Usage oracle backed by a usage records file, loaded on construction."""

    backend_type = "file"

    def __init__(
        self,
        path: str | Path,
        tag: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.path = Path(path)
        super().__init__(load_usage_records(self.path), tag=tag, clock=clock)

    async def status(self) -> OracleStatus:
        status = await super().status()
        status.source = str(self.path)
        return status
