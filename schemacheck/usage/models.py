"""Pydantic models for the usage oracle interface.

These models describe usage telemetry records, the answers an oracle gives,
and oracle configuration.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class UsageAnswer(str, Enum):
    """Answer to "has this schema element been used recently?".

    NO_DATA means the oracle holds no telemetry for the schema at all, which
    is different from the element having gone unused.
    """

    USED = "USED"
    UNUSED = "UNUSED"
    NO_DATA = "NO_DATA"


class UsageRecord(BaseModel):
    """Observed use of a schema coordinate by client operations."""

    coordinate: str = Field(description="Schema coordinate, e.g. 'Query.user'")
    last_seen: datetime = Field(description="Most recent time the element was used")
    count: int = Field(default=1, ge=0, description="Number of observed operations")
    client: str | None = Field(default=None, description="Client that issued them")
    tag: str | None = Field(default=None, description="Schema tag the usage was seen on")

    @field_validator("coordinate")
    @classmethod
    def _strip_coordinate(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("coordinate must not be empty")
        return value

    @field_validator("last_seen")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    def covers(self, coordinate: str) -> bool:
        """Whether this record counts as use of ``coordinate``.

        Use of ``User.name`` is also use of the ``User`` type.
        """
        return self.coordinate == coordinate or self.coordinate.startswith(
            f"{coordinate}."
        )


class OracleStatus(BaseModel):
    """Health and content summary of a usage oracle backend."""

    backend_type: str
    record_count: int = Field(ge=0)
    tag: str | None = None
    source: str | None = None
    additional_info: dict[str, Any] = Field(default_factory=dict)


class UsageConfig(BaseModel):
    """Configuration for creating a usage oracle."""

    backend_type: str = Field(default="memory", description="'memory' or 'file'")
    path: str | None = Field(default=None, description="Usage records file")
    tag: str | None = Field(default=None, description="Schema tag to filter on")
