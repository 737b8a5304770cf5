"""Request and response models for the check endpoint."""

from typing import Any

from pydantic import BaseModel, Field

from ...usage import UsageRecord


class CheckRequest(BaseModel):
    """Two schema documents to compare."""

    old_schema: dict[str, Any] = Field(description="Schema consumers rely on today")
    new_schema: dict[str, Any] = Field(description="Proposed schema")
    window_days: int | None = Field(
        default=None, ge=1, description="Override the usage window in days"
    )
    usage: list[UsageRecord] | None = Field(
        default=None,
        description="Usage records to classify against instead of the server's oracle",
    )
    strict: bool = Field(default=False, description="Treat warnings as failures")


class ChangeModel(BaseModel):
    """A classified change."""

    code: str
    category: str
    path: str
    description: str
    severity: str


class CheckSummary(BaseModel):
    total: int
    failures: int
    warnings: int
    notices: int


class CheckResponse(BaseModel):
    """Outcome of a schema check.

    ``passed`` is the engine verdict; ``status`` also applies the server's
    check policy (warnings fail when no usage data exists, strict mode).
    """

    status: str
    passed: bool
    overall_severity: str
    usage_data_available: bool
    warnings_escalated: bool
    summary: CheckSummary
    changes: list[ChangeModel]
    schema_errors: list[str] = Field(default_factory=list)
