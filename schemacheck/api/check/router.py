"""Schema check router.

Exposes the validation pipeline over HTTP for CI systems that cannot run the
command line directly.
"""

from datetime import timedelta

from fastapi import APIRouter

from ...core import get_logger
from ...usage import InMemoryUsageOracle, UsageOracle
from ...validation import CheckPolicy, SchemaChangeValidator
from ..dependencies import SettingsDep, UsageOracleDep
from .models import CheckRequest, CheckResponse

router = APIRouter()
logger = get_logger(__name__)


@router.post("/check", response_model=CheckResponse)
async def check_schema(
    request: CheckRequest, oracle: UsageOracleDep, settings: SettingsDep
) -> CheckResponse:
    """Compare two schema documents and classify every change.

    An invalid schema is reported as a failing result holding a single
    INVALID_SCHEMA change, not as an HTTP error.
    """
    usage_oracle: UsageOracle = oracle
    if request.usage is not None:
        usage_oracle = InMemoryUsageOracle(request.usage, tag=settings.usage_tag)

    validator = SchemaChangeValidator(
        usage_oracle,
        window=timedelta(days=request.window_days or settings.usage_window_days),
        timeout_seconds=settings.oracle_timeout_seconds,
        max_concurrency=settings.max_concurrent_queries,
    )
    result = await validator.check(request.old_schema, request.new_schema)

    policy = CheckPolicy(
        fail_warnings_without_usage=settings.fail_warnings_without_usage,
        strict=request.strict,
        oracle_has_data=await validator.oracle_has_data(),
    )
    passed = policy.passed(result)
    logger.info("Check request completed", passed=passed, changes=result.change_count)

    return CheckResponse(
        status="passed" if passed else "failed",
        warnings_escalated=policy.escalates(result) and result.warning_count > 0,
        **result.to_dict(),
    )
