"""
Insights Router
Generates AI spending advice from the caller's expenses
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.errors import AppError, ErrorKind
from app.core.security import get_current_user_id
from app.db import dynamo
from app.models.expense import utc_now_iso
from app.models.insights import InsightsRequest, InsightsResponse
from app.utils.gemini import GeminiInsights
from app.utils.retry import retry_with_backoff
from app.utils.validation import (
    first_validation_error,
    has_validation_errors,
    validate_expense_input,
)

router = APIRouter()
logger = logging.getLogger(__name__)
gemini_insights = GeminiInsights()


def get_insights_service() -> GeminiInsights:
    return gemini_insights


@router.post("", response_model=InsightsResponse)
async def generate_insights(
    request: InsightsRequest,
    user_id: str = Depends(get_current_user_id),
    service: GeminiInsights = Depends(get_insights_service),
):
    expenses = request.expenses
    if not expenses:
        raise AppError(
            ErrorKind.VALIDATION, "Expense data is required and must be a non-empty array"
        )

    if any(exp.get("user_id") != user_id for exp in expenses):
        raise AppError(
            ErrorKind.AUTHORIZATION, "You can only generate insights for your own expenses"
        )

    # Malformed records must fail here, not inside the retried AI call
    for exp in expenses:
        errors = validate_expense_input(exp)
        if has_validation_errors(errors):
            raise AppError(ErrorKind.VALIDATION, first_validation_error(errors), details=errors)

    profile = await run_in_threadpool(dynamo.get_profile, user_id)
    currency = (profile or {}).get("preferred_currency") or settings.DEFAULT_CURRENCY

    logger.info(f"Generating insights for user {user_id} from {len(expenses)} expenses")
    insights = await retry_with_backoff(
        lambda: service.get_spending_insights(expenses, currency),
        max_retries=settings.AI_MAX_RETRIES,
        initial_delay=settings.AI_RETRY_DELAY_MS,
    )

    return {
        "data": {"insights": insights, "generated_at": utc_now_iso()},
        "message": "Insights generated successfully",
    }
