from datetime import date, timedelta
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.errors import AppError, ErrorKind
from app.core.security import get_current_user_id
from app.db import dynamo
from app.utils.aggregation import DEFAULT_TREND_DAYS, SpendingAnalyzer

MAX_TREND_DAYS = 366

router = APIRouter()
spending_analyzer = SpendingAnalyzer()


def get_analyzer() -> SpendingAnalyzer:
    return spending_analyzer


def _parse_day(value: Optional[str], field: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise AppError(ErrorKind.VALIDATION, f"{field} must be in YYYY-MM-DD format")


@router.get("/summary")
def monthly_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1, le=9999),
    user_id: str = Depends(get_current_user_id),
    analyzer: SpendingAnalyzer = Depends(get_analyzer),
) -> Dict:
    """Total spent in a month (1-12); defaults to the current month."""
    expenses = dynamo.list_expenses(user_id)
    return analyzer.monthly_summary(expenses, month, year).to_dict()


@router.get("/categories")
def category_breakdown(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1, le=9999),
    user_id: str = Depends(get_current_user_id),
    analyzer: SpendingAnalyzer = Depends(get_analyzer),
) -> List[Dict]:
    """Spend per category. Without month or year every expense is included."""
    expenses = dynamo.list_expenses(user_id)
    return [item.to_dict() for item in analyzer.category_breakdown(expenses, month, year)]


@router.get("/daily")
def daily_spending(
    start: Optional[str] = None,
    end: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    analyzer: SpendingAnalyzer = Depends(get_analyzer),
) -> List[Dict]:
    """Zero-filled daily totals; defaults to the last 30 days."""
    start_date = _parse_day(start, "start")
    end_date = _parse_day(end, "end")

    today = analyzer.today()
    window_start = start_date or today - timedelta(days=DEFAULT_TREND_DAYS)
    window_end = end_date or today
    if (window_end - window_start).days > MAX_TREND_DAYS:
        raise AppError(ErrorKind.VALIDATION, f"Date range cannot exceed {MAX_TREND_DAYS} days")

    expenses = dynamo.list_expenses(user_id)
    return [point.to_dict() for point in analyzer.daily_spending(expenses, start_date, end_date)]


@router.get("/dashboard")
def dashboard(
    user_id: str = Depends(get_current_user_id),
    analyzer: SpendingAnalyzer = Depends(get_analyzer),
) -> Dict:
    expenses = dynamo.list_expenses(user_id)
    return analyzer.dashboard(expenses)
