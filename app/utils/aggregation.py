from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

# Default trend window: today and the 30 days before it
DEFAULT_TREND_DAYS = 30

DateLike = Union[date, datetime, str]


@dataclass
class MonthlySummary:
    """Total spent in one calendar month."""

    total: float
    month: str
    year: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CategoryAggregate:
    """Spend for one category and its share of the window total."""

    category: str
    total: float
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DailySpending:
    date: str
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def to_date(value: DateLike) -> date:
    """Coerce a `YYYY-MM-DD` string, datetime or date into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _amount(expense: Mapping[str, Any]) -> float:
    return float(expense.get("amount", 0))


def _in_month(expense: Mapping[str, Any], month: int, year: int) -> bool:
    expense_date = to_date(expense["date"])
    return expense_date.month == month and expense_date.year == year


def category_totals(expenses: Sequence[Mapping[str, Any]]) -> Dict[str, float]:
    """Unrounded total per category, keyed in order of first appearance."""
    totals: Dict[str, float] = defaultdict(float)
    for exp in expenses:
        totals[exp["category"]] += _amount(exp)
    return dict(totals)


def calculate_monthly_summary(
    expenses: Sequence[Mapping[str, Any]],
    today: date,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> MonthlySummary:
    """
    Sum the expenses dated in (month, year). Months are 1-based; either value
    falls back to `today` when omitted.
    """
    target_month = month if month is not None else today.month
    target_year = year if year is not None else today.year

    total = sum(
        (_amount(exp) for exp in expenses if _in_month(exp, target_month, target_year)),
        0,
    )
    return MonthlySummary(
        total=total,
        month=calendar.month_name[target_month],
        year=target_year,
    )


def aggregate_by_category(
    expenses: Sequence[Mapping[str, Any]],
    today: date,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> List[CategoryAggregate]:
    """
    Group expenses by category, largest total first.

    The month filter only applies when `month` or `year` is given explicitly;
    without either, every supplied expense counts.
    """
    filtered: Sequence[Mapping[str, Any]] = expenses
    if month is not None or year is not None:
        target_month = month if month is not None else today.month
        target_year = year if year is not None else today.year
        filtered = [exp for exp in expenses if _in_month(exp, target_month, target_year)]

    totals = category_totals(filtered)
    grand_total = sum(totals.values())
    aggregates = [
        CategoryAggregate(
            category=category,
            total=amount,
            percentage=(amount / grand_total) * 100 if grand_total > 0 else 0,
        )
        for category, amount in totals.items()
    ]
    return sorted(aggregates, key=lambda item: item.total, reverse=True)


def generate_daily_spending(
    expenses: Sequence[Mapping[str, Any]],
    today: date,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
) -> List[DailySpending]:
    """One zero-filled point per day in the closed interval [start, end]."""
    end_date = to_date(end) if end is not None else today
    start_date = to_date(start) if start is not None else today - timedelta(days=DEFAULT_TREND_DAYS)

    daily_totals: Dict[date, float] = defaultdict(float)
    for exp in expenses:
        expense_date = to_date(exp["date"])
        if start_date <= expense_date <= end_date:
            daily_totals[expense_date] += _amount(exp)

    points: List[DailySpending] = []
    current = start_date
    while current <= end_date:
        points.append(DailySpending(date=current.isoformat(), total=daily_totals.get(current, 0)))
        current += timedelta(days=1)
    return points


class SpendingAnalyzer:
    """
    Binds a clock to the aggregation functions so route handlers never read
    the system date directly.
    """

    def __init__(self, clock: Optional[Callable[[], date]] = None) -> None:
        self._clock = clock or date.today

    def today(self) -> date:
        return self._clock()

    def monthly_summary(
        self,
        expenses: Sequence[Mapping[str, Any]],
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> MonthlySummary:
        return calculate_monthly_summary(expenses, self.today(), month, year)

    def category_breakdown(
        self,
        expenses: Sequence[Mapping[str, Any]],
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> List[CategoryAggregate]:
        return aggregate_by_category(expenses, self.today(), month, year)

    def daily_spending(
        self,
        expenses: Sequence[Mapping[str, Any]],
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> List[DailySpending]:
        return generate_daily_spending(expenses, self.today(), start, end)

    def dashboard(self, expenses: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        """Current-month summary, all-time category split and the recent daily trend."""
        return {
            "summary": self.monthly_summary(expenses).to_dict(),
            "categories": [item.to_dict() for item in self.category_breakdown(expenses)],
            "daily": [point.to_dict() for point in self.daily_spending(expenses)],
            "expense_count": len(expenses),
        }
