"""
Analytics Aggregator

Dashboard totals, calendar-aligned chart series and category
breakdowns, all recomputed from the ledger on every read.

BUCKETS:
- week: 7 daily buckets ending today
- month: one daily bucket per day of the current calendar month
- year: 12 monthly buckets of the current calendar year

Empty buckets report zero. Labels are fixed English strings, never
locale-dependent.
"""

from datetime import date
from typing import Callable, NamedTuple, Optional, Union

from finledger.errors import ValidationError
from finledger.ledger import LedgerStore
from finledger.loans import LoanEngine
from finledger.models.analytics import (
    CategoryAmount,
    ChartPeriod,
    ChartSeries,
    DashboardSummary,
)
from finledger.models.ledger import EntryKind, ExpenseCategory
from finledger.notifications import NotificationCenter
from finledger.primitives import (
    format_date,
    from_minor,
    last_n_days,
    month_days,
    month_key,
    year_bounds,
    year_months,
)

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class Bucket(NamedTuple):
    label: str
    key: str


def parse_period(period: Union[ChartPeriod, str]) -> ChartPeriod:
    """
    Raises:
        ValidationError: Unknown period name
    """
    if isinstance(period, ChartPeriod):
        return period
    try:
        return ChartPeriod(str(period).strip().lower())
    except ValueError:
        raise ValidationError.single(
            "period",
            "invalid_value",
            f"'{period}' is not a valid period. Allowed: week, month, year",
        )


def period_bounds(period: ChartPeriod, today: date) -> tuple[date, date]:
    """Inclusive date range covered by a period."""
    if period == ChartPeriod.WEEK:
        days = last_n_days(today, 7)
        return days[0], days[-1]
    if period == ChartPeriod.MONTH:
        days = month_days(today)
        return days[0], days[-1]
    return year_bounds(today)


def period_buckets(period: ChartPeriod, today: date) -> list[Bucket]:
    """Bucket labels and keys, oldest first. Keys match ``bucket_key``."""
    if period == ChartPeriod.WEEK:
        return [
            Bucket(WEEKDAY_LABELS[day.weekday()], format_date(day))
            for day in last_n_days(today, 7)
        ]
    if period == ChartPeriod.MONTH:
        return [Bucket(str(day.day), format_date(day)) for day in month_days(today)]
    return [
        Bucket(MONTH_LABELS[first.month - 1], month_key(first))
        for first in year_months(today)
    ]


def bucket_key(period: ChartPeriod, day: date) -> str:
    return month_key(day) if period == ChartPeriod.YEAR else format_date(day)


def rank_categories(totals: dict[ExpenseCategory, int]) -> list[CategoryAmount]:
    """Largest first, ties by category name; zero amounts dropped."""
    ranked = sorted(
        ((category.value, amount) for category, amount in totals.items() if amount > 0),
        key=lambda item: (-item[1], item[0]),
    )
    return [CategoryAmount(category=name, amount=from_minor(amount)) for name, amount in ranked]


class AnalyticsAggregator:
    """Read-only views over one account's ledger and loans."""

    def __init__(
        self,
        ledger: LedgerStore,
        loans: LoanEngine,
        notifications: NotificationCenter,
        clock: Optional[Callable[[], date]] = None,
    ):
        self._ledger = ledger
        self._loans = loans
        self._notifications = notifications
        self._clock = clock or loans.today

    def dashboard(self, account_id: str) -> DashboardSummary:
        """Headline numbers over the full history."""
        income = self._ledger.total_income(account_id)
        expenses = self._ledger.total_expenses(account_id)
        by_category = {
            item.category: item.amount
            for item in rank_categories(self._ledger.expenses_by_category(account_id))
        }
        due_soon, overdue = self._loans.due_counts(account_id)

        return DashboardSummary(
            balance=from_minor(income - expenses),
            total_income=from_minor(income),
            total_expenses=from_minor(expenses),
            unread_notification_count=self._notifications.unread_count(account_id),
            expenses_by_category=by_category,
            loans_due_soon=due_soon,
            overdue_loans=overdue,
        )

    def chart_series(self, account_id: str, period: Union[ChartPeriod, str]) -> ChartSeries:
        """
        Income and expense buckets for a period.

        Raises:
            ValidationError: Unknown period
        """
        period = parse_period(period)
        today = self._clock()
        start, end = period_bounds(period, today)
        buckets = period_buckets(period, today)

        income = self._bucket_totals(account_id, EntryKind.INCOME, period, start, end)
        expenses = self._bucket_totals(account_id, EntryKind.EXPENSE, period, start, end)

        return ChartSeries(
            period=period,
            start_date=format_date(start),
            end_date=format_date(end),
            labels=[bucket.label for bucket in buckets],
            income=[from_minor(income.get(bucket.key, 0)) for bucket in buckets],
            expenses=[from_minor(expenses.get(bucket.key, 0)) for bucket in buckets],
            total_income=from_minor(sum(income.values())),
            total_expenses=from_minor(sum(expenses.values())),
            categories=rank_categories(
                self._ledger.expenses_by_category(account_id, start, end)
            ),
        )

    def category_breakdown(
        self,
        account_id: str,
        period: Union[ChartPeriod, str],
    ) -> list[CategoryAmount]:
        period = parse_period(period)
        start, end = period_bounds(period, self._clock())
        return rank_categories(self._ledger.expenses_by_category(account_id, start, end))

    def _bucket_totals(
        self,
        account_id: str,
        kind: EntryKind,
        period: ChartPeriod,
        start: date,
        end: date,
    ) -> dict[str, int]:
        totals: dict[str, int] = {}
        for day, amount in self._ledger.sum_by_day(account_id, kind, start, end).items():
            key = bucket_key(period, day)
            totals[key] = totals.get(key, 0) + amount
        return totals
