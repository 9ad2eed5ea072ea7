"""
Suggestion Engine

A pure function of (dashboard summary, current month series). Rules
are evaluated in a fixed order and the first ``limit`` matches are
returned.

RULES (in order):
1. negative balance                        -> warning
2. month expenses exceed month income      -> warning
3. overdue loans                           -> warning
4. loans due within the due-soon window    -> reminder
5. one category above the share threshold  -> tip
6. savings rate at or above the target     -> success
7. no income recorded this month           -> tip

No clock, no randomness, no dict-order dependence: identical inputs
give identical output.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from finledger.config import LedgerSettings, get_settings
from finledger.models.analytics import Advisory, ChartSeries, DashboardSummary, Severity

Rule = Callable[[DashboardSummary, ChartSeries, LedgerSettings], Optional[Advisory]]


def _percent(value: Decimal) -> str:
    return f"{(value * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP)}%"


def negative_balance(summary: DashboardSummary, month: ChartSeries, settings: LedgerSettings) -> Optional[Advisory]:
    if summary.balance >= 0:
        return None
    return Advisory(
        code="negative-balance",
        severity=Severity.WARNING,
        message=(
            f"Your balance is negative ({summary.balance}). "
            "Your expenses have exceeded your income so far."
        ),
    )


def overspending(summary: DashboardSummary, month: ChartSeries, settings: LedgerSettings) -> Optional[Advisory]:
    if month.total_expenses <= month.total_income:
        return None
    return Advisory(
        code="overspending",
        severity=Severity.WARNING,
        message=(
            f"This month you have spent {month.total_expenses} against "
            f"{month.total_income} of income."
        ),
    )


def overdue_loans(summary: DashboardSummary, month: ChartSeries, settings: LedgerSettings) -> Optional[Advisory]:
    if summary.overdue_loans == 0:
        return None
    noun = "loan is" if summary.overdue_loans == 1 else "loans are"
    return Advisory(
        code="overdue-loans",
        severity=Severity.WARNING,
        message=f"{summary.overdue_loans} {noun} past the due date.",
    )


def loans_due_soon(summary: DashboardSummary, month: ChartSeries, settings: LedgerSettings) -> Optional[Advisory]:
    if summary.loans_due_soon == 0:
        return None
    noun = "loan is" if summary.loans_due_soon == 1 else "loans are"
    return Advisory(
        code="loans-due-soon",
        severity=Severity.REMINDER,
        message=(
            f"{summary.loans_due_soon} {noun} due within the next "
            f"{settings.due_soon_days} days."
        ),
    )


def dominant_category(summary: DashboardSummary, month: ChartSeries, settings: LedgerSettings) -> Optional[Advisory]:
    if month.total_expenses <= 0 or not month.categories:
        return None
    top = month.categories[0]
    ratio = top.amount / month.total_expenses
    if ratio <= settings.category_share_threshold:
        return None
    return Advisory(
        code="category-concentration",
        severity=Severity.TIP,
        message=(
            f"{top.category} accounts for {_percent(ratio)} of your spending "
            "this month. Consider setting a budget for it."
        ),
    )


def healthy_savings(summary: DashboardSummary, month: ChartSeries, settings: LedgerSettings) -> Optional[Advisory]:
    if month.total_income <= 0:
        return None
    rate = (month.total_income - month.total_expenses) / month.total_income
    if rate < settings.savings_rate_target:
        return None
    return Advisory(
        code="healthy-savings",
        severity=Severity.SUCCESS,
        message=f"Great job! You saved {_percent(rate)} of your income this month.",
    )


def no_income(summary: DashboardSummary, month: ChartSeries, settings: LedgerSettings) -> Optional[Advisory]:
    if month.total_income > 0:
        return None
    return Advisory(
        code="no-income",
        severity=Severity.TIP,
        message="No income recorded this month. Add your income to track savings.",
    )


RULES: tuple[Rule, ...] = (
    negative_balance,
    overspending,
    overdue_loans,
    loans_due_soon,
    dominant_category,
    healthy_savings,
    no_income,
)


def evaluate(
    summary: DashboardSummary,
    month: ChartSeries,
    settings: LedgerSettings,
    limit: Optional[int] = None,
) -> list[Advisory]:
    """Matching advisories in rule order, at most ``limit`` of them."""
    limit = settings.suggestion_limit if limit is None else limit
    advisories = []
    for rule in RULES:
        if len(advisories) >= limit:
            break
        advisory = rule(summary, month, settings)
        if advisory is not None:
            advisories.append(advisory)
    return advisories


class SuggestionEngine:
    """Binds the rule list to the configured thresholds."""

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    def evaluate(
        self,
        summary: DashboardSummary,
        month: ChartSeries,
        limit: Optional[int] = None,
    ) -> list[Advisory]:
        return evaluate(summary, month, self._settings, limit)
