"""Tests for the suggestion engine rules."""

import pytest
from decimal import Decimal

from finledger.analytics import RULES, SuggestionEngine, evaluate
from finledger.config import LedgerSettings
from finledger.models import CategoryAmount, ChartSeries, DashboardSummary


def _summary(balance="0", overdue=0, due_soon=0) -> DashboardSummary:
    return DashboardSummary(
        balance=Decimal(balance),
        total_income=Decimal("0"),
        total_expenses=Decimal("0"),
        unread_notification_count=0,
        loans_due_soon=due_soon,
        overdue_loans=overdue,
    )


def _month(income="0", expenses="0", categories=None) -> ChartSeries:
    return ChartSeries(
        period="month",
        start_date="2024-06-01",
        end_date="2024-06-30",
        labels=[],
        income=[],
        expenses=[],
        total_income=Decimal(income),
        total_expenses=Decimal(expenses),
        categories=[
            CategoryAmount(category=name, amount=Decimal(amount))
            for name, amount in (categories or [])
        ],
    )


def _codes(advisories) -> list[str]:
    return [a.code for a in advisories]


class TestRules:
    """Each rule in isolation."""

    def test_negative_balance(self, settings):
        advisories = evaluate(_summary(balance="-10"), _month(income="1"), settings)
        assert advisories[0].code == "negative-balance"
        assert advisories[0].severity == "warning"

    def test_overspending(self, settings):
        advisories = evaluate(_summary(), _month(income="100", expenses="150"), settings)
        assert "overspending" in _codes(advisories)

    def test_overdue_and_due_soon(self, settings):
        advisories = evaluate(_summary(overdue=2, due_soon=1), _month(income="1"), settings)
        assert _codes(advisories)[:2] == ["overdue-loans", "loans-due-soon"]
        assert advisories[1].severity == "reminder"
        assert "2 loans are" in advisories[0].message

    def test_category_concentration_above_threshold(self, settings):
        month = _month(income="1000", expenses="100", categories=[("Bills", "59"), ("Food", "41")])
        # Bills is 59% of spend
        advisories = evaluate(_summary(), month, settings)
        tip = next(a for a in advisories if a.code == "category-concentration")
        assert tip.severity == "tip"
        assert tip.message.startswith("Bills accounts for 59%")

    def test_category_at_threshold_is_not_flagged(self, settings):
        month = _month(income="1000", expenses="100", categories=[("Food", "40"), ("Bills", "30"), ("Travel", "30")])
        assert "category-concentration" not in _codes(evaluate(_summary(), month, settings))

    def test_healthy_savings(self, settings):
        advisories = evaluate(_summary(balance="800"), _month(income="1000", expenses="800"), settings)
        assert _codes(advisories) == ["healthy-savings"]
        assert "20%" in advisories[0].message

    def test_savings_below_target(self, settings):
        advisories = evaluate(_summary(balance="1"), _month(income="1000", expenses="801"), settings)
        assert advisories == []

    def test_no_income(self, settings):
        advisories = evaluate(_summary(), _month(), settings)
        assert _codes(advisories) == ["no-income"]


class TestEngine:
    """Ordering, limits and determinism."""

    def test_rule_order_is_fixed(self):
        assert [rule.__name__ for rule in RULES] == [
            "negative_balance",
            "overspending",
            "overdue_loans",
            "loans_due_soon",
            "dominant_category",
            "healthy_savings",
            "no_income",
        ]

    def test_all_rules_in_order(self, settings):
        summary = _summary(balance="-5", overdue=1, due_soon=1)
        month = _month(income="0", expenses="100", categories=[("Food", "100")])
        advisories = evaluate(summary, month, settings)
        assert _codes(advisories) == [
            "negative-balance",
            "overspending",
            "overdue-loans",
            "loans-due-soon",
            "category-concentration",
        ]

    def test_limit_keeps_first_matches(self):
        engine = SuggestionEngine(LedgerSettings(suggestion_limit=2))
        summary = _summary(balance="-5", overdue=1, due_soon=1)
        month = _month(income="0", expenses="100")
        assert _codes(engine.evaluate(summary, month)) == ["negative-balance", "overspending"]
        assert _codes(engine.evaluate(summary, month, limit=1)) == ["negative-balance"]

    def test_identical_inputs_identical_output(self, settings):
        summary = _summary(balance="-5", overdue=1)
        month = _month(income="10", expenses="100", categories=[("Food", "60"), ("Bills", "40")])
        first = [a.model_dump_json() for a in evaluate(summary, month, settings)]
        second = [a.model_dump_json() for a in evaluate(summary, month, settings)]
        assert first == second

    def test_threshold_is_configurable(self):
        settings = LedgerSettings(category_share_threshold=Decimal("0.70"))
        month = _month(income="1000", expenses="100", categories=[("Bills", "60"), ("Food", "40")])
        assert "category-concentration" not in _codes(evaluate(_summary(), month, settings))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
