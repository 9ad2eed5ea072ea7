"""Analytics aggregator and suggestion engine."""

from finledger.analytics.aggregator import (
    AnalyticsAggregator,
    parse_period,
    period_bounds,
    rank_categories,
)
from finledger.analytics.suggestions import RULES, SuggestionEngine, evaluate

__all__ = [
    "AnalyticsAggregator",
    "RULES",
    "SuggestionEngine",
    "evaluate",
    "parse_period",
    "period_bounds",
    "rank_categories",
]
