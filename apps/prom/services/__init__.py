from .quote_comparison import (
    NO_BADGES,
    CategorySummary,
    QuoteBadges,
    badges_by_quote,
    compute_badges,
    summarize_categories,
)
from .quote_service import QuoteService

__all__ = [
    "NO_BADGES",
    "CategorySummary",
    "QuoteBadges",
    "QuoteService",
    "badges_by_quote",
    "compute_badges",
    "summarize_categories",
]
