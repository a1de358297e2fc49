import logging

from apps.prom.models import PromQuote
from .quote_comparison import badges_by_quote, summarize_categories

logger = logging.getLogger(__name__)

CATEGORY_ORDER = [category for category, _ in PromQuote.CATEGORY_CHOICES]


class QuoteService:
    """
    Loads a prom event's quotes and scores them
    Badges are always computed over the whole event, never over a filtered subset
    """

    @staticmethod
    def quotes_for_prom(prom) -> list:
        return list(PromQuote.objects.filter(prom=prom))

    @staticmethod
    def badge_map(prom) -> dict:
        """QuoteBadges for every quote of the event, keyed by quote id"""
        return badges_by_quote(QuoteService.quotes_for_prom(prom))

    @staticmethod
    def comparison(prom) -> list:
        quotes = QuoteService.quotes_for_prom(prom)
        summaries = summarize_categories(quotes, order=CATEGORY_ORDER)
        logger.info(f"Compared {len(quotes)} quotes in {len(summaries)} categories for prom {prom.id}")
        return summaries
