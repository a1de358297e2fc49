"""
Badges for comparing vendor quotes

Pure functions over anything exposing ``category``, ``price_total`` and
``rating`` (model instances, dicts wrapped in SimpleNamespace, ...).
Comparisons only ever happen between quotes of the same category; callers
pass the quotes of a single prom event.

    cheapest       lowest total price, needs at least two quotes in the category
    highest_rated  top rating among rated quotes, needs at least two rated quotes
    best_value     rating >= 4 and price at or below the category mean price

Ties are not broken: several quotes can carry the same badge.
"""

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal

BEST_VALUE_MIN_RATING = 4


@dataclass(frozen=True)
class QuoteBadges:
    cheapest: bool = False
    highest_rated: bool = False
    best_value: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


NO_BADGES = QuoteBadges()


@dataclass
class CategorySummary:
    category: str
    count: int
    min_price: Decimal
    max_price: Decimal
    avg_price: Decimal
    cheapest_ids: list = field(default_factory=list)
    highest_rated_ids: list = field(default_factory=list)
    best_value_ids: list = field(default_factory=list)


def category_peers(quote, quotes) -> list:
    return [q for q in quotes if q.category == quote.category]


def _score(quote, peers) -> QuoteBadges:
    if not peers:
        return NO_BADGES

    prices = [q.price_total for q in peers]
    ratings = [q.rating for q in peers if q.rating is not None]

    cheapest = len(prices) > 1 and quote.price_total == min(prices)
    highest_rated = quote.rating is not None and len(ratings) > 1 and quote.rating == max(ratings)
    # price <= mean, kept in exact arithmetic: price * n <= sum
    best_value = (
        quote.rating is not None
        and quote.rating >= BEST_VALUE_MIN_RATING
        and quote.price_total * len(prices) <= sum(prices)
    )

    return QuoteBadges(cheapest=cheapest, highest_rated=highest_rated, best_value=best_value)


def compute_badges(quote, quotes) -> QuoteBadges:
    """
    Badges for one quote among the quotes of its event

    Args:
        quote: the quote being scored
        quotes: every quote of the event; only same-category peers are used

    Returns:
        QuoteBadges; all False when there is nothing to compare against
    """
    return _score(quote, category_peers(quote, quotes))


def group_by_category(quotes) -> dict:
    groups = defaultdict(list)
    for quote in quotes:
        groups[quote.category].append(quote)
    return dict(groups)


def badges_by_quote(quotes, key=lambda quote: quote.id) -> dict:
    """Badges for every quote of an event, keyed by ``key(quote)``"""
    badges = {}
    for peers in group_by_category(quotes).values():
        for quote in peers:
            badges[key(quote)] = _score(quote, peers)
    return badges


def summarize_categories(quotes, order=(), key=lambda quote: quote.id) -> list:
    """
    Per-category price statistics and badge holders

    Categories listed in ``order`` come first, in that order; any others follow
    alphabetically. Empty categories are omitted. ``avg_price`` is rounded to
    a whole unit, halves away from zero.
    """
    groups = group_by_category(quotes)
    rank = {category: index for index, category in enumerate(order)}
    categories = sorted(groups, key=lambda category: (rank.get(category, len(rank)), category))

    summaries = []
    for category in categories:
        peers = groups[category]
        prices = [q.price_total for q in peers]
        average = Decimal(sum(prices)) / len(prices)
        summary = CategorySummary(
            category=category,
            count=len(peers),
            min_price=min(prices),
            max_price=max(prices),
            avg_price=average.quantize(Decimal("1"), rounding=ROUND_HALF_UP),
        )
        for quote in peers:
            badges = _score(quote, peers)
            if badges.cheapest:
                summary.cheapest_ids.append(key(quote))
            if badges.highest_rated:
                summary.highest_rated_ids.append(key(quote))
            if badges.best_value:
                summary.best_value_ids.append(key(quote))
        summaries.append(summary)

    return summaries
