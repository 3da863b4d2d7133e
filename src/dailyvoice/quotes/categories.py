"""Category balancing for daily quote generation.

Picks the category used least over a recent window so the archive stays
evenly spread across categories.
"""

import logging
import random
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from .models import QUOTE_CATEGORIES, QuoteCategory

logger = logging.getLogger(__name__)

CategoryCounter = Callable[[QuoteCategory, str], Awaitable[int]]


@dataclass(frozen=True)
class CategoryShare:
    """Usage of one category within a window."""

    category: QuoteCategory
    count: int
    percentage: float


def initialize_category_counts() -> dict[QuoteCategory, int]:
    return {category: 0 for category in QUOTE_CATEGORIES}


def validate_category(category: str) -> bool:
    return category in {c.value for c in QUOTE_CATEGORIES}


def get_random_category(rng: random.Random | None = None) -> QuoteCategory:
    return (rng or random).choice(QUOTE_CATEGORIES)


def find_least_used_category(counts: Mapping[QuoteCategory, int]) -> QuoteCategory:
    """Return the category with the lowest count.

    Ties go to the category listed first in QUOTE_CATEGORIES.
    """
    return min(QUOTE_CATEGORIES, key=lambda c: counts.get(c, 0))


async def determine_next_category(
    count_fn: CategoryCounter,
    days_back: int = 30,
    random_fallback: bool = True,
    today: date | None = None,
    rng: random.Random | None = None,
) -> QuoteCategory:
    """Choose the category for the next quote.

    Args:
        count_fn: Coroutine returning how many quotes of a category were
            created on or after the given YYYY-MM-DD date
        days_back: Size of the look-back window in days
        random_fallback: Pick a random category if counting fails
        today: Reference date (defaults to the current UTC date)
        rng: Random generator used for the fallback

    Returns:
        Least used category in the window

    Raises:
        Exception: Whatever count_fn raised, when random_fallback is False
    """
    reference = today or datetime.now(timezone.utc).date()
    since = (reference - timedelta(days=days_back)).isoformat()

    try:
        counts = initialize_category_counts()
        for category in QUOTE_CATEGORIES:
            counts[category] = await count_fn(category, since)

        usage = {c.value: n for c, n in counts.items()}
        logger.debug(f"Category usage in last {days_back} days: {usage}")
        selected = find_least_used_category(counts)
        logger.info(f"Selected category: {selected.value}")
        return selected

    except Exception as e:
        if not random_fallback:
            raise
        fallback = get_random_category(rng)
        logger.warning(
            f"Error determining next category, using random fallback {fallback.value}: {e}"
        )
        return fallback


def get_category_distribution(counts: Mapping[QuoteCategory, int]) -> list[CategoryShare]:
    """Express category counts as percentages of the total."""
    total = sum(counts.get(c, 0) for c in QUOTE_CATEGORIES)
    return [
        CategoryShare(
            category=c,
            count=counts.get(c, 0),
            percentage=(counts.get(c, 0) / total) * 100 if total > 0 else 0.0,
        )
        for c in QUOTE_CATEGORIES
    ]


def is_balanced(
    counts: Mapping[QuoteCategory, int], max_variance_percentage: float = 20
) -> bool:
    """Check every category is within the allowed distance of an even share."""
    expected = 100 / len(QUOTE_CATEGORIES)
    return all(
        abs(share.percentage - expected) <= max_variance_percentage
        for share in get_category_distribution(counts)
    )
