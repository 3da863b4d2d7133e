"""Quote domain helpers: models, category balancing and cached reads."""

from .cached import (
    QuoteSource,
    get_cached_all_quotes,
    get_cached_quote_count,
    get_cached_quotes_by_category,
    get_cached_todays_quote,
    invalidate_published,
    preload,
)
from .categories import (
    CategoryShare,
    determine_next_category,
    find_least_used_category,
    get_category_distribution,
    get_random_category,
    initialize_category_counts,
    is_balanced,
    validate_category,
)
from .models import QUOTE_CATEGORIES, Quote, QuoteCategory

__all__ = [
    "QUOTE_CATEGORIES",
    "CategoryShare",
    "Quote",
    "QuoteCategory",
    "QuoteSource",
    "determine_next_category",
    "find_least_used_category",
    "get_cached_all_quotes",
    "get_cached_quote_count",
    "get_cached_quotes_by_category",
    "get_cached_todays_quote",
    "get_category_distribution",
    "get_random_category",
    "initialize_category_counts",
    "invalidate_published",
    "is_balanced",
    "preload",
    "validate_category",
]
