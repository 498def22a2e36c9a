"""
Cache keys and patterns touched by portal writes.

Reads are cached under their function name, so writes invalidate the exact
by-id key of the entity they changed plus a pattern over the listings that
may contain it.
"""

from typing import Optional

from ..caching import QueryCache, generate_cache_key


PROFILE_QUERY = "get_user_profile"
USER_QUERY = "get_user_by_id"
NEWS_QUERY = "get_news_by_id"
TRAINING_QUERY = "get_training_by_id"

USER_LISTING_PATTERN = r"^get_users(:|$)"
NEWS_LISTING_PATTERN = r"^get_news(:|$)"
TRAINING_LISTING_PATTERN = r"^get_trainings(:|$)"


def invalidate_user(cache: QueryCache, user_id: str) -> None:
    """A profile row changed: drop both by-id views of it and user listings."""
    cache.invalidate(generate_cache_key(PROFILE_QUERY, {"user_id": user_id}))
    cache.invalidate(generate_cache_key(USER_QUERY, {"user_id": user_id}))
    cache.invalidate_pattern(USER_LISTING_PATTERN)


def invalidate_news(cache: QueryCache, news_id: Optional[str] = None) -> None:
    if news_id is not None:
        cache.invalidate(generate_cache_key(NEWS_QUERY, {"news_id": news_id}))
    cache.invalidate_pattern(NEWS_LISTING_PATTERN)


def invalidate_training(cache: QueryCache, training_id: Optional[str] = None) -> None:
    if training_id is not None:
        cache.invalidate(generate_cache_key(TRAINING_QUERY, {"training_id": training_id}))
    cache.invalidate_pattern(TRAINING_LISTING_PATTERN)
