"""Centralized cache TTL configuration.

TTL values are defined in minutes for each data type:
- Lists: 5 minutes (paginated listings, cheap to rebuild)
- Detail: 5 minutes (legislator profile pages)
- Stats: 60 minutes (presence/loyalty, source data changes at most daily)
- Groups: 60 minutes (group composition rarely changes)
- Oldest ballot: 24 hours (start of the legislature, practically constant)
- Compare: 12 hours (side-by-side pages, source data refreshed daily)
- Analytics: 12 hours (dissidents and group cohesion, aggregated over all votes)
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional


class CacheTTL(Enum):
    """Cache TTL values in minutes for different data types."""

    LISTS = 5
    DETAIL = 5
    STATS = 60
    GROUPS = 60
    OLDEST_BALLOT = 24 * 60
    COMPARE = 12 * 60
    ANALYTICS = 12 * 60


def get_ttl_timedelta(ttl: CacheTTL) -> timedelta:
    """Get timedelta for a cache TTL value."""
    return timedelta(minutes=ttl.value)


def is_cache_valid(cached_at: Optional[datetime], ttl: CacheTTL) -> bool:
    """Check if cached data is still valid.

    Args:
        cached_at: datetime when data was cached
        ttl: CacheTTL enum value for this data type

    Returns:
        True if cache is still valid, False if expired
    """
    if cached_at is None:
        return False

    # Handle both naive and aware datetimes
    now = datetime.utcnow()
    if cached_at.tzinfo is not None:
        now = datetime.now(timezone.utc)

    return now - cached_at < get_ttl_timedelta(ttl)
