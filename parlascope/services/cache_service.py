"""Look-aside cache for computed API payloads.

Reads happen before computing, writes after. There is no locking: two
concurrent misses both recompute and the last write wins, which is fine
because every cached computation is idempotent.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from parlascope.models import CacheEntry
from parlascope.services.cache_config import CacheTTL, is_cache_valid

logger = logging.getLogger(__name__)


class CacheSection(str, Enum):
    """Key prefixes of cached data."""

    LEGISLATOR_LIST = "legislators:list"
    COMPARE = "legislators:compare"
    LEGISLATOR = "legislator"
    STATS = "legislator:stats"
    GROUPS = "groups"
    OLDEST_BALLOT = "ballot:oldest"
    ANALYTICS = "analytics"


def cache_key(section: CacheSection, *parts: Any) -> str:
    """Build a cache key such as ``legislator:stats:42``."""
    return ":".join([section.value, *(str(p) for p in parts)])


async def cache_get(db: AsyncSession, key: str, ttl: CacheTTL) -> Optional[Any]:
    """Return the cached value for ``key`` if present and fresh."""
    entry = await db.get(CacheEntry, key)
    if entry is None or not is_cache_valid(entry.cached_at, ttl):
        return None
    return entry.payload.get("value")


async def cache_set(db: AsyncSession, key: str, value: Any) -> None:
    """Store a JSON-serializable value under ``key``."""
    entry = await db.get(CacheEntry, key)
    if entry is None:
        db.add(CacheEntry(key=key, payload={"value": value}, cached_at=datetime.utcnow()))
    else:
        entry.payload = {"value": value}
        entry.cached_at = datetime.utcnow()
    await db.commit()


async def get_or_compute(
    db: AsyncSession,
    key: str,
    ttl: CacheTTL,
    compute: Callable[[], Awaitable[Any]],
) -> Any:
    """Serve ``key`` from cache, or compute, store and return it."""
    cached = await cache_get(db, key, ttl)
    if cached is not None:
        return cached

    value = await compute()
    await cache_set(db, key, value)
    return value


async def invalidate_cache(db: AsyncSession, key: str) -> None:
    """Delete a single cache entry."""
    await db.execute(delete(CacheEntry).where(CacheEntry.key == key))
    await db.commit()


async def invalidate_prefix(db: AsyncSession, prefix: str) -> int:
    """Delete every entry whose key starts with ``prefix``.

    Returns:
        Number of entries removed
    """
    result = await db.execute(select(CacheEntry.key).where(CacheEntry.key.startswith(prefix, autoescape=True)))
    keys = list(result.scalars().all())
    if keys:
        await db.execute(delete(CacheEntry).where(CacheEntry.key.in_(keys)))
        await db.commit()
        logger.debug("Invalidated %d cache entries under %s", len(keys), prefix)
    return len(keys)


async def invalidate_legislator(db: AsyncSession, legislator_id: int, slug: str) -> None:
    """Drop every cached payload derived from one legislator's data."""
    await invalidate_prefix(db, cache_key(CacheSection.STATS, legislator_id) + ":")
    await invalidate_prefix(db, cache_key(CacheSection.LEGISLATOR, slug) + ":")
    await invalidate_prefix(db, CacheSection.LEGISLATOR_LIST.value + ":")
    await invalidate_prefix(db, CacheSection.COMPARE.value + ":")
