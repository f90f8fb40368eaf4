"""Unit tests for cache configuration."""

from datetime import datetime, timedelta, timezone

from parlascope.services.cache_config import CacheTTL, get_ttl_timedelta, is_cache_valid


class TestCacheTTLValues:
    """Test that TTL values are configured correctly."""

    def test_lists_and_detail_are_five_minutes(self):
        """Listings and profiles should have a 5 minute TTL."""
        assert CacheTTL.LISTS.value == 5
        assert CacheTTL.DETAIL.value == 5

    def test_stats_and_groups_are_one_hour(self):
        """Statistics and groups should have a 60 minute TTL."""
        assert CacheTTL.STATS.value == 60
        assert CacheTTL.GROUPS.value == 60

    def test_oldest_ballot_is_one_day(self):
        assert CacheTTL.OLDEST_BALLOT.value == 24 * 60


class TestGetTTLTimedelta:
    """Test the get_ttl_timedelta function."""

    def test_minutes(self):
        """TTL values should be read as minutes."""
        assert get_ttl_timedelta(CacheTTL.LISTS) == timedelta(minutes=5)
        assert get_ttl_timedelta(CacheTTL.STATS) == timedelta(hours=1)
        assert get_ttl_timedelta(CacheTTL.OLDEST_BALLOT) == timedelta(days=1)


class TestIsCacheValid:
    """Test the is_cache_valid function."""

    def test_none_cached_at_is_invalid(self):
        """None cached_at should return False."""
        assert is_cache_valid(None, CacheTTL.STATS) is False

    def test_recent_cache_is_valid(self):
        """Cache from 1 minute ago should be valid for every TTL."""
        cached_at = datetime.utcnow() - timedelta(minutes=1)
        for ttl in CacheTTL:
            assert is_cache_valid(cached_at, ttl) is True

    def test_stats_expire_after_one_hour(self):
        """Stats cached 61 minutes ago should be stale."""
        assert is_cache_valid(datetime.utcnow() - timedelta(minutes=59), CacheTTL.STATS) is True
        assert is_cache_valid(datetime.utcnow() - timedelta(minutes=61), CacheTTL.STATS) is False

    def test_different_ttls_same_timestamp(self):
        """Same timestamp should have different validity for different TTLs."""
        cached_at = datetime.utcnow() - timedelta(minutes=10)
        assert is_cache_valid(cached_at, CacheTTL.LISTS) is False
        assert is_cache_valid(cached_at, CacheTTL.STATS) is True

    def test_boundary_at_exactly_ttl(self):
        """Cache at exactly TTL boundary should be invalid (< not <=)."""
        cached_at = datetime.utcnow() - timedelta(minutes=5)
        assert is_cache_valid(cached_at, CacheTTL.LISTS) is False

    def test_aware_datetime(self):
        """Timezone-aware timestamps should be compared in UTC."""
        cached_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        assert is_cache_valid(cached_at, CacheTTL.LISTS) is True
