"""Tests for the TTL metadata cache."""

from squeezecloud.playback.cache import (
    CACHE_NAMESPACE,
    META_CACHE_TTL,
    MetadataCache,
    track_key,
)
from squeezecloud.playback.metadata import TrackMetadata


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestMetadataCache:
    """Tests for MetadataCache."""

    def test_defaults(self) -> None:
        cache = MetadataCache()
        assert cache.namespace == CACHE_NAMESPACE == "squeezecloud"
        assert cache.default_ttl == META_CACHE_TTL == 2592000

    def test_track_key(self) -> None:
        assert track_key("42") == "sc:track-42"

    def test_get_empty_cache(self) -> None:
        assert MetadataCache().get("sc:track-1") is None

    def test_round_trip_within_ttl(self) -> None:
        """Test a stored value is returned until it expires."""
        clock = FakeClock()
        cache = MetadataCache(clock=clock)
        metadata = TrackMetadata(id="42", title="Song")

        cache.set_track(metadata)
        clock.advance(META_CACHE_TTL - 1)

        assert cache.get("sc:track-42") == metadata
        assert cache.get_track("42") == metadata

    def test_expires_after_ttl(self) -> None:
        """Test the key is absent once the TTL has passed."""
        clock = FakeClock()
        cache = MetadataCache(clock=clock)
        cache.set_track(TrackMetadata(id="42"))

        clock.advance(META_CACHE_TTL)

        assert cache.get("sc:track-42") is None
        assert len(cache) == 0

    def test_custom_ttl(self) -> None:
        clock = FakeClock()
        cache = MetadataCache(clock=clock)
        cache.set("k", "v", ttl=10)

        clock.advance(9)
        assert cache.get("k") == "v"
        clock.advance(1)
        assert cache.get("k") is None

    def test_overwrite_replaces_value_and_ttl(self) -> None:
        """Test a rewrite replaces the whole entry."""
        clock = FakeClock()
        cache = MetadataCache(clock=clock)
        cache.set_track(TrackMetadata(id="1", title="Old"))

        clock.advance(META_CACHE_TTL - 10)
        cache.set_track(TrackMetadata(id="1", title="New"))
        clock.advance(20)

        result = cache.get_track("1")
        assert result is not None
        assert result.title == "New"
        assert len(cache) == 1

    def test_purge_expired(self) -> None:
        clock = FakeClock()
        cache = MetadataCache(clock=clock)
        cache.set("a", 1, ttl=5)
        cache.set("b", 2, ttl=50)

        clock.advance(10)

        assert cache.purge_expired() == 1
        assert cache.get("b") == 2

    def test_eviction_when_full(self) -> None:
        """Test the oldest entry is evicted at capacity."""
        cache = MetadataCache(_max_size=2)
        cache.set("1", "a")
        cache.set("2", "b")
        cache.set("3", "c")

        assert cache.get("1") is None
        assert cache.get("2") == "b"
        assert cache.get("3") == "c"

    def test_remove_and_clear(self) -> None:
        cache = MetadataCache()
        cache.set("a", 1)
        cache.set("b", 2)

        cache.remove("a")
        assert cache.get("a") is None

        cache.clear()
        assert len(cache) == 0

    def test_get_track_ignores_foreign_values(self) -> None:
        cache = MetadataCache()
        cache.set("sc:track-1", {"not": "metadata"})
        assert cache.get_track("1") is None
