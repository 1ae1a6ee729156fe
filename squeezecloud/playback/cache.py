"""
Namespaced metadata cache with per-entry TTL.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .metadata import TrackMetadata

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "squeezecloud"
KEY_PREFIX = "sc:"
META_CACHE_TTL = 86400 * 30  # 30 days


def track_key(track_id: str) -> str:
    """Cache key for a track's metadata."""
    return f"{KEY_PREFIX}track-{track_id}"


@dataclass
class CacheEntry:
    """A cached value and its expiry timestamp."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if the entry has outlived its TTL."""
        return now >= self.expires_at


@dataclass
class MetadataCache:
    """
    In-memory key/value cache with TTL expiry.

    Writes are whole-value overwrites, so concurrent resolutions of the same
    track need no locking: the last writer wins.
    """

    namespace: str = CACHE_NAMESPACE
    default_ttl: float = META_CACHE_TTL
    clock: Callable[[], float] = time.time
    _max_size: int = 1000
    _entries: dict[str, CacheEntry] = field(default_factory=dict)

    def get(self, key: str) -> Optional[Any]:
        """Get a live value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store a value, replacing any previous one."""
        if len(self._entries) >= self._max_size and key not in self._entries:
            self.purge_expired()
        if len(self._entries) >= self._max_size and key not in self._entries:
            # Evict oldest insertion
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        expires_at = self.clock() + (self.default_ttl if ttl is None else ttl)
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def remove(self, key: str) -> None:
        """Drop a key if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all entries."""
        self._entries.clear()

    def purge_expired(self) -> int:
        """Remove expired entries. Returns the number removed."""
        now = self.clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired entries from {self.namespace}")
        return len(expired)

    def get_track(self, track_id: str) -> Optional[TrackMetadata]:
        """Get cached metadata for a track."""
        value = self.get(track_key(track_id))
        return value if isinstance(value, TrackMetadata) else None

    def set_track(self, metadata: TrackMetadata, ttl: Optional[float] = None) -> None:
        """Cache metadata under the track's key."""
        key = track_key(metadata.id)
        logger.info(f"Setting {self.namespace} {key}")
        self.set(key, metadata, ttl)

    def __len__(self) -> int:
        return len(self._entries)
