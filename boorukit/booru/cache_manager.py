"""In-memory TTL + LRU cache for booru API responses."""

import json
import threading
import time
from dataclasses import dataclass
from itertools import count
from typing import Any, Callable, Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_MAX_ENTRIES = 500


@dataclass
class CacheEntry:
    data: bytes
    expires_at: float
    last_accessed: float
    # Tie-breaker for entries touched within the same clock tick
    sequence: int

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def cache_key(backend: str, tags: Iterable[str], limit: int, page: int) -> str:
    """Build the canonical fingerprint of a query.

    Tags are sorted so that the same query written in a different tag order
    hits the same entry.

    Args:
        backend: Backend name (e.g. 'danbooru')
        tags: Query tags in any order
        limit: Page size
        page: Page cursor

    Returns:
        Key like ``danbooru:blue_eyes,cat_ears:limit=10:page=0``
    """
    return f"{backend}:{','.join(sorted(tags))}:limit={limit}:page={page}"


class ResponseCache:
    """Thread-safe key/value cache with per-entry expiry and LRU eviction.

    Values are stored JSON-serialized, so anything ``json.dumps`` accepts can
    be cached and every ``get`` returns a fresh copy.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 max_entries: int = DEFAULT_MAX_ENTRIES,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize response cache.

        Args:
            ttl_seconds: Time to live for cached entries in seconds
            max_entries: Maximum number of entries before LRU eviction
            clock: Monotonic time source, injectable for tests
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sequence = count()
        self._hits = 0
        self._misses = 0
        logger.debug(f"Response cache initialized (TTL: {ttl_seconds}s, max entries: {max_entries})")

    @classmethod
    def short_lived(cls, **kwargs) -> 'ResponseCache':
        return cls(ttl_seconds=60.0, max_entries=100, **kwargs)

    @classmethod
    def long_lived(cls, **kwargs) -> 'ResponseCache':
        return cls(ttl_seconds=3600.0, max_entries=1000, **kwargs)

    @classmethod
    def from_config(cls, cache_config: Optional[Dict[str, Any]] = None) -> 'ResponseCache':
        """Create a cache from the ``cache`` config section."""
        cache_config = cache_config or {}
        return cls(
            ttl_seconds=float(cache_config.get('ttl_seconds', DEFAULT_TTL_SECONDS)),
            max_entries=int(cache_config.get('max_entries', DEFAULT_MAX_ENTRIES)),
        )

    def insert(self, key: str, value: Any):
        """Cache a value.

        Inserting a new key into a full cache evicts the least recently
        accessed entry first. Values that cannot be serialized are not cached.

        Args:
            key: Cache key (see ``cache_key``)
            value: JSON-serializable value
        """
        try:
            data = json.dumps(value).encode('utf-8')
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize cache value for {key}: {e}")
            return

        with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._evict_lru()

            self._entries[key] = CacheEntry(
                data=data,
                expires_at=now + self.ttl_seconds,
                last_accessed=now,
                sequence=next(self._sequence),
            )
        logger.debug(f"Cached response for {key}")

    def get(self, key: str) -> Optional[Any]:
        """Retrieve a cached value if present and not expired.

        Args:
            key: Cache key

        Returns:
            Deserialized value, or None if missing/expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            now = self._clock()
            if entry.is_expired(now):
                del self._entries[key]
                self._misses += 1
                logger.debug(f"Cache entry expired for {key}")
                return None

            entry.last_accessed = now
            entry.sequence = next(self._sequence)
            data = entry.data

        try:
            value = json.loads(data)
        except json.JSONDecodeError:
            logger.error(f"Failed to decode cached JSON for {key}")
            return None

        with self._lock:
            self._hits += 1
        logger.debug(f"Cache hit for {key}")
        return value

    def contains(self, key: str) -> bool:
        """Check for a live entry without touching its access time."""
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def remove(self, key: str):
        with self._lock:
            self._entries.pop(key, None)

    def cleanup_expired(self) -> int:
        """Remove expired cache entries.

        Returns:
            Number of entries deleted
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> int:
        """Clear all cached entries.

        Returns:
            Number of entries deleted
        """
        with self._lock:
            deleted = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared all cache entries ({deleted} deleted)")
        return deleted

    def get_stats(self) -> Dict:
        """Get cache statistics.

        Returns:
            Dictionary with entry counts, hit/miss counters and settings
        """
        with self._lock:
            now = self._clock()
            total = len(self._entries)
            valid = sum(1 for e in self._entries.values() if not e.is_expired(now))
            return {
                'total_entries': total,
                'valid_entries': valid,
                'expired_entries': total - valid,
                'hits': self._hits,
                'misses': self._misses,
                'max_entries': self.max_entries,
                'ttl_seconds': self.ttl_seconds,
            }

    def _evict_lru(self):
        # Caller holds the lock
        if not self._entries:
            return
        victim = min(self._entries,
                     key=lambda k: (self._entries[k].last_accessed, self._entries[k].sequence))
        del self._entries[victim]
        logger.debug(f"Evicted least recently used cache entry {victim}")
