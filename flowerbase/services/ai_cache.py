"""Expiring cache for AI translations and summaries.

Entries are stored as JSON ``{"data": ..., "timestamp": <epoch millis>}``
under namespaced keys (see ``cache_keys``). Expiry is lazy: an entry older
than the TTL is deleted when it is read, or by an explicit ``sweep()``.

Every operation fails soft. A broken or full backend degrades to cache
misses and is never surfaced to the caller.
"""

import os
import json
import time
import logging
from typing import Any, Callable, Optional

from flowerbase.exceptions import QuotaExceededError
from flowerbase.services.cache_keys import CACHE_PREFIX, namespace_prefix
from flowerbase.services.kv_store import KeyValueStore, MemoryKeyValueStore, RedisKeyValueStore

logger = logging.getLogger(__name__)

CACHE_EXPIRY_DAYS = int(os.environ.get('AI_CACHE_TTL_DAYS', 7))
CACHE_TTL_SECONDS = CACHE_EXPIRY_DAYS * 24 * 60 * 60

# Cap for the in-process fallback; a full store triggers a sweep
MEMORY_CACHE_QUOTA_BYTES = int(os.environ.get(
    'AI_CACHE_MEMORY_QUOTA_BYTES', MemoryKeyValueStore.DEFAULT_QUOTA_BYTES
))

# Process-wide cache (lazy initialization)
_ai_cache = None


class ExpiringCache:
    """Timestamped key/value cache with a fixed time-to-live."""

    def __init__(
        self,
        store: KeyValueStore,
        prefix: str = CACHE_PREFIX,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _is_expired(self, timestamp, now_ms: int) -> bool:
        return now_ms - timestamp > self.ttl_seconds * 1000

    @staticmethod
    def _decode(raw: str) -> dict:
        entry = json.loads(raw)
        if not isinstance(entry, dict) or 'data' not in entry:
            raise ValueError('cache entry has no data')
        if not isinstance(entry.get('timestamp'), (int, float)):
            raise ValueError('cache entry has no timestamp')
        return entry

    def get(self, key: str) -> Optional[Any]:
        """Return the cached payload, or None if missing, expired or unreadable."""
        try:
            raw = self.store.get_item(key)
            if raw is None:
                return None

            entry = self._decode(raw)
            if self._is_expired(entry['timestamp'], self._now_ms()):
                self.store.remove_item(key)
                return None

            return entry['data']
        except Exception as e:
            logger.warning(f"Cache read error for {key}: {e}")
            return None

    def put(self, key: str, data: Any) -> bool:
        """Store ``data`` under ``key``.

        Returns False when the write did not happen. A full backend triggers
        a sweep of expired entries; the write itself is not retried.
        """
        try:
            payload = json.dumps({'data': data, 'timestamp': self._now_ms()}, ensure_ascii=False)
            self.store.set_item(key, payload)
            return True
        except QuotaExceededError as e:
            logger.warning(f"Cache full while writing {key}: {e}. Sweeping expired entries.")
            self.sweep()
            return False
        except Exception as e:
            logger.warning(f"Cache write error for {key}: {e}")
            return False

    def sweep(self) -> int:
        """Remove every expired or unreadable entry of this namespace.

        Returns the number of removed entries.
        """
        removed = 0
        try:
            now_ms = self._now_ms()
            for key in self.store.keys(namespace_prefix(self.prefix)):
                raw = self.store.get_item(key)
                if raw is None:
                    continue
                try:
                    entry = self._decode(raw)
                except ValueError:
                    # Corrupt entries can never be read back
                    self.store.remove_item(key)
                    removed += 1
                    continue
                if self._is_expired(entry['timestamp'], now_ms):
                    self.store.remove_item(key)
                    removed += 1
        except Exception as e:
            logger.warning(f"Cache sweep error: {e}")

        if removed:
            logger.info(f"Swept {removed} expired AI cache entries")
        return removed

    def stats(self) -> dict:
        """Count and approximate size of the live namespaced entries (debug only).

        Expired and unreadable entries are left out; ``sweep()`` removes them.
        """
        count = 0
        size = 0
        try:
            now_ms = self._now_ms()
            for key in self.store.keys(namespace_prefix(self.prefix)):
                raw = self.store.get_item(key)
                if raw is None:
                    continue
                try:
                    entry = self._decode(raw)
                except ValueError:
                    continue
                if self._is_expired(entry['timestamp'], now_ms):
                    continue
                count += 1
                size += len(raw)
        except Exception as e:
            logger.warning(f"Cache stats error: {e}")

        return {
            'itemCount': count,
            'sizeKB': round(size / 1024, 2),
        }


def get_ai_cache() -> ExpiringCache:
    """Get or create the process-wide AI content cache.

    Uses Redis when REDIS_URL is configured and reachable, otherwise an
    in-memory store that lives as long as the worker process.
    """
    global _ai_cache

    if _ai_cache is not None:
        return _ai_cache

    from flowerbase.services.redis_client import get_redis

    client = get_redis()
    if client is not None:
        store = RedisKeyValueStore(client)
        logger.info("AI cache using Redis backend")
    else:
        store = MemoryKeyValueStore(quota_bytes=MEMORY_CACHE_QUOTA_BYTES)
        logger.info(f"AI cache using in-memory backend ({MEMORY_CACHE_QUOTA_BYTES} byte quota)")

    _ai_cache = ExpiringCache(store)
    return _ai_cache


def set_ai_cache(cache: Optional[ExpiringCache]) -> None:
    """Replace the process-wide cache (None resets to lazy initialization)."""
    global _ai_cache
    _ai_cache = cache
