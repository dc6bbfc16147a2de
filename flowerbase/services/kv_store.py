"""Key-value backends for the AI content cache.

Both backends store plain strings and expose the same four operations
(``get_item``, ``set_item``, ``remove_item``, ``keys``). A write is always a
single whole-value replace of one key.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from redis.exceptions import OutOfMemoryError, ResponseError

from flowerbase.exceptions import QuotaExceededError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Persistent string key/value store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Replace the value of ``key``.

        Raises:
            QuotaExceededError: if the backend is out of space.
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass

    @abstractmethod
    def keys(self, prefix: str = '') -> List[str]:
        """List all keys starting with ``prefix``."""
        pass


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store, optionally capped at ``quota_bytes``.

    Size is counted as key length plus value length, in characters.
    """

    # Roughly what a browser grants one origin for local storage
    DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024

    def __init__(self, quota_bytes: Optional[int] = None):
        self._items = {}
        self.quota_bytes = quota_bytes

    def _used(self, excluding: Optional[str] = None) -> int:
        return sum(
            len(k) + len(v) for k, v in self._items.items() if k != excluding
        )

    def get_item(self, key):
        return self._items.get(key)

    def set_item(self, key, value):
        if self.quota_bytes is not None:
            needed = self._used(excluding=key) + len(key) + len(value)
            if needed > self.quota_bytes:
                raise QuotaExceededError(
                    f"Memory store quota of {self.quota_bytes} bytes exceeded"
                )
        self._items[key] = value

    def remove_item(self, key):
        self._items.pop(key, None)

    def keys(self, prefix=''):
        return [k for k in list(self._items) if k.startswith(prefix)]

    def clear(self):
        self._items.clear()


class RedisKeyValueStore(KeyValueStore):
    """Store backed by a Redis connection with ``decode_responses=True``."""

    def __init__(self, client):
        self._redis = client

    def get_item(self, key):
        return self._redis.get(key)

    def set_item(self, key, value):
        try:
            self._redis.set(key, value)
        except OutOfMemoryError as e:
            # maxmemory reached with a noeviction policy
            raise QuotaExceededError(str(e)) from e
        except ResponseError as e:
            # Raw "OOM ..." reply
            if str(e).startswith('OOM'):
                raise QuotaExceededError(str(e)) from e
            raise

    def remove_item(self, key):
        self._redis.delete(key)

    def keys(self, prefix=''):
        return list(self._redis.scan_iter(match=f"{prefix}*"))
