"""
Cache
In-process TTL cache for hosts that serve topic runs repeatedly.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional
import hashlib
import logging
import time


logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class BaseCache(ABC):
    """
    Cache interface
    """

    def __init__(self, ttl: Optional[int] = None):
        """
        Args:
            ttl: default expiry in seconds, None = never expires
        """
        self.ttl = ttl

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value or None."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key."""

    @abstractmethod
    def clear(self) -> None:
        """Remove everything."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """True when a live entry exists."""

    def get_or_set(
        self,
        key: str,
        factory: Callable[[], Any],
        ttl: Optional[int] = None,
    ) -> Any:
        """
        Return the cached value, building and storing it with ``factory`` on a miss.

        A factory result of None is returned but not cached.
        """
        value = self.get(key)
        if value is not None:
            return value

        value = factory()
        if value is not None:
            self.set(key, value, ttl)
        return value

    @staticmethod
    def make_key(*args, **kwargs) -> str:
        """
        Stable key from positional and keyword parts (keyword order does not matter).
        """
        key_parts = [str(arg) for arg in args]
        key_parts.extend([f"{k}={v}" for k, v in sorted(kwargs.items())])
        key_string = ":".join(key_parts)
        return hashlib.md5(key_string.encode()).hexdigest()


class MemoryCache(BaseCache):
    """
    Dictionary cache with lazy expiry and a size bound.
    """

    def __init__(
        self,
        ttl: Optional[int] = None,
        max_size: int = 1000,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            ttl: default expiry in seconds
            max_size: maximum number of entries kept
            clock: zero-argument callable returning seconds (default time.monotonic)
        """
        super().__init__(ttl)
        self.max_size = max(1, int(max_size))
        self._clock: Clock = clock or time.monotonic
        self._cache: Dict[str, Dict[str, Any]] = {}

    def _is_expired(self, entry: Dict[str, Any]) -> bool:
        expires_at = entry.get("expires_at")
        if expires_at is None:
            return False
        return self._clock() >= expires_at

    def _cleanup(self) -> None:
        expired_keys = [k for k, v in self._cache.items() if self._is_expired(v)]
        for key in expired_keys:
            del self._cache[key]

        # drop the oldest entries to make room for one more
        overflow = len(self._cache) - self.max_size + 1
        if overflow > 0:
            oldest = sorted(self._cache, key=lambda k: self._cache[k]["created_at"])
            for key in oldest[:overflow]:
                del self._cache[key]
            logger.debug("cache_evicted count=%d", overflow)

    def get(self, key: str) -> Optional[Any]:
        entry = self._cache.get(key)
        if entry is None:
            return None

        if self._is_expired(entry):
            del self._cache[key]
            return None

        return entry["value"]

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        self._cache.pop(key, None)
        self._cleanup()

        ttl = self.ttl if ttl is None else ttl
        now = self._clock()
        expires_at = now + ttl if ttl else None

        self._cache[key] = {
            "value": value,
            "created_at": now,
            "expires_at": expires_at,
        }

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet evicted."""
        return len(self._cache)

