#!/usr/bin/env python3
"""
TTL cache for provider results.

Entries are stored as {data, timestamp, ttl} in either process memory or
Redis. Expired entries stay readable as stale data so a failing provider
call can still be answered.
"""

import hashlib
import json
import threading
import time
from typing import Any, Callable, Dict, Optional

import redis

from .config import Config
from ..utils.logger import get_logger

logger = get_logger("cache")

SENTIMENT_PREFIX = "sentiment:"
KNOWLEDGE_PREFIX = "knowledge:"
QUALITY_PREFIX = "quality:"
EMBEDDING_PREFIX = "embedding:"

_MISSING = object()


def make_key(prefix: str, *parts: Any) -> str:
    """Stable cache key: prefix plus a hash of the JSON-encoded parts."""
    encoded = json.dumps(parts, sort_keys=True, default=str)
    return prefix + hashlib.sha1(encoded.encode("utf-8")).hexdigest()[:20]


class MemoryBackend:
    """In-process storage shared by every cache built on it.

    Like RedisBackend, an entry is kept for its ttl plus `stale_grace` seconds;
    older entries are dropped whenever a new one is written.
    """

    def __init__(self, stale_grace: int = None):
        self.stale_grace = stale_grace if stale_grace is not None else Config.CACHE_STALE_GRACE_SECONDS
        self._items: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._items)

    def _is_dead(self, item: Dict[str, Any], now: float) -> bool:
        ttl = item.get("ttl")
        return bool(ttl) and now - item["timestamp"] > ttl + self.stale_grace

    def get_item(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, item: Dict[str, Any]):
        now = item["timestamp"]
        with self._lock:
            for old_key in [k for k, v in self._items.items() if self._is_dead(v, now)]:
                del self._items[old_key]
            self._items[key] = item

    def remove_item(self, key: str):
        with self._lock:
            self._items.pop(key, None)

    def clear(self, prefix: str = ""):
        with self._lock:
            for key in [k for k in self._items if k.startswith(prefix)]:
                del self._items[key]


class RedisBackend:
    """Redis storage; items are JSON strings under a namespaced key."""

    def __init__(self, client: "redis.Redis", namespace: str = "support:", stale_grace: int = None):
        self.client = client
        self.namespace = namespace
        self.stale_grace = stale_grace if stale_grace is not None else Config.CACHE_STALE_GRACE_SECONDS

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def get_item(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.client.get(self._key(key))
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    def set_item(self, key: str, item: Dict[str, Any]):
        ttl = item.get("ttl")
        expire = int(ttl + self.stale_grace) if ttl else None
        self.client.set(self._key(key), json.dumps(item, default=str), ex=expire)

    def remove_item(self, key: str):
        self.client.delete(self._key(key))

    def clear(self, prefix: str = ""):
        keys = list(self.client.scan_iter(match=f"{self._key(prefix)}*"))
        if keys:
            self.client.delete(*keys)


class TTLCache:
    """Key-value cache with per-entry time-to-live."""

    def __init__(self, backend=None, default_ttl: Optional[float] = None, clock: Callable[[], float] = time.time):
        self.backend = backend if backend is not None else MemoryBackend()
        self.default_ttl = default_ttl if default_ttl is not None else Config.CACHE_TTL_SECONDS
        self.clock = clock

    def _is_expired(self, item: Dict[str, Any]) -> bool:
        ttl = item.get("ttl")
        if not ttl:
            return False
        return self.clock() - item["timestamp"] > ttl

    def get(self, key: str, default: Any = None) -> Any:
        item = self.backend.get_item(key)
        if item is None:
            return default
        if self._is_expired(item):
            self.backend.remove_item(key)
            return default
        return item["data"]

    def set(self, key: str, data: Any, ttl: Optional[float] = None):
        self.backend.set_item(key, {
            "data": data,
            "timestamp": self.clock(),
            "ttl": self.default_ttl if ttl is None else ttl,
        })

    def delete(self, key: str):
        self.backend.remove_item(key)

    def clear(self, prefix: str = ""):
        self.backend.clear(prefix)

    def is_stale(self, key: str) -> bool:
        item = self.backend.get_item(key)
        return item is None or self._is_expired(item)

    def get_or_fetch(self, key: str, fetcher: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        """
        Return cached data, fetching and storing it on a miss.

        Args:
            key: Cache key
            fetcher: Zero-argument callable producing fresh data
            ttl: Entry lifetime in seconds, defaults to the cache default

        Returns:
            Fresh cached data, newly fetched data, or stale data when the
            fetch fails and an expired entry is still stored

        Raises:
            Whatever the fetcher raised when there is nothing stale to serve
        """
        item = self.backend.get_item(key)
        if item is not None and not self._is_expired(item):
            return item["data"]

        try:
            data = fetcher()
        except Exception as e:
            if item is not None:
                logger.warning("Fetch for %s failed, serving stale entry: %s", key, e)
                return item["data"]
            raise

        self.set(key, data, ttl)
        return data


def create_cache() -> TTLCache:
    """Build the cache selected by CACHE_BACKEND, falling back to memory."""
    if Config.CACHE_BACKEND == "redis":
        try:
            client = redis.Redis(
                host=Config.REDIS_HOST,
                port=Config.REDIS_PORT,
                db=Config.REDIS_DB,
                decode_responses=True,
            )
            client.ping()
            logger.info("Using Redis cache at %s:%s", Config.REDIS_HOST, Config.REDIS_PORT)
            return TTLCache(RedisBackend(client))
        except redis.RedisError as e:
            logger.warning("Redis not available (%s), using in-memory cache", e)
    return TTLCache(MemoryBackend())
