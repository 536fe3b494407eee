"""Cache client abstractions for the keyword cache tiers."""

import json
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any

import redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

RECONNECT_INTERVAL_SECONDS = float(os.getenv("REDIS_RECONNECT_SECONDS", "30"))


class CacheClient(ABC):
    """
    Abstract base class for shared key/value caches.

    Implementations never raise on backend failures: reads report a miss
    and writes report False, so an unreachable tier cannot mask a value held
    by another tier.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the cache client is available and connected."""

    @abstractmethod
    def get(self, key: str) -> dict[str, Any] | None:
        """
        Get a value from cache.

        Args:
            key: Cache key to retrieve

        Returns:
            Parsed data if found, None if not found or on error
        """

    @abstractmethod
    def set(self, key: str, value: dict[str, Any], ttl: int | None = None) -> bool:
        """
        Set a value in cache.

        Args:
            key: Cache key
            value: Data to cache
            ttl: Time to live in seconds (default: no expiry)

        Returns:
            True if successful, False otherwise
        """


class RedisCache(CacheClient):
    """
    Redis-based cache client.

    Every process in the cluster reads the same Redis, which makes it the
    consistency tier of the keyword cache.
    """

    def __init__(self):
        """Initialize Redis client with environment-based configuration."""
        self.client = None
        self._last_connect_attempt = 0.0
        self._connect()

    def _connect(self):
        """Establish Redis connection with proper error handling."""
        self._last_connect_attempt = time.monotonic()
        try:
            self.client = redis.Redis(
                host=os.getenv("REDIS_HOST", "localhost"),
                port=int(os.getenv("REDIS_PORT", "6379")),
                password=os.getenv("REDIS_PASSWORD"),
                ssl=os.getenv("REDIS_SSL", "true").lower() == "true",
                ssl_cert_reqs=None,
                socket_connect_timeout=2,
                socket_timeout=5,
            )

            self.client.ping()
            logger.info("Successfully connected to Redis")

        except Exception as e:
            logger.warning(
                "Failed to connect to Redis: %s. Consistency tier disabled, retrying in %ss.",
                e,
                RECONNECT_INTERVAL_SECONDS,
            )
            self.client = None

    def is_available(self) -> bool:
        """Check if Redis client is available and connected.

        A client that failed to connect is retried at most once every
        RECONNECT_INTERVAL_SECONDS.
        """
        if self.client is None:
            if time.monotonic() - self._last_connect_attempt < RECONNECT_INTERVAL_SECONDS:
                return False
            self._connect()
            return self.client is not None

        try:
            self.client.ping()
            return True
        except RedisError:
            return False

    def get(self, key: str) -> dict[str, Any] | None:
        if not self.is_available():
            return None

        try:
            cached_data = self.client.get(key)
            if cached_data:
                return json.loads(cached_data)
            return None

        except (RedisError, json.JSONDecodeError, TypeError) as e:
            logger.warning("Cache read error for key '%s': %s", key, e)
            return None

    def set(self, key: str, value: dict[str, Any], ttl: int | None = None) -> bool:
        if not self.is_available():
            return False

        try:
            serialized_data = json.dumps(value)
            if ttl is None:
                self.client.set(key, serialized_data)
            else:
                self.client.setex(key, ttl, serialized_data)
            return True

        except (RedisError, TypeError, ValueError) as e:
            logger.warning("Cache write error for key '%s': %s", key, e)
            return False


__all__ = [
    "CacheClient",
    "RedisCache",
]
