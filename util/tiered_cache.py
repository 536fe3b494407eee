"""
Multi-tier cache with request coalescing and an outage fallback.

Lookup order for a key:

1. In-process value, as long as its hash code still matches the one
   published in the consistency tier.
2. Consistency tier (shared by every process in the cluster).
3. The lookup function (e.g. the remote service). A successful result is
   written through to the consistency and fallback tiers.
4. Fallback tier, only when the lookup function fails.

Steps 3 and 4 are only taken for keys with no in-process value. A key that
is already held in process keeps its value when the consistency tier cannot
supply a newer one.

Steps 2-4 run at most once per key at a time; concurrent callers wait for
and share the result.
"""

import hashlib
import json
import logging
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from util.cache import CacheClient
from util.single_flight import SingleFlight

logger = logging.getLogger(__name__)

CONSISTENCY_CHECK_SECONDS = float(os.environ.get("KMS_CONSISTENCY_CHECK_SECONDS", "30"))


class FallbackUnavailableError(Exception):
    """Raised when a value is in no tier and the lookup function failed."""


def hash_code(value: dict[str, Any]) -> str:
    """Stable hash of a JSON-serializable value."""
    canonical = json.dumps(value, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_code_key(key: str) -> str:
    return f"{key}-hash-code"


@dataclass(frozen=True)
class _LocalEntry:
    value: Any
    hash_code: str | None
    checked_at: float


class TieredCache:
    """
    Cache composed of an in-process tier, a consistency tier and a fallback tier.

    Stored values are JSON-serializable dicts. Callers pass a transform that
    turns a stored dict into the object kept in process (for example an
    index derived from the raw data), so only the compact form is shared.
    """

    def __init__(
        self,
        consistent: CacheClient,
        fallback: CacheClient,
        check_interval: float = CONSISTENCY_CHECK_SECONDS,
    ):
        self.consistent = consistent
        self.fallback = fallback
        self.check_interval = check_interval
        self._lock = threading.Lock()
        self._values: dict[str, _LocalEntry] = {}
        self._flight = SingleFlight()

    def get_value(
        self,
        key: str,
        lookup_fn: Callable[[], dict[str, Any]],
        transform: Callable[[dict[str, Any]], Any],
        timeout: float | None = None,
    ) -> Any:
        """
        Return the in-process value for key, loading it through the tiers if needed.

        Args:
            key: Cache key.
            lookup_fn: Produces a fresh value from the source of truth.
            transform: Converts a stored value into the in-process value.
            timeout: Seconds to wait on a load already in progress.

        Raises:
            FallbackUnavailableError: If lookup_fn fails and no tier holds a value.
        """
        with self._lock:
            entry = self._values.get(key)
        if entry is not None and self._is_current(key, entry):
            return entry.value
        return self._flight.do(key, lambda: self._load(key, lookup_fn, transform, entry), timeout)

    def set_value(
        self,
        key: str,
        value: dict[str, Any],
        transform: Callable[[dict[str, Any]], Any],
    ) -> Any:
        """
        Replace the value for key in every tier.

        The value is transformed before anything is written, so a value that
        cannot be transformed leaves all tiers untouched.

        Returns:
            The transformed in-process value.
        """
        local_value = transform(value)
        code = self._write_through(key, value)
        self._store_local(key, local_value, code)
        return local_value

    def clear(self) -> None:
        """Drop every in-process value. Shared tiers are left untouched."""
        with self._lock:
            self._values.clear()

    def _is_current(self, key: str, entry: _LocalEntry) -> bool:
        if time.monotonic() - entry.checked_at < self.check_interval:
            return True

        shared = self.consistent.get(hash_code_key(key))
        shared_code = shared.get("hash-code") if shared else None
        if shared_code is not None and shared_code != entry.hash_code:
            logger.info("Value for key '%s' changed in the consistency tier, reloading", key)
            return False

        self._restamp(key, entry)
        return True

    def _load(
        self,
        key: str,
        lookup_fn: Callable[[], dict[str, Any]],
        transform: Callable[[dict[str, Any]], Any],
        local: _LocalEntry | None = None,
    ) -> Any:
        value = self.consistent.get(key)
        if value is not None:
            try:
                local_value = transform(value)
            except ValueError as e:
                if local is None:
                    raise
                logger.warning(
                    "Value for key '%s' in the consistency tier is invalid, keeping the in-process value: %s",
                    key,
                    e,
                )
                return self._restamp(key, local)
            logger.info("Loaded key '%s' from the consistency tier", key)
            return self._store_local(key, local_value, hash_code(value))

        # A warm key never goes back to the lookup function or the fallback tier
        if local is not None:
            logger.warning(
                "Value for key '%s' is missing from the consistency tier, keeping the in-process value",
                key,
            )
            return self._restamp(key, local)

        try:
            value = lookup_fn()
        except Exception as e:
            logger.warning("Lookup for key '%s' failed, trying the fallback tier: %s", key, e)
            value = self.fallback.get(key)
            if value is None:
                raise FallbackUnavailableError(
                    f"No value for key '{key}' in any tier and lookup failed: {e}"
                ) from e
            logger.info("Loaded key '%s' from the fallback tier", key)
            return self._store_local(key, transform(value), hash_code(value))

        local_value = transform(value)
        code = self._write_through(key, value)
        return self._store_local(key, local_value, code)

    def _write_through(self, key: str, value: dict[str, Any]) -> str:
        code = hash_code(value)
        if not self.consistent.set(key, value):
            logger.warning("Could not write key '%s' to the consistency tier", key)
        elif not self.consistent.set(hash_code_key(key), {"hash-code": code}):
            logger.warning("Could not write hash code for key '%s'", key)
        if not self.fallback.set(key, value):
            logger.warning("Could not write key '%s' to the fallback tier", key)
        return code

    def _store_local(self, key: str, value: Any, code: str | None) -> Any:
        with self._lock:
            self._values[key] = _LocalEntry(value, code, time.monotonic())
        return value

    def _restamp(self, key: str, entry: _LocalEntry) -> Any:
        """Mark entry as checked now and return the value currently held for key."""
        with self._lock:
            current = self._values.get(key)
            if current is entry:
                current = _LocalEntry(entry.value, entry.hash_code, time.monotonic())
                self._values[key] = current
            return entry.value if current is None else current.value
