"""Per-key coalescing of concurrent computations."""

import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any


class SingleFlight:
    """
    Ensures at most one computation per key is in flight.

    The first caller for a key runs the computation; callers arriving while
    it runs block on its Future and receive the same result or exception.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._calls: dict[str, Future] = {}

    def do(self, key: str, fn: Callable[[], Any], timeout: float | None = None) -> Any:
        """
        Run fn for key, or wait for the run already in progress.

        Args:
            key: Coalescing key.
            fn: The computation.
            timeout: Seconds a waiting caller blocks before giving up. The
                running computation is never interrupted and its result is
                still delivered to the other callers.

        Raises:
            TimeoutError: If a waiting caller's timeout expires.
            Exception: Whatever fn raised, re-raised in every caller.
        """
        with self._lock:
            future = self._calls.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._calls[key] = future

        if not leader:
            return future.result(timeout=timeout)

        try:
            result = fn()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._calls.pop(key, None)
