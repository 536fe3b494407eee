"""Background job keeping the KMS keyword cache fresh."""

import logging
import os
import threading

from util.kms.fetcher import KeywordCache

logger = logging.getLogger(__name__)

# GCMD updates its keyword exports every 6 hours. Refreshing every 2 hours
# keeps us within 8 hours of any keyword change.
KMS_REFRESH_INTERVAL_SECONDS = int(os.environ.get("KMS_REFRESH_INTERVAL_SECONDS", "7200"))


class RefreshScheduler:
    """
    Calls KeywordCache.refresh() on a fixed interval from a daemon thread.

    Refresh failures are logged and never reach readers of the cache, which
    keep using the previous keywords.
    """

    def __init__(self, cache: KeywordCache, interval: float = KMS_REFRESH_INTERVAL_SECONDS):
        self.cache = cache
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> bool:
        """
        Refresh the cache once.

        Returns:
            True if the keywords were refreshed, False if the refresh failed.
        """
        try:
            self.cache.refresh()
            return True
        except Exception as e:
            logger.error("Failed to refresh KMS keyword cache: %s", e)
            return False

    def start(self, run_immediately: bool = True) -> None:
        """Start the refresh thread. Does nothing if it is already running."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            args=(run_immediately,),
            name="kms-refresh",
            daemon=True,
        )
        self._thread.start()
        logger.info("Started KMS refresh job (interval=%ss)", self.interval)

    def stop(self, timeout: float | None = None) -> None:
        """Signal the refresh thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Stopped KMS refresh job")

    def _run(self, run_immediately: bool) -> None:
        if run_immediately:
            self.run_once()
        while not self._stop_event.wait(self.interval):
            self.run_once()
