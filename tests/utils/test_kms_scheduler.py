"""Tests for the KMS refresh job."""

import threading
from unittest.mock import MagicMock, patch

from util.kms import KMSError, RefreshScheduler
from util.kms.scheduler import KMS_REFRESH_INTERVAL_SECONDS


class TestRunOnce:
    """Tests for RefreshScheduler.run_once."""

    def test_returns_true_on_success(self):
        cache = MagicMock()

        assert RefreshScheduler(cache).run_once() is True
        cache.refresh.assert_called_once()

    def test_logs_and_swallows_failures(self):
        """Should log a failed refresh instead of raising it."""
        cache = MagicMock()
        cache.refresh.side_effect = KMSError("KMS unavailable")

        with patch("util.kms.scheduler.logger") as mock_logger:
            result = RefreshScheduler(cache).run_once()

        assert result is False
        mock_logger.error.assert_called_once()
        assert "Failed to refresh" in mock_logger.error.call_args[0][0]


class TestScheduling:
    """Tests for the background refresh thread."""

    def test_default_interval_is_two_hours(self):
        assert KMS_REFRESH_INTERVAL_SECONDS == 7200
        assert RefreshScheduler(MagicMock()).interval == 7200

    def test_refreshes_repeatedly_until_stopped(self):
        refreshed = threading.Semaphore(0)
        cache = MagicMock()
        cache.refresh.side_effect = lambda: refreshed.release()
        scheduler = RefreshScheduler(cache, interval=0.01)

        scheduler.start()
        try:
            for _ in range(3):
                assert refreshed.acquire(timeout=5)
        finally:
            scheduler.stop(timeout=5)

        assert scheduler.is_running is False
        assert cache.refresh.call_count >= 3

    def test_keeps_running_after_failures(self):
        attempts = threading.Semaphore(0)
        cache = MagicMock()

        def failing_refresh():
            attempts.release()
            raise KMSError("KMS unavailable")

        cache.refresh.side_effect = failing_refresh
        scheduler = RefreshScheduler(cache, interval=0.01)

        scheduler.start()
        try:
            for _ in range(2):
                assert attempts.acquire(timeout=5)
            assert scheduler.is_running is True
        finally:
            scheduler.stop(timeout=5)

    def test_start_without_immediate_run_waits_for_interval(self):
        cache = MagicMock()
        scheduler = RefreshScheduler(cache, interval=3600)

        scheduler.start(run_immediately=False)
        scheduler.stop(timeout=5)

        cache.refresh.assert_not_called()

    def test_start_twice_keeps_one_thread(self):
        scheduler = RefreshScheduler(MagicMock(), interval=3600)

        scheduler.start(run_immediately=False)
        thread = scheduler._thread
        scheduler.start(run_immediately=False)

        assert scheduler._thread is thread
        scheduler.stop(timeout=5)
