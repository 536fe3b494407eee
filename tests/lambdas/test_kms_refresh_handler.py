"""Tests for the KMS refresh lambda handler."""

from unittest.mock import MagicMock, patch

import pytest

from lambdas.kms_refresh.handler import get_kms_cache, handler
from util.kms import KMSError, build_index


class TestHandler:
    """Tests for the lambda handler."""

    def test_refreshes_cache_and_returns_counts(self, snapshot):
        kms_cache = MagicMock()
        kms_cache.refresh.return_value = build_index(snapshot)

        with patch("lambdas.kms_refresh.handler.get_kms_cache", return_value=kms_cache):
            result = handler({}, None)

        kms_cache.refresh.assert_called_once()
        assert result["status"] == "refreshed"
        assert result["counts"]["providers"] == 1
        assert result["counts"]["spatial-keywords"] == 4
        assert result["total_keywords"] == 9
        assert result["dry_run"] is False

    def test_dry_run_does_not_write_cache(self, snapshot):
        with (
            patch("lambdas.kms_refresh.handler.get_kms_cache") as mock_get_cache,
            patch(
                "lambdas.kms_refresh.handler.fetch_all_keywords", return_value=snapshot
            ) as mock_fetch,
        ):
            result = handler({"dry_run": True}, None)

        mock_fetch.assert_called_once()
        mock_get_cache.assert_not_called()
        assert result["status"] == "dry_run"

    def test_accepts_empty_event(self, snapshot):
        kms_cache = MagicMock()
        kms_cache.refresh.return_value = build_index(snapshot)

        with patch("lambdas.kms_refresh.handler.get_kms_cache", return_value=kms_cache):
            result = handler(None, None)

        assert result["status"] == "refreshed"

    def test_kms_failure_fails_invocation(self):
        """Should log and re-raise so the scheduled invocation is marked failed."""
        kms_cache = MagicMock()
        kms_cache.refresh.side_effect = KMSError("KMS unavailable")

        with (
            patch("lambdas.kms_refresh.handler.get_kms_cache", return_value=kms_cache),
            patch("lambdas.kms_refresh.handler.logger") as mock_logger,
        ):
            with pytest.raises(KMSError):
                handler({}, None)

        mock_logger.error.assert_called_once()


class TestGetKmsCache:
    def test_reuses_cache_across_invocations(self):
        with patch("lambdas.kms_refresh.handler.create_kms_cache") as mock_create:
            first = get_kms_cache()
            second = get_kms_cache()

        assert first is second
        mock_create.assert_called_once()
