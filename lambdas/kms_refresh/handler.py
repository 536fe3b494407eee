"""
KMS Refresh Lambda - Refresh the shared GCMD keyword cache from KMS.

Invoked by an EventBridge schedule (every 2 hours). Only one refresher is
needed for the whole cluster: results are written to Redis, which every
process reads, and to S3, which serves keywords while KMS is down.

Example invocation payload (all optional):
{
    "dry_run": false
}
"""

import logging
from typing import Any

from util.kms import KeywordCache, KMSError, create_kms_cache, fetch_all_keywords

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_kms_cache = None


def get_kms_cache() -> KeywordCache:
    """Get the keyword cache (lazy initialization, reused across Lambda invocations)."""
    global _kms_cache
    if _kms_cache is None:
        _kms_cache = create_kms_cache()
    return _kms_cache


def _clear_kms_cache():
    """Clear the cached keyword cache (for testing only)."""
    global _kms_cache
    _kms_cache = None


def handler(event: dict[str, Any], _context) -> dict[str, Any]:
    """
    Lambda handler for refreshing the KMS keyword cache.

    Accepts event payload with:
        - dry_run: Optional, if true fetches from KMS without writing any cache

    Returns:
        Summary of the refresh with per-scheme keyword counts

    Raises:
        KMSError: If KMS could not be read, so the invocation is marked failed.
            The cached keywords are left untouched.
    """
    event = event or {}
    dry_run = event.get("dry_run", False)

    logger.info("Starting KMS refresh: dry_run=%s", dry_run)

    try:
        if dry_run:
            snapshot = fetch_all_keywords()
        else:
            snapshot = get_kms_cache().refresh().compact()
    except KMSError as e:
        logger.error("KMS refresh failed, keeping cached keywords: %s", e)
        raise

    summary = {
        "status": "dry_run" if dry_run else "refreshed",
        "counts": snapshot.counts(),
        "total_keywords": sum(snapshot.counts().values()),
        "dry_run": dry_run,
    }

    logger.info("KMS refresh complete: %s", summary)
    return summary
