"""
Cached access to the full GCMD keyword vocabulary.

Keywords are fetched from KMS in bulk and cached under a single key in a
TieredCache: in-process, Redis (shared by every process) and S3 (survives
KMS outages). Because the snapshot is persisted in S3, lookups keep working
with the last keywords retrieved before KMS became unavailable.

Use a RefreshScheduler or the kms_refresh lambda to keep the keywords fresh.
Only one refresher is needed cluster-wide since every process reads Redis.
"""

import logging
from collections.abc import Callable
from typing import Any

from util.cache import RedisCache
from util.kms.client import fetch_all_keywords
from util.kms.lookup import KeywordIndex, build_index
from util.kms.models import KeywordEntry, VocabularySnapshot
from util.kms.schemes import SHORT_NAME_SCHEMES, KeywordScheme, parse_scheme
from util.s3_cache import S3Cache
from util.tiered_cache import CONSISTENCY_CHECK_SECONDS, TieredCache

logger = logging.getLogger(__name__)

KMS_CACHE_KEY = "kms"


def _to_index(value: dict[str, Any]) -> KeywordIndex:
    return build_index(VocabularySnapshot.model_validate(value))


class KeywordCache:
    """The GCMD keyword vocabulary and its lookup indices, kept in a TieredCache."""

    def __init__(
        self,
        cache: TieredCache,
        fetch: Callable[[], VocabularySnapshot] = fetch_all_keywords,
    ):
        self.cache = cache
        self._fetch = fetch

    def _fetch_as_dict(self) -> dict[str, Any]:
        return self._fetch().model_dump(mode="json")

    def get_index(self, timeout: float | None = None) -> KeywordIndex:
        """
        Return the current keyword index, loading it if this process has none.

        Raises:
            FallbackUnavailableError: If nothing is cached anywhere and KMS is down.
        """
        return self.cache.get_value(KMS_CACHE_KEY, self._fetch_as_dict, _to_index, timeout)

    def refresh(self) -> KeywordIndex:
        """
        Fetch every scheme from KMS and replace the cached keywords.

        Should be called on a timer. Nothing is replaced unless every scheme
        was fetched.

        Raises:
            KMSError: If KMS could not be read. Cached keywords are left as they were.
        """
        snapshot = self._fetch()
        index = self.cache.set_value(KMS_CACHE_KEY, snapshot.model_dump(mode="json"), _to_index)
        logger.info("Refreshed KMS keywords: %s", snapshot.counts())
        return index

    def get_full_hierarchy_for_short_name(
        self, scheme: "KeywordScheme | str", short_name: str
    ) -> KeywordEntry | None:
        """
        Return the full hierarchy for a short name, or None if it is unknown.

        Schemes without a short-name index, such as projects, are scanned.
        The last match in KMS order wins, as it does in the index.
        """
        scheme = parse_scheme(scheme)
        index = self.get_index()
        if scheme in SHORT_NAME_SCHEMES:
            return index.lookup_by_short_name(scheme, short_name)

        wanted = short_name.lower()
        matches = [
            entry for entry in index.keywords(scheme) if (entry.short_name or "").lower() == wanted
        ]
        return matches[-1] if matches else None


def create_kms_cache(check_interval: float = CONSISTENCY_CHECK_SECONDS) -> KeywordCache:
    """
    Create the keyword cache backed by Redis and S3.

    Every application caching KMS keywords should share the same Redis and
    S3 locations so that a single refresher keeps all of them current.
    """
    tiered = TieredCache(RedisCache(), S3Cache(), check_interval=check_interval)
    return KeywordCache(tiered)
