"""GCMD keyword fetching, caching and lookup backed by NASA KMS."""

from util.kms.client import KMS_BASE_URL, KMSError, fetch_all_keywords, fetch_keywords
from util.kms.fetcher import KMS_CACHE_KEY, KeywordCache, create_kms_cache
from util.kms.lookup import LOCATION_OVERRIDES, KeywordIndex, build_index
from util.kms.models import KeywordEntry, VocabularySnapshot
from util.kms.scheduler import RefreshScheduler
from util.kms.schemes import KeywordScheme, parse_scheme

__all__ = [
    "KMS_BASE_URL",
    "KMS_CACHE_KEY",
    "KMSError",
    "KeywordCache",
    "KeywordEntry",
    "KeywordIndex",
    "KeywordScheme",
    "LOCATION_OVERRIDES",
    "RefreshScheduler",
    "VocabularySnapshot",
    "build_index",
    "create_kms_cache",
    "fetch_all_keywords",
    "fetch_keywords",
    "parse_scheme",
]
