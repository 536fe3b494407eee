"""Pytest configuration and fixtures."""

import json
import os
from typing import Any

import pytest

# Set test environment variables before any imports that might use them
os.environ.setdefault("REDIS_SSL", "false")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("KMS_URL", "https://cmr.earthdata.nasa.gov/kms")

from util.cache import CacheClient  # noqa: E402
from util.kms.models import KeywordEntry, VocabularySnapshot  # noqa: E402
from util.kms.schemes import KeywordScheme  # noqa: E402


class InMemoryCache(CacheClient):
    """CacheClient keeping JSON round-tripped values in a dict."""

    def __init__(self, available: bool = True):
        self.available = available
        self.data: dict[str, str] = {}
        self.reads = 0
        self.writes = 0

    def is_available(self) -> bool:
        return self.available

    def get(self, key: str) -> dict[str, Any] | None:
        self.reads += 1
        if not self.available or key not in self.data:
            return None
        return json.loads(self.data[key])

    def set(self, key: str, value: dict[str, Any], ttl: int | None = None) -> bool:
        if not self.available:
            return False
        self.writes += 1
        self.data[key] = json.dumps(value)
        return True


@pytest.fixture
def consistent_tier():
    return InMemoryCache()


@pytest.fixture
def fallback_tier():
    return InMemoryCache()


@pytest.fixture
def snapshot():
    """A small vocabulary covering the indexed schemes."""
    return VocabularySnapshot(
        keywords={
            KeywordScheme.PROVIDERS: (
                KeywordEntry(
                    uuid="u1",
                    hierarchy={
                        "bucket-level-0": "GOVERNMENT AGENCIES-U.S. FEDERAL AGENCIES",
                        "short-name": "NASA",
                        "long-name": "National Aeronautics and Space Administration",
                    },
                ),
            ),
            KeywordScheme.PLATFORMS: (
                KeywordEntry(
                    uuid="terra-uuid",
                    hierarchy={
                        "basis": "Space-based Platforms",
                        "category": "Earth Observation Satellites",
                        "short-name": "Terra",
                        "long-name": "Earth Observing System, Terra (AM-1)",
                    },
                ),
                KeywordEntry(
                    uuid="aqua-uuid",
                    hierarchy={
                        "basis": "Space-based Platforms",
                        "category": "Earth Observation Satellites",
                        "short-name": "Aqua",
                        "long-name": "Earth Observing System, Aqua",
                    },
                ),
            ),
            KeywordScheme.INSTRUMENTS: (
                KeywordEntry(
                    uuid="modis-uuid",
                    hierarchy={
                        "category": "Earth Remote Sensing Instruments",
                        "short-name": "MODIS",
                        "long-name": "Moderate-Resolution Imaging Spectroradiometer",
                    },
                ),
            ),
            KeywordScheme.SCIENCE_KEYWORDS: (
                KeywordEntry(
                    uuid="precip-uuid",
                    hierarchy={
                        "category": "EARTH SCIENCE",
                        "topic": "ATMOSPHERE",
                        "term": "PRECIPITATION",
                        "variable-level-1": "PRECIPITATION AMOUNT",
                    },
                ),
            ),
            KeywordScheme.SPATIAL_KEYWORDS: (
                KeywordEntry(
                    uuid="123",
                    hierarchy={"category": "CONTINENT", "subregion-1": "WESTERN AFRICA"},
                ),
                KeywordEntry(
                    uuid="456",
                    hierarchy={
                        "category": "CONTINENT",
                        "subregion-1": "WESTERN AFRICA",
                        "subregion-2": "CHAD",
                    },
                ),
                KeywordEntry(uuid="ocean-uuid", hierarchy={"category": "OCEAN"}),
                KeywordEntry(
                    uuid="arctic-uuid",
                    hierarchy={"category": "OCEAN", "type": "ARCTIC OCEAN"},
                ),
            ),
        }
    )
