"""
Fast lookup of GCMD keywords.

A KeywordIndex wraps a VocabularySnapshot with three derived indices:

    short_name_index   {platforms: {"terra": <TERRA entry>}, instruments: {...}, providers: {...}}
    record_index       {spatial-keywords: {(("category", "continent"),
                                            ("subregion-1", "western africa")): <entry>}, ...}
    location_index     {"WESTERN AFRICA": <entry uuid 123>, "CHAD": <entry uuid 456>}

The derived indices are never persisted; compact() returns the snapshot and
build_index() recreates identical indices from it.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from util.kms.models import KeywordEntry, VocabularySnapshot
from util.kms.schemes import (
    SCHEME_TO_FIELDS_FOR_RECORD_LOOKUP,
    SHORT_NAME_SCHEMES,
    KeywordScheme,
)

logger = logging.getLogger(__name__)

RecordKey = tuple[tuple[str, str], ...]

# Hand-picked entries for location names that appear more than once in KMS
LOCATION_OVERRIDES = {
    # Black Sea is more associated with Eastern Europe than Western Asia.
    "BLACK SEA": KeywordEntry(
        uuid="afbc0a01-742e-49da-939e-3eaa3cf431b0",
        hierarchy={
            "category": "CONTINENT",
            "type": "EUROPE",
            "subregion-1": "EASTERN EUROPE",
            "subregion-2": "BLACK SEA",
        },
    ),
    # The top-level SPACE category is too broad.
    "SPACE": KeywordEntry(
        uuid="6f2c3b1f-acae-4af0-a759-f0d57ccfc83f",
        hierarchy={
            "category": "SPACE",
            "type": "EARTH MAGNETIC FIELD",
            "subregion-1": "SPACE",
        },
    ),
    # Georgia the country, not the US state.
    "GEORGIA": KeywordEntry(
        uuid="d79e134c-a4d0-44f2-9706-cad2b59de992",
        hierarchy={
            "category": "CONTINENT",
            "type": "ASIA",
            "subregion-1": "WESTERN ASIA",
            "subregion-2": "GEORGIA",
        },
    ),
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Za-z])(?=[0-9])|[_\s]+")


def to_kebab_case(name: str) -> str:
    """
    Convert a UMM field name to KMS naming, e.g. VariableLevel1 -> variable-level-1.

    Runs of capitals are not split, so "URLPath" becomes "urlpath" rather than
    "url-path". None of the record lookup fields contain such runs.
    """
    return _CAMEL_BOUNDARY.sub("-", name.strip()).lower()


def normalize_for_lookup(values: Mapping[str, Any], fields: list[str]) -> RecordKey:
    """
    Build the comparison key for a keyword.

    Only the given fields take part, absent fields are dropped and values
    are lower-cased, so the same key is produced for a KMS entry and a UMM-C
    keyword regardless of casing.
    """
    return tuple(
        (name, str(values[name]).lower()) for name in fields if values.get(name) is not None
    )


@dataclass(frozen=True)
class KeywordIndex:
    """A vocabulary snapshot plus the lookup indices derived from it."""

    snapshot: VocabularySnapshot
    short_name_index: dict[KeywordScheme, dict[str, KeywordEntry]] = field(default_factory=dict)
    record_index: dict[KeywordScheme, dict[RecordKey, KeywordEntry]] = field(default_factory=dict)
    location_index: dict[str, KeywordEntry] = field(default_factory=dict)

    def keywords(self, scheme: KeywordScheme) -> tuple[KeywordEntry, ...]:
        """Return the raw entries of a scheme in KMS order."""
        return self.snapshot.entries(scheme)

    def lookup_by_short_name(self, scheme: KeywordScheme, short_name: str) -> KeywordEntry | None:
        """
        Return the full KMS hierarchy for a short name, compared case-insensitively.

        Returns None if the scheme is not indexed by short name or the name is unknown.
        """
        return self.short_name_index.get(scheme, {}).get(short_name.lower())

    def lookup_by_location(self, location: str) -> KeywordEntry | None:
        """Return the KMS hierarchy for a location string, compared case-insensitively."""
        return self.location_index.get(location.upper())

    def lookup_by_external_record(
        self, scheme: KeywordScheme, record: Mapping[str, Any]
    ) -> KeywordEntry | None:
        """
        Return the KMS keyword matching a keyword as represented in UMM-C.

        Args:
            scheme: Keyword scheme the record belongs to.
            record: e.g. {"Category": "EARTH SCIENCE", "Topic": "ATMOSPHERE", "VariableLevel1": ...}

        Returns:
            The matching entry, or None. Only the scheme's configured fields
            are compared, ignoring case; there is no partial matching.
        """
        fields = SCHEME_TO_FIELDS_FOR_RECORD_LOOKUP.get(scheme)
        if not fields:
            return None

        kebab_record = {to_kebab_case(name): value for name, value in record.items()}
        key = normalize_for_lookup(kebab_record, fields)
        if not key:
            return None
        return self.record_index.get(scheme, {}).get(key)

    def compact(self) -> VocabularySnapshot:
        """Drop the derived indices, keeping only what is needed to rebuild them."""
        return self.snapshot


def _build_short_name_index(
    snapshot: VocabularySnapshot,
) -> dict[KeywordScheme, dict[str, KeywordEntry]]:
    index = {}
    for scheme in SHORT_NAME_SCHEMES:
        if scheme not in snapshot.keywords:
            continue

        by_short_name = {}
        for entry in snapshot.entries(scheme):
            if not entry.short_name:
                logger.warning(
                    "Skipping %s keyword %s without a short-name", scheme.value, entry.uuid
                )
                continue
            by_short_name[entry.short_name.lower()] = entry
        index[scheme] = by_short_name
    return index


def _build_record_index(
    snapshot: VocabularySnapshot,
) -> dict[KeywordScheme, dict[RecordKey, KeywordEntry]]:
    index = {}
    for scheme, entries in snapshot.keywords.items():
        fields = SCHEME_TO_FIELDS_FOR_RECORD_LOOKUP.get(scheme)
        if not fields:
            continue

        by_record = {}
        for entry in entries:
            key = normalize_for_lookup(entry.hierarchy, fields)
            if key:
                by_record[key] = entry
        index[scheme] = by_record
    return index


def _build_location_index(snapshot: VocabularySnapshot) -> dict[str, KeywordEntry]:
    """
    Map every location string to the entry it names.

    When a string appears in several entries, the entry with the fewest
    hierarchy fields wins, so "OCEAN" maps to {category: OCEAN} rather than
    {category: OCEAN, type: ARCTIC OCEAN}. LOCATION_OVERRIDES always win.
    """
    by_field_count = sorted(
        snapshot.entries(KeywordScheme.SPATIAL_KEYWORDS), key=lambda entry: len(entry.hierarchy)
    )

    index = {}
    for entry in reversed(by_field_count):
        for value in entry.hierarchy.values():
            index[value.upper()] = entry
    index.update(LOCATION_OVERRIDES)
    return index


def build_index(snapshot: VocabularySnapshot) -> KeywordIndex:
    """Create the keyword index used for fast lookups."""
    return KeywordIndex(
        snapshot=snapshot,
        short_name_index=_build_short_name_index(snapshot),
        record_index=_build_record_index(snapshot),
        location_index=_build_location_index(snapshot),
    )
