"""NASA KMS (Keyword Management System) API client."""

import csv
import io
import logging
import os
from collections import Counter
from urllib.parse import quote

import requests

from util.kms.models import KeywordEntry, VocabularySnapshot
from util.kms.schemes import (
    SCHEME_TO_FIELD_NAMES,
    SCHEME_TO_KMS_NAME,
    SCHEME_TO_LEAF_FIELD,
    KeywordScheme,
)

logger = logging.getLogger(__name__)

KMS_BASE_URL = os.environ.get("KMS_URL", "https://cmr.earthdata.nasa.gov/kms")
KMS_TIMEOUT_SECONDS = int(os.environ.get("KMS_TIMEOUT_SECONDS", "60"))

# The CSV export starts with a version/terms-of-use line, then the header row
CSV_PREAMBLE_LINES = 2


class KMSError(Exception):
    """Raised when keywords cannot be retrieved from KMS."""


def _parse_entries_from_csv(scheme: KeywordScheme, csv_content: str) -> list[KeywordEntry]:
    """
    Parse the CSV export of a scheme into keyword entries.

    Columns are mapped positionally onto the scheme's field names and blank
    cells are dropped. Rows without a leaf value are not keywords.
    """
    field_names = SCHEME_TO_FIELD_NAMES[scheme]
    leaf_field = SCHEME_TO_LEAF_FIELD[scheme]

    rows = list(csv.reader(io.StringIO(csv_content)))[CSV_PREAMBLE_LINES:]
    entries = []

    for row in rows:
        values = {
            field: value.strip()
            for field, value in zip(field_names, row)
            if value and value.strip()
        }
        if not values.get(leaf_field):
            continue

        uuid = values.pop("uuid", None)
        if not uuid:
            logger.warning("Skipping %s keyword without a UUID: %s", scheme.value, values)
            continue

        entries.append(KeywordEntry(uuid=uuid, hierarchy=values))

    _log_duplicate_leaf_values(scheme, entries)
    return entries


def _log_duplicate_leaf_values(scheme: KeywordScheme, entries: list[KeywordEntry]) -> None:
    leaf_field = SCHEME_TO_LEAF_FIELD[scheme]
    counts = Counter((entry.get(leaf_field) or "").lower() for entry in entries)
    duplicates = sorted(value for value, count in counts.items() if count > 1)
    if duplicates:
        logger.warning(
            "Found %d duplicate %s values in %s: %s",
            len(duplicates),
            leaf_field,
            scheme.value,
            duplicates,
        )


def fetch_keywords(scheme: KeywordScheme) -> list[KeywordEntry]:
    """
    Fetch every keyword of a scheme from KMS.

    Args:
        scheme: The keyword scheme to fetch.

    Returns:
        The scheme's entries in KMS order.

    Raises:
        KMSError: If the request fails or the response cannot be parsed.
    """
    kms_name = quote(SCHEME_TO_KMS_NAME[scheme], safe="")
    url = f"{KMS_BASE_URL}/concepts/concept_scheme/{kms_name}"

    try:
        response = requests.get(url, params={"format": "csv"}, timeout=KMS_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.RequestException as e:
        raise KMSError(f"Failed to fetch {scheme.value} keywords from KMS: {e}") from e

    try:
        entries = _parse_entries_from_csv(scheme, response.text)
    except (csv.Error, ValueError) as e:
        raise KMSError(f"Failed to parse {scheme.value} keywords from KMS: {e}") from e

    logger.info("Fetched %d %s keywords from KMS", len(entries), scheme.value)
    return entries


def fetch_all_keywords(schemes: list[KeywordScheme] | None = None) -> VocabularySnapshot:
    """
    Fetch all keyword schemes from KMS as a single snapshot.

    Any failure aborts the whole fetch so a partial vocabulary is never returned.

    Args:
        schemes: Schemes to fetch (default: every known scheme).

    Returns:
        A VocabularySnapshot of every requested scheme.

    Raises:
        KMSError: If any scheme cannot be fetched.
    """
    schemes = list(KeywordScheme) if schemes is None else schemes
    return VocabularySnapshot(keywords={scheme: tuple(fetch_keywords(scheme)) for scheme in schemes})
