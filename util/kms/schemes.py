"""Static configuration for the GCMD keyword schemes served by KMS."""

from enum import Enum


class KeywordScheme(str, Enum):
    """A named category of GCMD keyword."""

    PROVIDERS = "providers"
    PLATFORMS = "platforms"
    INSTRUMENTS = "instruments"
    PROJECTS = "projects"
    SCIENCE_KEYWORDS = "science-keywords"
    SPATIAL_KEYWORDS = "spatial-keywords"
    TEMPORAL_KEYWORDS = "temporal-keywords"
    ISO_TOPIC_CATEGORIES = "iso-topic-categories"


# Concept scheme names used in KMS URLs
SCHEME_TO_KMS_NAME = {
    KeywordScheme.PROVIDERS: "providers",
    KeywordScheme.PLATFORMS: "platforms",
    KeywordScheme.INSTRUMENTS: "instruments",
    KeywordScheme.PROJECTS: "projects",
    KeywordScheme.SCIENCE_KEYWORDS: "sciencekeywords",
    KeywordScheme.SPATIAL_KEYWORDS: "locations",
    KeywordScheme.TEMPORAL_KEYWORDS: "temporalresolutionrange",
    KeywordScheme.ISO_TOPIC_CATEGORIES: "isotopiccategory",
}

# Column order of each scheme's CSV export
SCHEME_TO_FIELD_NAMES = {
    KeywordScheme.PROVIDERS: [
        "bucket-level-0",
        "bucket-level-1",
        "bucket-level-2",
        "bucket-level-3",
        "short-name",
        "long-name",
        "url",
        "uuid",
    ],
    KeywordScheme.PLATFORMS: [
        "basis",
        "category",
        "sub-category",
        "short-name",
        "long-name",
        "uuid",
    ],
    KeywordScheme.INSTRUMENTS: [
        "category",
        "class",
        "type",
        "subtype",
        "short-name",
        "long-name",
        "uuid",
    ],
    KeywordScheme.PROJECTS: ["bucket", "short-name", "long-name", "uuid"],
    KeywordScheme.SCIENCE_KEYWORDS: [
        "category",
        "topic",
        "term",
        "variable-level-1",
        "variable-level-2",
        "variable-level-3",
        "detailed-variable",
        "uuid",
    ],
    KeywordScheme.SPATIAL_KEYWORDS: [
        "category",
        "type",
        "subregion-1",
        "subregion-2",
        "subregion-3",
        "uuid",
    ],
    KeywordScheme.TEMPORAL_KEYWORDS: ["temporal-resolution-range", "uuid"],
    KeywordScheme.ISO_TOPIC_CATEGORIES: ["iso-topic-category", "uuid"],
}

# A CSV row is only a keyword when this field is populated
SCHEME_TO_LEAF_FIELD = {
    KeywordScheme.PROVIDERS: "short-name",
    KeywordScheme.PLATFORMS: "short-name",
    KeywordScheme.INSTRUMENTS: "short-name",
    KeywordScheme.PROJECTS: "short-name",
    KeywordScheme.SCIENCE_KEYWORDS: "uuid",
    KeywordScheme.SPATIAL_KEYWORDS: "uuid",
    KeywordScheme.TEMPORAL_KEYWORDS: "temporal-resolution-range",
    KeywordScheme.ISO_TOPIC_CATEGORIES: "iso-topic-category",
}

# Fields compared when matching a UMM-C keyword against KMS
SCHEME_TO_FIELDS_FOR_RECORD_LOOKUP = {
    KeywordScheme.SCIENCE_KEYWORDS: [
        "category",
        "topic",
        "term",
        "variable-level-1",
        "variable-level-2",
        "variable-level-3",
    ],
    KeywordScheme.PLATFORMS: ["short-name", "long-name"],
    KeywordScheme.INSTRUMENTS: ["short-name", "long-name"],
    KeywordScheme.PROJECTS: ["short-name", "long-name"],
    KeywordScheme.PROVIDERS: ["short-name", "long-name"],
    KeywordScheme.SPATIAL_KEYWORDS: [
        "category",
        "type",
        "subregion-1",
        "subregion-2",
        "subregion-3",
    ],
}

# GCMD guarantees short names in these schemes are unique ignoring case
SHORT_NAME_SCHEMES = frozenset(
    {KeywordScheme.PROVIDERS, KeywordScheme.PLATFORMS, KeywordScheme.INSTRUMENTS}
)

_KMS_NAME_TO_SCHEME = {name: scheme for scheme, name in SCHEME_TO_KMS_NAME.items()}


def parse_scheme(name: "str | KeywordScheme") -> KeywordScheme:
    """
    Resolve a scheme from its value, its KMS name, or a snake_case spelling.

    Args:
        name: e.g. "science-keywords", "sciencekeywords", "science_keywords"

    Returns:
        The matching KeywordScheme.

    Raises:
        ValueError: If the name is not a known scheme.
    """
    if isinstance(name, KeywordScheme):
        return name

    normalized = str(name).strip().lower().replace("_", "-")
    if normalized in _KMS_NAME_TO_SCHEME:
        return _KMS_NAME_TO_SCHEME[normalized]

    try:
        return KeywordScheme(normalized)
    except ValueError:
        raise ValueError(
            f"Unknown keyword scheme: {name}. "
            f"Supported: {[scheme.value for scheme in KeywordScheme]}"
        ) from None
