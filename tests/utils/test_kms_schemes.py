"""Tests for KMS keyword scheme configuration."""

import pytest

from util.kms.schemes import (
    SCHEME_TO_FIELD_NAMES,
    SCHEME_TO_FIELDS_FOR_RECORD_LOOKUP,
    SCHEME_TO_KMS_NAME,
    SCHEME_TO_LEAF_FIELD,
    SHORT_NAME_SCHEMES,
    KeywordScheme,
    parse_scheme,
)


class TestParseScheme:
    """Tests for parse_scheme function."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("science-keywords", KeywordScheme.SCIENCE_KEYWORDS),
            ("sciencekeywords", KeywordScheme.SCIENCE_KEYWORDS),
            ("science_keywords", KeywordScheme.SCIENCE_KEYWORDS),
            ("locations", KeywordScheme.SPATIAL_KEYWORDS),
            ("Platforms", KeywordScheme.PLATFORMS),
            (KeywordScheme.PROVIDERS, KeywordScheme.PROVIDERS),
        ],
    )
    def test_resolves_known_names(self, name, expected):
        assert parse_scheme(name) is expected

    def test_rejects_unknown_names(self):
        with pytest.raises(ValueError, match="Unknown keyword scheme"):
            parse_scheme("granules")


class TestSchemeConfiguration:
    """Consistency checks across the static scheme tables."""

    def test_every_scheme_is_fetchable(self):
        assert set(SCHEME_TO_KMS_NAME) == set(KeywordScheme)
        assert set(SCHEME_TO_FIELD_NAMES) == set(KeywordScheme)
        assert set(SCHEME_TO_LEAF_FIELD) == set(KeywordScheme)

    def test_field_names_end_with_uuid(self):
        for fields in SCHEME_TO_FIELD_NAMES.values():
            assert fields[-1] == "uuid"

    def test_lookup_fields_exist_in_scheme(self):
        for scheme, fields in SCHEME_TO_FIELDS_FOR_RECORD_LOOKUP.items():
            assert set(fields) <= set(SCHEME_TO_FIELD_NAMES[scheme])

    def test_short_name_schemes_have_short_names(self):
        for scheme in SHORT_NAME_SCHEMES:
            assert "short-name" in SCHEME_TO_FIELD_NAMES[scheme]
