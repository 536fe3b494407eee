"""Pydantic models for GCMD keywords as fetched from KMS."""

from pydantic import BaseModel, ConfigDict, Field

from util.kms.schemes import KeywordScheme


class KeywordEntry(BaseModel):
    """
    One GCMD keyword: its hierarchy of field values plus a stable UUID.

    The hierarchy holds only populated fields, in KMS column order, e.g.
    {"category": "CONTINENT", "type": "AFRICA", "subregion-1": "WESTERN AFRICA"}.

    Entries are shared by every index built from a snapshot and must not be
    mutated. Hashing covers the uuid and the hierarchy items, so equal
    entries hash equal.
    """

    model_config = ConfigDict(frozen=True)

    uuid: str
    hierarchy: dict[str, str] = Field(default_factory=dict)

    def get(self, field: str) -> str | None:
        """Return a field value (including "uuid"), or None when absent."""
        if field == "uuid":
            return self.uuid
        return self.hierarchy.get(field)

    @property
    def short_name(self) -> str | None:
        return self.hierarchy.get("short-name")

    def __hash__(self) -> int:
        return hash((self.uuid, frozenset(self.hierarchy.items())))


class VocabularySnapshot(BaseModel):
    """
    Every keyword scheme's entries as returned by one complete KMS fetch.

    This is the only form of the vocabulary that is persisted; all lookup
    indices are derived from it.
    """

    model_config = ConfigDict(frozen=True)

    keywords: dict[KeywordScheme, tuple[KeywordEntry, ...]] = Field(default_factory=dict)

    def entries(self, scheme: KeywordScheme) -> tuple[KeywordEntry, ...]:
        """Return the entries for a scheme, empty if the scheme was not fetched."""
        return self.keywords.get(scheme, ())

    def counts(self) -> dict[str, int]:
        return {scheme.value: len(entries) for scheme, entries in self.keywords.items()}
