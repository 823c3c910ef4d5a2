"""Entity identities and the value types carried by updates."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from wikibase_update.exceptions import ValidationError, require

WIKIDATA_SITE_IRI = "http://www.wikidata.org/entity/"

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EntityKind(str, Enum):
    """Kinds of Wikibase entities that can be updated."""

    ITEM = "item"
    PROPERTY = "property"
    LEXEME = "lexeme"
    FORM = "form"
    SENSE = "sense"
    MEDIAINFO = "mediainfo"


class StatementRank(str, Enum):
    """Rank of a statement within its statement group."""

    PREFERRED = "preferred"
    NORMAL = "normal"
    DEPRECATED = "deprecated"


_ID_PATTERNS: dict[EntityKind, re.Pattern[str]] = {
    EntityKind.ITEM: re.compile(r"^Q(0|[1-9]\d*)$"),
    EntityKind.PROPERTY: re.compile(r"^P(0|[1-9]\d*)$"),
    EntityKind.LEXEME: re.compile(r"^L(0|[1-9]\d*)$"),
    EntityKind.FORM: re.compile(r"^L(0|[1-9]\d*)-F(0|[1-9]\d*)$"),
    EntityKind.SENSE: re.compile(r"^L(0|[1-9]\d*)-S(0|[1-9]\d*)$"),
    EntityKind.MEDIAINFO: re.compile(r"^M(0|[1-9]\d*)$"),
}

PLACEHOLDER_IDS: dict[EntityKind, str] = {
    EntityKind.ITEM: "Q0",
    EntityKind.PROPERTY: "P0",
    EntityKind.LEXEME: "L0",
    EntityKind.FORM: "L0-F0",
    EntityKind.SENSE: "L0-S0",
    EntityKind.MEDIAINFO: "M0",
}


def check_code(value: str, name: str) -> str:
    """Return *value* if it is a non-blank string (language code, site key)."""
    check_text(value, name)
    if not value.strip():
        raise ValidationError(f"{name} cannot be blank")
    return value


def check_text(value: str, name: str) -> str:
    require(value, name)
    if not isinstance(value, str):
        raise ValidationError(
            f"{name} must be a string, got {type(value).__name__}"
        )
    return value


def _kind_of(entity_id: str) -> EntityKind | None:
    for kind, pattern in _ID_PATTERNS.items():
        if pattern.match(entity_id):
            return kind
    return None


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EntityId:
    """Identifier of an entity on a Wikibase site.

    The entity kind is derived from the shape of the ID, e.g. ``Q42`` is an
    item and ``L7-S2`` is a sense of lexeme ``L7``. The ``*0`` IDs are
    placeholders for entities that do not exist yet.
    """

    id: str
    site_iri: str = WIKIDATA_SITE_IRI

    def __post_init__(self) -> None:
        check_text(self.id, "Entity ID")
        require(self.site_iri, "Site IRI")
        if _kind_of(self.id) is None:
            raise ValidationError(f"Unrecognized entity ID: {self.id!r}")

    @classmethod
    def placeholder(
        cls, kind: EntityKind, site_iri: str = WIKIDATA_SITE_IRI
    ) -> EntityId:
        """Return the placeholder ID for *kind*."""
        return cls(PLACEHOLDER_IDS[EntityKind(kind)], site_iri)

    @property
    def kind(self) -> EntityKind:
        return _kind_of(self.id)  # type: ignore[return-value]

    @property
    def is_placeholder(self) -> bool:
        return self.id == PLACEHOLDER_IDS[self.kind]

    @property
    def iri(self) -> str:
        return self.site_iri + self.id

    @property
    def lexeme_id(self) -> EntityId | None:
        """The owning lexeme of a form or sense, the ID itself for lexemes."""
        if self.kind is EntityKind.LEXEME:
            return self
        if self.kind in (EntityKind.FORM, EntityKind.SENSE):
            return EntityId(self.id.split("-", 1)[0], self.site_iri)
        return None

    def __str__(self) -> str:
        return self.id


def item_id(id: str, site_iri: str = WIKIDATA_SITE_IRI) -> EntityId:
    return _typed_id(id, site_iri, EntityKind.ITEM)


def property_id(id: str, site_iri: str = WIKIDATA_SITE_IRI) -> EntityId:
    return _typed_id(id, site_iri, EntityKind.PROPERTY)


def lexeme_id(id: str, site_iri: str = WIKIDATA_SITE_IRI) -> EntityId:
    return _typed_id(id, site_iri, EntityKind.LEXEME)


def form_id(id: str, site_iri: str = WIKIDATA_SITE_IRI) -> EntityId:
    return _typed_id(id, site_iri, EntityKind.FORM)


def sense_id(id: str, site_iri: str = WIKIDATA_SITE_IRI) -> EntityId:
    return _typed_id(id, site_iri, EntityKind.SENSE)


def mediainfo_id(id: str, site_iri: str = WIKIDATA_SITE_IRI) -> EntityId:
    return _typed_id(id, site_iri, EntityKind.MEDIAINFO)


def _typed_id(id: str, site_iri: str, kind: EntityKind) -> EntityId:
    entity_id = EntityId(id, site_iri)
    if entity_id.kind is not kind:
        raise ValidationError(f"{id!r} is not a {kind.value} ID")
    return entity_id


@dataclass(frozen=True, slots=True)
class MonolingualText:
    """A language-tagged text value (label, description, alias, gloss)."""

    text: str
    language: str

    def __post_init__(self) -> None:
        check_text(self.text, "Term text")
        check_code(self.language, "Language code")


@dataclass(frozen=True, slots=True)
class Statement:
    """A claim about an entity, identified by its statement ID once saved.

    Only the parts needed to stage updates are modelled; ``value`` is opaque
    but must be hashable.
    """

    subject: EntityId
    property_id: EntityId
    value: Any
    id: str = ""
    rank: StatementRank = StatementRank.NORMAL

    def __post_init__(self) -> None:
        require(self.subject, "Statement subject")
        require(self.property_id, "Statement property")
        require(self.id, "Statement ID")
        if self.property_id.kind is not EntityKind.PROPERTY:
            raise ValidationError(
                f"Statement property must be a property ID, got {self.property_id}"
            )
        try:
            hash(self.value)
        except TypeError as e:
            raise ValidationError("Statement value must be hashable") from e
        object.__setattr__(self, "rank", StatementRank(self.rank))

    def with_id(self, id: str) -> Statement:
        """Return a copy of this statement carrying *id*."""
        return replace(self, id=id)


@dataclass(frozen=True, slots=True)
class SiteLink:
    """A link from an item to a page on a client site (e.g. ``enwiki``)."""

    site_key: str
    page_title: str
    badges: frozenset[EntityId] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        check_code(self.site_key, "Site key")
        check_text(self.page_title, "Page title")
        object.__setattr__(self, "badges", frozenset(self.badges))


def texts_of(values: Iterable[MonolingualText]) -> list[str]:
    return [v.text for v in values]
