"""Read-only snapshots of entity revisions used as update baselines."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

from wikibase_update._frozen import (
    ValueObject,
    alias_map,
    site_link_map,
    term_map,
)
from wikibase_update.exceptions import ValidationError, require
from wikibase_update.models import (
    EntityId,
    EntityKind,
    MonolingualText,
    SiteLink,
    Statement,
)


@dataclass(frozen=True, eq=False)
class EntityDocument(ValueObject):
    """Snapshot of one revision of an entity.

    ``revision_id`` is 0 when the revision is unknown; otherwise updates built
    against this document carry it for edit-conflict detection.
    """

    kind: ClassVar[EntityKind]

    entity_id: EntityId
    revision_id: int = 0

    def __post_init__(self) -> None:
        require(self.entity_id, "Entity ID")
        if self.entity_id.kind is not self.kind:
            raise ValidationError(
                f"{type(self).__name__} cannot hold {self.entity_id.kind.value} "
                f"ID {self.entity_id}"
            )
        if self.revision_id < 0:
            raise ValidationError("Revision ID cannot be negative")

    def with_revision_id(self, revision_id: int) -> Any:
        return replace(self, revision_id=revision_id)


@dataclass(frozen=True, eq=False)
class StatementDocument(EntityDocument):
    statements: tuple[Statement, ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "statements", tuple(self.statements))
        for statement in self.statements:
            require(statement, "Statement")

    def with_statement(self, statement: Statement) -> Any:
        return replace(self, statements=self.statements + (statement,))

    def statement_ids(self) -> frozenset[str]:
        return frozenset(s.id for s in self.statements if s.id)


@dataclass(frozen=True, eq=False)
class LabeledStatementDocument(StatementDocument):
    labels: Mapping[str, MonolingualText] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "labels", term_map(self.labels))

    def with_label(self, label: MonolingualText) -> Any:
        return replace(self, labels={**self.labels, label.language: label})


@dataclass(frozen=True, eq=False)
class TermedStatementDocument(LabeledStatementDocument):
    descriptions: Mapping[str, MonolingualText] = field(default_factory=dict)
    aliases: Mapping[str, tuple[MonolingualText, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "descriptions", term_map(self.descriptions))
        object.__setattr__(self, "aliases", alias_map(self.aliases))

    def with_description(self, description: MonolingualText) -> Any:
        return replace(
            self, descriptions={**self.descriptions, description.language: description}
        )

    def with_aliases(self, language: str, aliases: Iterable[MonolingualText]) -> Any:
        return replace(self, aliases={**self.aliases, language: tuple(aliases)})


@dataclass(frozen=True, eq=False)
class ItemDocument(TermedStatementDocument):
    kind = EntityKind.ITEM

    site_links: Mapping[str, SiteLink] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "site_links", site_link_map(self.site_links))

    def with_site_link(self, link: SiteLink) -> ItemDocument:
        return replace(self, site_links={**self.site_links, link.site_key: link})


@dataclass(frozen=True, eq=False)
class PropertyDocument(TermedStatementDocument):
    kind = EntityKind.PROPERTY

    datatype: str | None = None


@dataclass(frozen=True, eq=False)
class MediaInfoDocument(LabeledStatementDocument):
    kind = EntityKind.MEDIAINFO


@dataclass(frozen=True, eq=False)
class SenseDocument(StatementDocument):
    kind = EntityKind.SENSE

    glosses: Mapping[str, MonolingualText] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "glosses", term_map(self.glosses))

    def with_gloss(self, gloss: MonolingualText) -> SenseDocument:
        return replace(self, glosses={**self.glosses, gloss.language: gloss})


@dataclass(frozen=True, eq=False)
class FormDocument(StatementDocument):
    kind = EntityKind.FORM

    representations: Mapping[str, MonolingualText] = field(default_factory=dict)
    grammatical_features: frozenset[EntityId] = frozenset()

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "representations", term_map(self.representations))
        object.__setattr__(
            self, "grammatical_features", frozenset(self.grammatical_features)
        )

    def with_representation(self, representation: MonolingualText) -> FormDocument:
        return replace(
            self,
            representations={
                **self.representations, representation.language: representation
            },
        )


@dataclass(frozen=True, eq=False)
class LexemeDocument(StatementDocument):
    kind = EntityKind.LEXEME

    lemmas: Mapping[str, MonolingualText] = field(default_factory=dict)
    language: EntityId | None = None
    lexical_category: EntityId | None = None
    senses: tuple[SenseDocument, ...] = ()
    forms: tuple[FormDocument, ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "lemmas", term_map(self.lemmas))
        object.__setattr__(self, "senses", tuple(self.senses))
        object.__setattr__(self, "forms", tuple(self.forms))

    def with_lemma(self, lemma: MonolingualText) -> LexemeDocument:
        return replace(self, lemmas={**self.lemmas, lemma.language: lemma})

    def with_sense(self, sense: SenseDocument) -> LexemeDocument:
        return replace(self, senses=self.senses + (sense,))

    def with_form(self, form: FormDocument) -> LexemeDocument:
        return replace(self, forms=self.forms + (form,))

    def get_sense(self, sense_id: EntityId) -> SenseDocument | None:
        return next((s for s in self.senses if s.entity_id == sense_id), None)

    def get_form(self, form_id: EntityId) -> FormDocument | None:
        return next((f for f in self.forms if f.entity_id == form_id), None)


_DOCUMENT_TYPES: dict[EntityKind, type[EntityDocument]] = {
    cls.kind: cls
    for cls in (
        ItemDocument,
        PropertyDocument,
        MediaInfoDocument,
        LexemeDocument,
        SenseDocument,
        FormDocument,
    )
}


def document_type_for(kind: EntityKind) -> type[EntityDocument]:
    """Return the document class holding revisions of *kind* entities."""
    return _DOCUMENT_TYPES[EntityKind(kind)]

