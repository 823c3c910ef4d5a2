"""Immutable update objects produced by the update builders.

All classes here are frozen, compare by value and are hashable, so they can be
shared freely between threads once constructed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar

from wikibase_update._frozen import (
    ValueObject,
    alias_map,
    freeze,
    site_link_map,
    term_map,
)
from wikibase_update.documents import FormDocument, SenseDocument
from wikibase_update.exceptions import ValidationError, require
from wikibase_update.models import (
    EntityId,
    EntityKind,
    MonolingualText,
    SiteLink,
    Statement,
    check_code,
)

# ---------------------------------------------------------------------------
# Sub-updates
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class TermUpdate(ValueObject):
    """Changes to single-valued terms (labels, descriptions, glosses, ...).

    ``modified`` maps language codes to new terms, ``removed`` lists language
    codes whose term is deleted. A language appears in at most one of them.
    """

    EMPTY: ClassVar[TermUpdate]

    modified: Mapping[str, MonolingualText] = field(default_factory=dict)
    removed: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "modified", term_map(self.modified))
        object.__setattr__(self, "removed", frozenset(self.removed))
        for language in self.removed:
            check_code(language, "Removed language code")
        overlap = self.removed & self.modified.keys()
        if overlap:
            raise ValidationError(
                f"Terms cannot be both modified and removed: {sorted(overlap)}"
            )

    @property
    def is_empty(self) -> bool:
        return not self.modified and not self.removed


TermUpdate.EMPTY = TermUpdate()


@dataclass(frozen=True, eq=False)
class AliasUpdate(ValueObject):
    """Replacement alias lists keyed by language code.

    Each list is the complete new set of aliases for its language; an empty
    list removes all aliases. Languages that are absent are left untouched.
    """

    EMPTY: ClassVar[AliasUpdate]

    aliases: Mapping[str, tuple[MonolingualText, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "aliases", alias_map(self.aliases))
        for language, values in self.aliases.items():
            if len(set(values)) != len(values):
                raise ValidationError(f"Aliases for {language!r} must be unique")

    @property
    def is_empty(self) -> bool:
        return not self.aliases


AliasUpdate.EMPTY = AliasUpdate()


@dataclass(frozen=True, eq=False)
class StatementUpdate(ValueObject):
    """Added, replaced and removed statements of one entity."""

    EMPTY: ClassVar[StatementUpdate]

    added: tuple[Statement, ...] = ()
    replaced: Mapping[str, Statement] = field(default_factory=dict)
    removed: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        added = tuple(dict.fromkeys(self.added))
        for statement in added:
            require(statement, "Added statement")
            if statement.id:
                raise ValidationError("Added statements cannot have an ID")
        object.__setattr__(self, "added", added)

        replaced = self.replaced
        if not isinstance(replaced, Mapping):
            replaced = {require(s, "Replaced statement").id: s for s in replaced}
        for statement_id, statement in replaced.items():
            require(statement, "Replaced statement")
            if not statement.id:
                raise ValidationError("Replaced statements must have an ID")
            if statement.id != statement_id:
                raise ValidationError(
                    f"Statement ID {statement.id!r} does not match key {statement_id!r}"
                )
        object.__setattr__(self, "replaced", freeze(replaced))

        object.__setattr__(self, "removed", frozenset(self.removed))
        for statement_id in self.removed:
            if not statement_id:
                raise ValidationError("Removed statement ID cannot be empty")
        overlap = self.removed & self.replaced.keys()
        if overlap:
            raise ValidationError(
                f"Statements cannot be both replaced and removed: {sorted(overlap)}"
            )

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.replaced and not self.removed


StatementUpdate.EMPTY = StatementUpdate()


@dataclass(frozen=True, eq=False)
class SiteLinkUpdate(ValueObject):
    """Modified and removed site links of an item, keyed by site key."""

    EMPTY: ClassVar[SiteLinkUpdate]

    modified: Mapping[str, SiteLink] = field(default_factory=dict)
    removed: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        modified = self.modified
        if isinstance(modified, Mapping):
            for site_key, link in modified.items():
                if require(link, "Site link").site_key != site_key:
                    raise ValidationError(
                        f"Site link for {link.site_key!r} does not match key {site_key!r}"
                    )
        object.__setattr__(self, "modified", site_link_map(modified))
        object.__setattr__(self, "removed", frozenset(self.removed))
        for site_key in self.removed:
            check_code(site_key, "Removed site key")
        overlap = self.removed & self.modified.keys()
        if overlap:
            raise ValidationError(
                f"Site links cannot be both modified and removed: {sorted(overlap)}"
            )

    @property
    def is_empty(self) -> bool:
        return not self.modified and not self.removed


SiteLinkUpdate.EMPTY = SiteLinkUpdate()

# ---------------------------------------------------------------------------
# Entity updates
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class EntityUpdate(ValueObject):
    """Collection of changes to one entity.

    ``base_revision_id`` is the revision the changes were made against, or 0
    when unknown. It is used downstream to detect edit conflicts.
    """

    kind: ClassVar[EntityKind]

    entity_id: EntityId
    base_revision_id: int = 0

    def __post_init__(self) -> None:
        require(self.entity_id, "Entity ID")
        if self.entity_id.kind is not self.kind:
            raise ValidationError(
                f"{type(self).__name__} cannot update {self.entity_id.kind.value} "
                f"{self.entity_id}"
            )
        if self.entity_id.is_placeholder:
            raise ValidationError(f"Cannot update placeholder ID {self.entity_id}")
        if self.base_revision_id < 0:
            raise ValidationError("Base revision ID cannot be negative")

    @property
    def is_empty(self) -> bool:
        return True


@dataclass(frozen=True, eq=False)
class StatementDocumentUpdate(EntityUpdate):
    statements: StatementUpdate = StatementUpdate.EMPTY

    def __post_init__(self) -> None:
        super().__post_init__()
        require(self.statements, "Statement update")
        for statement in self.statements.added + tuple(self.statements.replaced.values()):
            if statement.subject != self.entity_id:
                raise ValidationError(
                    f"Statement about {statement.subject} in update of {self.entity_id}"
                )

    @property
    def is_empty(self) -> bool:
        return super().is_empty and self.statements.is_empty


@dataclass(frozen=True, eq=False)
class LabeledStatementDocumentUpdate(StatementDocumentUpdate):
    labels: TermUpdate = TermUpdate.EMPTY

    def __post_init__(self) -> None:
        super().__post_init__()
        require(self.labels, "Label update")

    @property
    def is_empty(self) -> bool:
        return super().is_empty and self.labels.is_empty


@dataclass(frozen=True, eq=False)
class TermedStatementDocumentUpdate(LabeledStatementDocumentUpdate):
    descriptions: TermUpdate = TermUpdate.EMPTY
    aliases: AliasUpdate = AliasUpdate.EMPTY

    def __post_init__(self) -> None:
        super().__post_init__()
        require(self.descriptions, "Description update")
        require(self.aliases, "Alias update")

    @property
    def is_empty(self) -> bool:
        return (
            super().is_empty
            and self.descriptions.is_empty
            and self.aliases.is_empty
        )


@dataclass(frozen=True, eq=False)
class ItemUpdate(TermedStatementDocumentUpdate):
    kind = EntityKind.ITEM

    site_links: SiteLinkUpdate = SiteLinkUpdate.EMPTY

    def __post_init__(self) -> None:
        super().__post_init__()
        require(self.site_links, "Site link update")

    @property
    def is_empty(self) -> bool:
        return super().is_empty and self.site_links.is_empty


@dataclass(frozen=True, eq=False)
class PropertyUpdate(TermedStatementDocumentUpdate):
    kind = EntityKind.PROPERTY


@dataclass(frozen=True, eq=False)
class MediaInfoUpdate(LabeledStatementDocumentUpdate):
    kind = EntityKind.MEDIAINFO


@dataclass(frozen=True, eq=False)
class SenseUpdate(StatementDocumentUpdate):
    kind = EntityKind.SENSE

    glosses: TermUpdate = TermUpdate.EMPTY

    def __post_init__(self) -> None:
        super().__post_init__()
        require(self.glosses, "Gloss update")

    @property
    def is_empty(self) -> bool:
        return super().is_empty and self.glosses.is_empty


@dataclass(frozen=True, eq=False)
class FormUpdate(StatementDocumentUpdate):
    """Changes to a form; ``grammatical_features`` is None when unchanged."""

    kind = EntityKind.FORM

    representations: TermUpdate = TermUpdate.EMPTY
    grammatical_features: frozenset[EntityId] | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        require(self.representations, "Representation update")
        if self.grammatical_features is not None:
            features = frozenset(self.grammatical_features)
            for feature in features:
                if require(feature, "Grammatical feature").kind is not EntityKind.ITEM:
                    raise ValidationError(
                        f"Grammatical feature must be an item ID, got {feature}"
                    )
            object.__setattr__(self, "grammatical_features", features)

    @property
    def is_empty(self) -> bool:
        return (
            super().is_empty
            and self.representations.is_empty
            and self.grammatical_features is None
        )


@dataclass(frozen=True, eq=False)
class LexemeUpdate(StatementDocumentUpdate):
    """Changes to a lexeme and to its senses and forms.

    ``language`` and ``lexical_category`` are None when unchanged. New senses
    and forms carry placeholder IDs; updated ones are keyed by their ID.
    """

    kind = EntityKind.LEXEME

    lemmas: TermUpdate = TermUpdate.EMPTY
    language: EntityId | None = None
    lexical_category: EntityId | None = None
    added_senses: tuple[SenseDocument, ...] = ()
    updated_senses: Mapping[EntityId, SenseUpdate] = field(default_factory=dict)
    removed_senses: frozenset[EntityId] = frozenset()
    added_forms: tuple[FormDocument, ...] = ()
    updated_forms: Mapping[EntityId, FormUpdate] = field(default_factory=dict)
    removed_forms: frozenset[EntityId] = frozenset()

    def __post_init__(self) -> None:
        super().__post_init__()
        require(self.lemmas, "Lemma update")
        for name in ("language", "lexical_category"):
            value = getattr(self, name)
            if value is not None and value.kind is not EntityKind.ITEM:
                raise ValidationError(f"Lexeme {name} must be an item ID, got {value}")
        for kind, added, updated, removed in (
            (EntityKind.SENSE, "added_senses", "updated_senses", "removed_senses"),
            (EntityKind.FORM, "added_forms", "updated_forms", "removed_forms"),
        ):
            self._check_sub_entities(kind, added, updated, removed)

    def _check_sub_entities(
        self, kind: EntityKind, added: str, updated: str, removed: str
    ) -> None:
        added_docs = tuple(getattr(self, added))
        for document in added_docs:
            require(document, "Added sub-entity")
            if not document.entity_id.is_placeholder:
                raise ValidationError(
                    f"Added {kind.value} must have a placeholder ID, "
                    f"got {document.entity_id}"
                )
        updates = getattr(self, updated)
        if not isinstance(updates, Mapping):
            updates = {require(u, "Sub-entity update").entity_id: u for u in updates}
        for sub_id, update in updates.items():
            require(update, "Sub-entity update")
            if update.entity_id != sub_id:
                raise ValidationError(
                    f"Update for {update.entity_id} does not match key {sub_id}"
                )
            self._check_owned(kind, sub_id)
        removed_ids = frozenset(getattr(self, removed))
        for sub_id in removed_ids:
            self._check_owned(kind, require(sub_id, "Removed sub-entity ID"))
        overlap = removed_ids & updates.keys()
        if overlap:
            raise ValidationError(
                f"{kind.value.capitalize()}s cannot be both updated and removed: "
                f"{sorted(str(i) for i in overlap)}"
            )
        object.__setattr__(self, added, added_docs)
        object.__setattr__(self, updated, freeze(updates))
        object.__setattr__(self, removed, removed_ids)

    def _check_owned(self, kind: EntityKind, sub_id: EntityId) -> None:
        if sub_id.kind is not kind or sub_id.lexeme_id != self.entity_id:
            raise ValidationError(
                f"{sub_id} is not a {kind.value} of lexeme {self.entity_id}"
            )

    @property
    def is_empty(self) -> bool:
        return (
            super().is_empty
            and self.lemmas.is_empty
            and self.language is None
            and self.lexical_category is None
            and not self.added_senses
            and not self.updated_senses
            and not self.removed_senses
            and not self.added_forms
            and not self.updated_forms
            and not self.removed_forms
        )

