"""Update builders for every kind of entity.

A builder collects changes to one entity and turns them into an immutable
update object with build(). Builders created with for_base_revision() know
the current state of the entity and silently drop edits that would not change
it; builders created with for_entity_id() keep every edit.

Capabilities (statements, labels, descriptions, aliases, site links) are
mixins, and each concrete builder is a composition of the ones its entity
kind supports::

    builder = ItemUpdateBuilder.for_base_revision(item)
    builder.update_labels(TermUpdateBuilder.create().remove_term("en").build())
    builder.set_aliases("sk", ["Slovak"])
    update = builder.build()

Builders are mutable and not safe for concurrent use; callers sharing one
between threads must synchronize access themselves. The update objects they
produce are immutable.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar

from wikibase_update.documents import (
    EntityDocument,
    FormDocument,
    SenseDocument,
)
from wikibase_update.exceptions import ConflictError, ValidationError, require
from wikibase_update.models import EntityId, EntityKind, SiteLink
from wikibase_update.sitelinks import SiteLinkUpdateBuilder
from wikibase_update.statements import StatementUpdateBuilder
from wikibase_update.terms import AliasUpdateBuilder, TermUpdateBuilder
from wikibase_update.updates import (
    AliasUpdate,
    EntityUpdate,
    FormUpdate,
    ItemUpdate,
    LexemeUpdate,
    MediaInfoUpdate,
    PropertyUpdate,
    SenseUpdate,
    SiteLinkUpdate,
    StatementUpdate,
    TermUpdate,
)

logger = logging.getLogger(__name__)

_BUILDERS: dict[EntityKind, type[EntityUpdateBuilder]] = {}


def _register(cls: type[EntityUpdateBuilder]) -> type[EntityUpdateBuilder]:
    """Class decorator: make *cls* the builder for its entity kind."""
    _BUILDERS[cls.kind] = cls
    return cls


class EntityUpdateBuilder:
    """Root of the builder family.

    Calling for_entity_id() or for_base_revision() on an abstract family
    root returns the concrete builder registered for the entity kind, provided
    it belongs to that family.
    """

    kind: ClassVar[EntityKind | None] = None
    update_type: ClassVar[type[EntityUpdate]] = EntityUpdate

    def __init__(
        self, entity_id: EntityId, base_revision: EntityDocument | None = None
    ) -> None:
        require(entity_id, "Entity ID")
        if entity_id.kind is not self.kind:
            raise ValidationError(
                f"{type(self).__name__} cannot update {entity_id.kind.value} {entity_id}"
            )
        if entity_id.is_placeholder:
            raise ValidationError(f"Cannot update placeholder ID {entity_id}")
        if base_revision is not None and base_revision.entity_id != entity_id:
            raise ValidationError(
                f"Base revision of {base_revision.entity_id} given for {entity_id}"
            )
        self._entity_id = entity_id
        self._base_revision = base_revision

    @classmethod
    def _resolve(cls, kind: EntityKind) -> type[EntityUpdateBuilder]:
        if cls.kind is not None:
            if kind is not cls.kind:
                raise ValidationError(
                    f"{cls.__name__} cannot update {kind.value} entities"
                )
            return cls
        builder_type = _BUILDERS.get(kind)
        if builder_type is None or not issubclass(builder_type, cls):
            raise ValidationError(
                f"Unrecognized entity type for {cls.__name__}: {kind.value}"
            )
        return builder_type

    @classmethod
    def for_entity_id(cls, entity_id: EntityId) -> Any:
        """Create a builder for the entity with *entity_id*, without baseline.

        Raises:
            MissingValueError: if *entity_id* is None
            ValidationError: if the ID is a placeholder or of a kind this
                builder family does not handle
        """
        require(entity_id, "Entity ID")
        if entity_id.is_placeholder:
            raise ValidationError(f"Cannot update placeholder ID {entity_id}")
        return cls._resolve(entity_id.kind)(entity_id)

    @classmethod
    def for_base_revision(cls, revision: EntityDocument) -> Any:
        """Create a builder that checks edits against *revision*.

        The revision need not be the latest one. Its revision ID, if any, is
        carried by the built update for edit-conflict detection.
        """
        require(revision, "Base entity revision")
        if not isinstance(revision, EntityDocument):
            raise ValidationError(
                f"Unrecognized entity document type: {type(revision).__name__}"
            )
        if revision.entity_id.is_placeholder:
            raise ValidationError(
                f"Base revision has placeholder ID {revision.entity_id}"
            )
        return cls._resolve(revision.kind)(revision.entity_id, revision)

    @property
    def entity_id(self) -> EntityId:
        return self._entity_id

    @property
    def base_revision(self) -> EntityDocument | None:
        return self._base_revision

    @property
    def base_revision_id(self) -> int:
        return self._base_revision.revision_id if self._base_revision else 0

    def _baseline(self, name: str) -> Any:
        """Current value of document field *name*, or None without baseline."""
        if self._base_revision is None:
            return None
        return getattr(self._base_revision, name)

    def _merged_terms(
        self, name: str, current: TermUpdate, update: TermUpdate
    ) -> TermUpdate:
        require(update, "Update")
        base = self._baseline(name)
        builder = (
            TermUpdateBuilder.for_terms(base)
            if base is not None
            else TermUpdateBuilder.create()
        )
        return builder.apply(current).apply(update).build()

    def apply(self, update: EntityUpdate) -> Any:
        """Merge a built update of the same entity into this builder.

        Every part of *update* is replayed through the setters, so changes
        redundant with the base revision are dropped. On failure the builder
        is left as it was.

        Raises:
            ValidationError: if *update* is for another entity
            ConflictError: if *update* was built against another revision
        """
        require(update, "Update")
        if not isinstance(update, self.update_type):
            raise ValidationError(
                f"Cannot apply {type(update).__name__} in {type(self).__name__}"
            )
        if update.entity_id != self._entity_id:
            raise ValidationError(
                f"Cannot apply update of {update.entity_id} to {self._entity_id}"
            )
        if (
            update.base_revision_id
            and self.base_revision_id
            and update.base_revision_id != self.base_revision_id
        ):
            raise ConflictError(
                f"Update based on revision {update.base_revision_id} cannot be "
                f"merged into revision {self.base_revision_id}"
            )
        logger.debug(f"Merging update of {update.entity_id}")
        saved = dict(self.__dict__)
        try:
            self._apply(update)
        except BaseException:
            self.__dict__.update(saved)
            raise
        return self

    def _apply(self, update: Any) -> None:
        """Replay *update*; capability mixins extend this."""

    def _build_fields(self) -> dict[str, Any]:
        return {}

    def build(self) -> Any:
        """Create an update object from the changes collected so far.

        The builder remains usable; later changes do not affect the result.
        """
        return self.update_type(
            entity_id=self._entity_id,
            base_revision_id=self.base_revision_id,
            **self._build_fields(),
        )


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

class StatementsMixin:
    """Capability: add, replace and remove statements."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._statements = StatementUpdate.EMPTY

    def update_statements(self, update: StatementUpdate) -> Any:
        """Accumulate statement changes. Calls override earlier changes
        to the same statement ID."""
        require(update, "Statement update")
        self._statements = (
            StatementUpdateBuilder.for_entity(self._entity_id)
            .apply(self._statements)
            .apply(update)
            .build()
        )
        return self

    def _apply(self, update: Any) -> None:
        super()._apply(update)
        self.update_statements(update.statements)

    def _build_fields(self) -> dict[str, Any]:
        fields = super()._build_fields()
        fields["statements"] = self._statements
        return fields


class LabelsMixin:
    """Capability: single-valued labels."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._labels = TermUpdate.EMPTY

    def update_labels(self, update: TermUpdate) -> Any:
        """Accumulate label changes; redundant ones are dropped when the
        base revision is known."""
        self._labels = self._merged_terms("labels", self._labels, update)
        return self

    def _apply(self, update: Any) -> None:
        super()._apply(update)
        self.update_labels(update.labels)

    def _build_fields(self) -> dict[str, Any]:
        fields = super()._build_fields()
        fields["labels"] = self._labels
        return fields


class DescriptionsMixin:
    """Capability: single-valued descriptions."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._descriptions = TermUpdate.EMPTY

    def update_descriptions(self, update: TermUpdate) -> Any:
        """Accumulate description changes; redundant ones are dropped when
        the base revision is known."""
        self._descriptions = self._merged_terms(
            "descriptions", self._descriptions, update
        )
        return self

    def _apply(self, update: Any) -> None:
        super()._apply(update)
        self.update_descriptions(update.descriptions)

    def _build_fields(self) -> dict[str, Any]:
        fields = super()._build_fields()
        fields["descriptions"] = self._descriptions
        return fields


class AliasesMixin:
    """Capability: per-language alias lists."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._aliases = AliasUpdate.EMPTY

    def _alias_builder(self) -> AliasUpdateBuilder:
        base = self._baseline("aliases")
        builder = (
            AliasUpdateBuilder.for_aliases(base)
            if base is not None
            else AliasUpdateBuilder.create()
        )
        return builder.apply(self._aliases)

    def set_aliases(self, language: str, aliases: Iterable[str]) -> Any:
        """Replace the aliases for *language*; an empty list removes them.

        Discards any earlier aliases set for the language. When the base
        revision is known and already has exactly these aliases, the
        language is left untouched.

        Raises:
            MissingValueError: if *language*, *aliases* or an alias is None
            ValidationError: if *language* is blank or aliases repeat
        """
        self._aliases = self._alias_builder().set_aliases(language, aliases).build()
        return self

    def update_aliases(self, update: AliasUpdate) -> Any:
        """Call set_aliases() for every language in *update*."""
        require(update, "Alias update")
        self._aliases = self._alias_builder().apply(update).build()
        return self

    def _apply(self, update: Any) -> None:
        super()._apply(update)
        self.update_aliases(update.aliases)

    def _build_fields(self) -> dict[str, Any]:
        fields = super()._build_fields()
        fields["aliases"] = self._aliases
        return fields


class SiteLinksMixin:
    """Capability: site links (items only)."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._site_links = SiteLinkUpdate.EMPTY

    def _site_link_builder(self) -> SiteLinkUpdateBuilder:
        return SiteLinkUpdateBuilder.create().apply(self._site_links)

    def set_site_link(self, link: SiteLink) -> Any:
        """Add or replace the site link for its site key."""
        self._site_links = self._site_link_builder().set_site_link(link).build()
        return self

    def remove_site_link(self, site_key: str) -> Any:
        """Remove the site link for *site_key*."""
        self._site_links = self._site_link_builder().remove_site_link(site_key).build()
        return self

    def update_site_links(self, update: SiteLinkUpdate) -> Any:
        require(update, "Site link update")
        self._site_links = self._site_link_builder().apply(update).build()
        return self

    def _apply(self, update: Any) -> None:
        super()._apply(update)
        self.update_site_links(update.site_links)

    def _build_fields(self) -> dict[str, Any]:
        fields = super()._build_fields()
        fields["site_links"] = self._site_links
        return fields


# ---------------------------------------------------------------------------
# Builder families
# ---------------------------------------------------------------------------

class StatementDocumentUpdateBuilder(StatementsMixin, EntityUpdateBuilder):
    """Builders of entities that have statements (every kind)."""


class LabeledStatementDocumentUpdateBuilder(
    LabelsMixin, StatementDocumentUpdateBuilder
):
    """Builders of entities with labels and statements."""


class TermedStatementDocumentUpdateBuilder(
    DescriptionsMixin, AliasesMixin, LabeledStatementDocumentUpdateBuilder
):
    """Builders of entities with labels, descriptions, aliases, statements."""


@_register
class ItemUpdateBuilder(SiteLinksMixin, TermedStatementDocumentUpdateBuilder):
    kind = EntityKind.ITEM
    update_type = ItemUpdate


@_register
class PropertyUpdateBuilder(TermedStatementDocumentUpdateBuilder):
    kind = EntityKind.PROPERTY
    update_type = PropertyUpdate


@_register
class MediaInfoUpdateBuilder(LabeledStatementDocumentUpdateBuilder):
    kind = EntityKind.MEDIAINFO
    update_type = MediaInfoUpdate


@_register
class SenseUpdateBuilder(StatementDocumentUpdateBuilder):
    """Builder of sense updates: glosses and statements."""

    kind = EntityKind.SENSE
    update_type = SenseUpdate

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._glosses = TermUpdate.EMPTY

    def update_glosses(self, update: TermUpdate) -> SenseUpdateBuilder:
        self._glosses = self._merged_terms("glosses", self._glosses, update)
        return self

    def _apply(self, update: SenseUpdate) -> None:
        super()._apply(update)
        self.update_glosses(update.glosses)

    def _build_fields(self) -> dict[str, Any]:
        fields = super()._build_fields()
        fields["glosses"] = self._glosses
        return fields


@_register
class FormUpdateBuilder(StatementDocumentUpdateBuilder):
    """Builder of form updates: representations, features, statements."""

    kind = EntityKind.FORM
    update_type = FormUpdate

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._representations = TermUpdate.EMPTY
        self._grammatical_features: frozenset[EntityId] | None = None

    def update_representations(self, update: TermUpdate) -> FormUpdateBuilder:
        self._representations = self._merged_terms(
            "representations", self._representations, update
        )
        return self

    def set_grammatical_features(
        self, features: Iterable[EntityId]
    ) -> FormUpdateBuilder:
        """Replace the complete set of grammatical features (item IDs)."""
        require(features, "Grammatical features")
        features = frozenset(features)
        for feature in features:
            if require(feature, "Grammatical feature").kind is not EntityKind.ITEM:
                raise ValidationError(
                    f"Grammatical feature must be an item ID, got {feature}"
                )
        if features == self._baseline("grammatical_features"):
            logger.debug(f"Dropping redundant grammatical features of {self._entity_id}")
            self._grammatical_features = None
        else:
            self._grammatical_features = features
        return self

    def _apply(self, update: FormUpdate) -> None:
        super()._apply(update)
        self.update_representations(update.representations)
        if update.grammatical_features is not None:
            self.set_grammatical_features(update.grammatical_features)

    def _build_fields(self) -> dict[str, Any]:
        fields = super()._build_fields()
        fields["representations"] = self._representations
        fields["grammatical_features"] = self._grammatical_features
        return fields


@_register
class LexemeUpdateBuilder(StatementDocumentUpdateBuilder):
    """Builder of lexeme updates, including changes to senses and forms."""

    kind = EntityKind.LEXEME
    update_type = LexemeUpdate

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._lemmas = TermUpdate.EMPTY
        self._language: EntityId | None = None
        self._lexical_category: EntityId | None = None
        self._added_senses: tuple[SenseDocument, ...] = ()
        self._updated_senses: dict[EntityId, SenseUpdate] = {}
        self._removed_senses: frozenset[EntityId] = frozenset()
        self._added_forms: tuple[FormDocument, ...] = ()
        self._updated_forms: dict[EntityId, FormUpdate] = {}
        self._removed_forms: frozenset[EntityId] = frozenset()

    def update_lemmas(self, update: TermUpdate) -> LexemeUpdateBuilder:
        self._lemmas = self._merged_terms("lemmas", self._lemmas, update)
        return self

    def _item_or_unchanged(self, name: str, value: EntityId) -> EntityId | None:
        require(value, name.replace("_", " ").capitalize())
        if value.kind is not EntityKind.ITEM:
            raise ValidationError(f"Lexeme {name} must be an item ID, got {value}")
        if value == self._baseline(name):
            logger.debug(f"Dropping redundant {name} of {self._entity_id}")
            return None
        return value

    def set_language(self, language: EntityId) -> LexemeUpdateBuilder:
        """Set the language item of the lexeme."""
        self._language = self._item_or_unchanged("language", language)
        return self

    def set_lexical_category(self, category: EntityId) -> LexemeUpdateBuilder:
        """Set the lexical category item of the lexeme."""
        self._lexical_category = self._item_or_unchanged("lexical_category", category)
        return self

    # -- senses and forms ------------------------------------------------

    def _check_owned(self, kind: EntityKind, sub_id: EntityId) -> None:
        if sub_id.kind is not kind or sub_id.lexeme_id != self._entity_id:
            raise ValidationError(
                f"{sub_id} is not a {kind.value} of lexeme {self._entity_id}"
            )

    def _check_new(self, kind: EntityKind, document: Any, doc_type: type) -> None:
        require(document, f"New {kind.value}")
        if not isinstance(document, doc_type):
            raise ValidationError(f"Expected {doc_type.__name__}")
        if not document.entity_id.is_placeholder:
            raise ValidationError(
                f"New {kind.value} must have a placeholder ID, got {document.entity_id}"
            )

    def _merged_sub_update(
        self,
        kind: EntityKind,
        update: Any,
        pending: Mapping[EntityId, Any],
        removed: frozenset[EntityId],
        builder_type: type[EntityUpdateBuilder],
    ) -> Any:
        require(update, f"{kind.value.capitalize()} update")
        sub_id = update.entity_id
        self._check_owned(kind, sub_id)
        if sub_id in removed:
            raise ValidationError(f"Cannot update removed {kind.value} {sub_id}")
        if self._base_revision is not None:
            lookup = (
                self._base_revision.get_sense
                if kind is EntityKind.SENSE
                else self._base_revision.get_form
            )
            document = lookup(sub_id)
            if document is None:
                raise ValidationError(
                    f"Cannot update {kind.value} {sub_id} that does not exist"
                )
            builder = builder_type.for_base_revision(document)
        else:
            builder = builder_type.for_entity_id(sub_id)
        if sub_id in pending:
            builder.apply(pending[sub_id])
        return builder.apply(update).build()

    def _check_removable(self, kind: EntityKind, sub_id: EntityId) -> None:
        require(sub_id, f"{kind.value.capitalize()} ID")
        self._check_owned(kind, sub_id)
        if self._base_revision is not None:
            lookup = (
                self._base_revision.get_sense
                if kind is EntityKind.SENSE
                else self._base_revision.get_form
            )
            if lookup(sub_id) is None:
                raise ValidationError(
                    f"Cannot remove {kind.value} {sub_id} that does not exist"
                )

    def add_sense(self, sense: SenseDocument) -> LexemeUpdateBuilder:
        """Add a new sense. Its ID must be the sense placeholder ID."""
        self._check_new(EntityKind.SENSE, sense, SenseDocument)
        self._added_senses = self._added_senses + (sense,)
        return self

    def update_sense(self, update: SenseUpdate) -> LexemeUpdateBuilder:
        """Accumulate changes to an existing sense of this lexeme."""
        merged = self._merged_sub_update(
            EntityKind.SENSE, update, self._updated_senses,
            self._removed_senses, SenseUpdateBuilder,
        )
        updated = dict(self._updated_senses)
        if merged.is_empty:
            updated.pop(merged.entity_id, None)
        else:
            updated[merged.entity_id] = merged
        self._updated_senses = updated
        return self

    def remove_sense(self, sense_id: EntityId) -> LexemeUpdateBuilder:
        """Remove a sense, discarding pending changes to it."""
        self._check_removable(EntityKind.SENSE, sense_id)
        self._updated_senses = {
            k: v for k, v in self._updated_senses.items() if k != sense_id
        }
        self._removed_senses = self._removed_senses | {sense_id}
        return self

    def add_form(self, form: FormDocument) -> LexemeUpdateBuilder:
        """Add a new form. Its ID must be the form placeholder ID."""
        self._check_new(EntityKind.FORM, form, FormDocument)
        self._added_forms = self._added_forms + (form,)
        return self

    def update_form(self, update: FormUpdate) -> LexemeUpdateBuilder:
        """Accumulate changes to an existing form of this lexeme."""
        merged = self._merged_sub_update(
            EntityKind.FORM, update, self._updated_forms,
            self._removed_forms, FormUpdateBuilder,
        )
        updated = dict(self._updated_forms)
        if merged.is_empty:
            updated.pop(merged.entity_id, None)
        else:
            updated[merged.entity_id] = merged
        self._updated_forms = updated
        return self

    def remove_form(self, form_id: EntityId) -> LexemeUpdateBuilder:
        """Remove a form, discarding pending changes to it."""
        self._check_removable(EntityKind.FORM, form_id)
        self._updated_forms = {
            k: v for k, v in self._updated_forms.items() if k != form_id
        }
        self._removed_forms = self._removed_forms | {form_id}
        return self

    def _apply(self, update: LexemeUpdate) -> None:
        super()._apply(update)
        self.update_lemmas(update.lemmas)
        if update.language is not None:
            self.set_language(update.language)
        if update.lexical_category is not None:
            self.set_lexical_category(update.lexical_category)
        for sense in update.added_senses:
            self.add_sense(sense)
        for sense_update in update.updated_senses.values():
            self.update_sense(sense_update)
        for sense_id in update.removed_senses:
            self.remove_sense(sense_id)
        for form in update.added_forms:
            self.add_form(form)
        for form_update in update.updated_forms.values():
            self.update_form(form_update)
        for form_id in update.removed_forms:
            self.remove_form(form_id)

    def _build_fields(self) -> dict[str, Any]:
        fields = super()._build_fields()
        fields.update(
            lemmas=self._lemmas,
            language=self._language,
            lexical_category=self._lexical_category,
            added_senses=self._added_senses,
            updated_senses=dict(self._updated_senses),
            removed_senses=self._removed_senses,
            added_forms=self._added_forms,
            updated_forms=dict(self._updated_forms),
            removed_forms=self._removed_forms,
        )
        return fields


def builder_type_for(kind: EntityKind) -> type[EntityUpdateBuilder]:
    """Return the concrete builder class registered for *kind*."""
    try:
        return _BUILDERS[EntityKind(kind)]
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Unrecognized entity type: {kind!r}") from e
