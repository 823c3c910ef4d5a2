"""Tests for entity update builders: dispatch, elision, merging."""

import pytest

from wikibase_update import (
    AliasUpdate,
    ConflictError,
    EntityId,
    EntityKind,
    EntityUpdateBuilder,
    ItemDocument,
    ItemUpdate,
    ItemUpdateBuilder,
    LabeledStatementDocumentUpdateBuilder,
    LexemeUpdateBuilder,
    MediaInfoDocument,
    MediaInfoUpdateBuilder,
    MissingValueError,
    MonolingualText,
    PropertyUpdateBuilder,
    SiteLink,
    SiteLinkUpdate,
    Statement,
    StatementDocumentUpdateBuilder,
    StatementUpdate,
    StatementUpdateBuilder,
    TermUpdate,
    TermUpdateBuilder,
    TermedStatementDocumentUpdateBuilder,
    ValidationError,
    builder_type_for,
    item_id,
    lexeme_id,
    mediainfo_id,
    property_id,
)


def en(text):
    return MonolingualText(text, "en")


def set_term(term):
    return TermUpdateBuilder.create().set_term(term).build()


def remove_term(language):
    return TermUpdateBuilder.create().remove_term(language).build()


class TestDispatch:
    """for_entity_id() and for_base_revision() on family roots."""

    @pytest.mark.parametrize("raw, builder_type", [
        ("Q1", ItemUpdateBuilder),
        ("P1", PropertyUpdateBuilder),
        ("M1", MediaInfoUpdateBuilder),
        ("L1", LexemeUpdateBuilder),
    ])
    def test_root_dispatches_by_kind(self, raw, builder_type):
        builder = EntityUpdateBuilder.for_entity_id(EntityId(raw))
        assert type(builder) is builder_type

    def test_family_root_dispatches(self, q1):
        builder = TermedStatementDocumentUpdateBuilder.for_entity_id(q1)
        assert isinstance(builder, ItemUpdateBuilder)

    def test_kind_outside_family(self):
        with pytest.raises(ValidationError, match="Unrecognized entity type"):
            TermedStatementDocumentUpdateBuilder.for_entity_id(mediainfo_id("M1"))
        with pytest.raises(ValidationError):
            LabeledStatementDocumentUpdateBuilder.for_entity_id(lexeme_id("L1"))

    def test_concrete_builder_checks_kind(self):
        with pytest.raises(ValidationError):
            ItemUpdateBuilder.for_entity_id(property_id("P1"))

    def test_statement_family_covers_every_kind(self):
        for kind in EntityKind:
            assert issubclass(builder_type_for(kind), StatementDocumentUpdateBuilder)

    def test_builder_type_for_unknown(self):
        with pytest.raises(ValidationError):
            builder_type_for("widget")

    def test_placeholder_rejected(self):
        with pytest.raises(ValidationError, match="placeholder"):
            EntityUpdateBuilder.for_entity_id(item_id("Q0"))
        with pytest.raises(ValidationError, match="placeholder"):
            ItemUpdateBuilder.for_base_revision(ItemDocument(entity_id=item_id("Q0")))

    def test_none_rejected(self):
        with pytest.raises(MissingValueError):
            EntityUpdateBuilder.for_entity_id(None)
        with pytest.raises(MissingValueError):
            EntityUpdateBuilder.for_base_revision(None)

    def test_non_document_rejected(self, q1):
        with pytest.raises(ValidationError, match="document type"):
            EntityUpdateBuilder.for_base_revision(q1)

    def test_base_revision_dispatch(self, item):
        builder = EntityUpdateBuilder.for_base_revision(item)
        assert isinstance(builder, ItemUpdateBuilder)
        assert builder.base_revision is item
        assert builder.base_revision_id == 123
        assert builder.entity_id == item.entity_id


class TestItemBuilderWithoutBase:
    """Every edit is kept when there is no base revision."""

    def test_remove_label_and_set_aliases(self, q1):
        update = (
            ItemUpdateBuilder.for_entity_id(q1)
            .update_labels(remove_term("en"))
            .set_aliases("sk", ["Slovak"])
            .build()
        )
        assert isinstance(update, ItemUpdate)
        assert update.labels.removed == {"en"}
        assert update.aliases.aliases == {"sk": (MonolingualText("Slovak", "sk"),)}
        assert not update.is_empty
        assert update.base_revision_id == 0

    def test_set_aliases_overwrites(self, q1):
        builder = ItemUpdateBuilder.for_entity_id(q1)
        builder.set_aliases("de", ["Eins", "Zwei"])
        builder.set_aliases("de", ["Drei"])
        assert builder.build().aliases.aliases == {
            "de": (MonolingualText("Drei", "de"),)
        }

    def test_fresh_builder_is_empty(self, q1):
        assert ItemUpdateBuilder.for_entity_id(q1).build().is_empty

    def test_site_links(self, q1):
        link = SiteLink("dewiki", "Seite")
        update = (
            ItemUpdateBuilder.for_entity_id(q1)
            .set_site_link(link)
            .remove_site_link("enwiki")
            .build()
        )
        assert update.site_links == SiteLinkUpdate(modified=[link], removed={"enwiki"})

    def test_statements(self, q1, statement, saved_statement):
        update = (
            ItemUpdateBuilder.for_entity_id(q1)
            .update_statements(StatementUpdateBuilder.create().add_statement(statement).build())
            .update_statements(StatementUpdate(removed={"Q1$abc"}))
            .build()
        )
        assert update.statements.added == (statement,)
        assert update.statements.removed == {"Q1$abc"}

    def test_statement_about_other_entity(self, q1):
        other = Statement(item_id("Q2"), property_id("P1"), "x")
        builder = ItemUpdateBuilder.for_entity_id(q1)
        with pytest.raises(ValidationError):
            builder.update_statements(StatementUpdate(added=[other]))
        assert builder.build().is_empty


class TestItemBuilderWithBase:
    """Edits equal to the base revision are elided."""

    def test_description_equal_to_base(self, item):
        update = (
            ItemUpdateBuilder.for_base_revision(item)
            .update_descriptions(set_term(en("x")))
            .build()
        )
        assert not update.descriptions.modified
        assert not update.descriptions.removed
        assert update.is_empty
        assert update.base_revision_id == 123

    def test_remove_then_restore_label(self, item):
        builder = ItemUpdateBuilder.for_base_revision(item)
        builder.update_labels(remove_term("en"))
        assert builder.build().labels.removed == {"en"}
        builder.update_labels(set_term(en("Douglas Adams")))
        assert builder.build().labels.is_empty

    def test_remove_absent_label(self, item):
        update = ItemUpdateBuilder.for_base_revision(item).update_labels(remove_term("de")).build()
        assert update.is_empty

    def test_aliases_equal_to_base(self, item):
        update = ItemUpdateBuilder.for_base_revision(item).set_aliases("en", ["a", "b"]).build()
        assert update.aliases.is_empty

    def test_aliases_reordered(self, item):
        update = ItemUpdateBuilder.for_base_revision(item).set_aliases("en", ["b", "a"]).build()
        assert list(update.aliases.aliases) == ["en"]

    def test_update_aliases_replays_set_aliases(self, item):
        update = (
            ItemUpdateBuilder.for_base_revision(item)
            .update_aliases(AliasUpdate(aliases={"en": (en("a"), en("b")), "de": ()}))
            .build()
        )
        assert update.aliases.is_empty

    def test_statements_are_not_elided(self, item, saved_statement):
        base = item.with_statement(saved_statement)
        update = (
            ItemUpdateBuilder.for_base_revision(base)
            .update_statements(StatementUpdate(replaced=[saved_statement]))
            .build()
        )
        assert update.statements.replaced == {"Q1$abc": saved_statement}

    def test_site_links_are_not_elided(self, item):
        update = (
            ItemUpdateBuilder.for_base_revision(item)
            .set_site_link(SiteLink("enwiki", "Douglas Adams"))
            .build()
        )
        assert "enwiki" in update.site_links.modified

    def test_base_revision_id_zero_when_unknown(self, q1):
        update = ItemUpdateBuilder.for_base_revision(ItemDocument(entity_id=q1)).build()
        assert update.base_revision_id == 0

    def test_failed_call_leaves_builder_unchanged(self, item):
        builder = ItemUpdateBuilder.for_base_revision(item).set_aliases("de", ["A"])
        before = builder.build()
        with pytest.raises(ValidationError):
            builder.set_aliases("de", ["B", "B"])
        assert builder.build() == before


class TestOtherTermedEntities:
    """Property and mediainfo builders share the label machinery."""

    def test_property_builder(self):
        update = (
            PropertyUpdateBuilder.for_entity_id(property_id("P31"))
            .update_labels(set_term(en("instance of")))
            .update_descriptions(remove_term("de"))
            .set_aliases("en", ["is a"])
            .build()
        )
        assert update.labels.modified["en"].text == "instance of"
        assert update.descriptions.removed == {"de"}
        assert not update.is_empty

    def test_mediainfo_has_labels_only(self):
        doc = MediaInfoDocument(entity_id=mediainfo_id("M1"), labels=[en("caption")])
        builder = MediaInfoUpdateBuilder.for_base_revision(doc)
        assert not hasattr(builder, "set_aliases")
        assert not hasattr(builder, "update_descriptions")
        assert builder.update_labels(set_term(en("caption"))).build().is_empty


class TestApply:
    """Merging built updates into a builder."""

    def test_apply_matches_sequential_application(self, q1, statement):
        u1 = (
            ItemUpdateBuilder.for_entity_id(q1)
            .update_labels(set_term(en("A")))
            .set_aliases("de", ["x"])
            .build()
        )
        u2 = (
            ItemUpdateBuilder.for_entity_id(q1)
            .update_labels(remove_term("en"))
            .update_statements(StatementUpdate(added=[statement]))
            .set_site_link(SiteLink("enwiki", "A"))
            .build()
        )
        merged = ItemUpdateBuilder.for_entity_id(q1).apply(u1).apply(u2).build()
        sequential = (
            ItemUpdateBuilder.for_entity_id(q1)
            .update_labels(set_term(en("A")))
            .set_aliases("de", ["x"])
            .update_labels(remove_term("en"))
            .update_statements(StatementUpdate(added=[statement]))
            .set_site_link(SiteLink("enwiki", "A"))
            .build()
        )
        assert merged == sequential
        assert merged.labels == TermUpdate(removed={"en"})

    def test_apply_elides_against_base(self, item):
        unbased = (
            ItemUpdateBuilder.for_entity_id(item.entity_id)
            .update_labels(set_term(en("Douglas Adams")))
            .set_aliases("en", ["a", "b"])
            .build()
        )
        assert not unbased.is_empty
        merged = ItemUpdateBuilder.for_base_revision(item).apply(unbased).build()
        assert merged.is_empty

    def test_apply_other_entity(self, q1):
        other = ItemUpdateBuilder.for_entity_id(item_id("Q2")).build()
        with pytest.raises(ValidationError, match="Cannot apply"):
            ItemUpdateBuilder.for_entity_id(q1).apply(other)

    def test_apply_other_kind(self, q1):
        other = PropertyUpdateBuilder.for_entity_id(property_id("P1")).build()
        with pytest.raises(ValidationError):
            ItemUpdateBuilder.for_entity_id(q1).apply(other)

    def test_apply_conflicting_revision(self, item):
        stale = ItemUpdateBuilder.for_base_revision(item.with_revision_id(100)).build()
        with pytest.raises(ConflictError):
            ItemUpdateBuilder.for_base_revision(item).apply(stale)

    def test_apply_unknown_revision_is_not_a_conflict(self, item):
        unbased = ItemUpdateBuilder.for_entity_id(item.entity_id).build()
        builder = ItemUpdateBuilder.for_base_revision(item).apply(unbased)
        assert builder.build().base_revision_id == 123

class TestBuild:
    """build() snapshots."""

    def test_build_twice(self, q1):
        builder = ItemUpdateBuilder.for_entity_id(q1).set_aliases("en", ["a"])
        first, second = builder.build(), builder.build()
        assert first == second
        assert hash(first) == hash(second)
        assert first is not second

    def test_builder_usable_after_build(self, q1):
        builder = ItemUpdateBuilder.for_entity_id(q1).update_labels(set_term(en("A")))
        first = builder.build()
        builder.update_labels(remove_term("en"))
        assert first.labels.modified["en"].text == "A"
        assert builder.build().labels.removed == {"en"}

    def test_update_rejects_placeholder(self):
        with pytest.raises(ValidationError):
            ItemUpdate(entity_id=item_id("Q0"))

    def test_update_rejects_none_sub_update(self, q1):
        with pytest.raises(MissingValueError):
            ItemUpdate(entity_id=q1, labels=None)
