"""Tests for lexeme, sense and form update builders."""

import pytest

from wikibase_update import (
    EntityId,
    EntityKind,
    EntityUpdateBuilder,
    FormDocument,
    FormUpdate,
    FormUpdateBuilder,
    LexemeUpdate,
    LexemeUpdateBuilder,
    MissingValueError,
    MonolingualText,
    SenseDocument,
    SenseUpdate,
    SenseUpdateBuilder,
    TermUpdate,
    TermUpdateBuilder,
    ValidationError,
    form_id,
    item_id,
    lexeme_id,
    sense_id,
)


def en(text):
    return MonolingualText(text, "en")


def set_term(term):
    return TermUpdateBuilder.create().set_term(term).build()


def gloss_update(raw_id, text):
    return SenseUpdateBuilder.for_entity_id(sense_id(raw_id)).update_glosses(
        set_term(en(text))
    ).build()


class TestSenseBuilder:
    """Glosses and statements."""

    def test_glosses_elided_against_base(self, lexeme):
        sense = lexeme.senses[0]
        builder = EntityUpdateBuilder.for_base_revision(sense)
        assert isinstance(builder, SenseUpdateBuilder)
        assert builder.update_glosses(set_term(en("domestic feline"))).build().is_empty

    def test_gloss_change(self):
        update = gloss_update("L1-S1", "pet")
        assert isinstance(update, SenseUpdate)
        assert update.glosses.modified["en"].text == "pet"

    def test_sense_has_no_labels(self):
        builder = SenseUpdateBuilder.for_entity_id(sense_id("L1-S1"))
        assert not hasattr(builder, "update_labels")


class TestFormBuilder:
    """Representations and grammatical features."""

    def test_representations(self):
        update = (
            FormUpdateBuilder.for_entity_id(form_id("L1-F1"))
            .update_representations(set_term(en("cats")))
            .build()
        )
        assert update.representations.modified["en"].text == "cats"
        assert update.grammatical_features is None

    def test_features_replace_set(self):
        update = (
            FormUpdateBuilder.for_entity_id(form_id("L1-F1"))
            .set_grammatical_features([item_id("Q110786")])
            .build()
        )
        assert update.grammatical_features == {item_id("Q110786")}
        assert not update.is_empty

    def test_features_equal_to_base(self, lexeme):
        builder = FormUpdateBuilder.for_base_revision(lexeme.forms[0])
        builder.set_grammatical_features([item_id("Q146786")])
        assert builder.build().is_empty

    def test_empty_features_clear_all(self, lexeme):
        update = FormUpdateBuilder.for_base_revision(lexeme.forms[0]).set_grammatical_features([]).build()
        assert update.grammatical_features == frozenset()

    def test_features_must_be_items(self):
        builder = FormUpdateBuilder.for_entity_id(form_id("L1-F1"))
        with pytest.raises(ValidationError, match="item ID"):
            builder.set_grammatical_features([lexeme_id("L2")])
        assert builder.build().grammatical_features is None


class TestLexemeBuilder:
    """Lexeme-level fields."""

    def test_lemmas_language_category(self):
        update = (
            LexemeUpdateBuilder.for_entity_id(lexeme_id("L1"))
            .update_lemmas(set_term(en("kitty")))
            .set_language(item_id("Q188"))
            .set_lexical_category(item_id("Q24905"))
            .build()
        )
        assert isinstance(update, LexemeUpdate)
        assert update.lemmas.modified["en"].text == "kitty"
        assert update.language == item_id("Q188")
        assert update.lexical_category == item_id("Q24905")

    def test_values_equal_to_base_are_elided(self, lexeme):
        update = (
            LexemeUpdateBuilder.for_base_revision(lexeme)
            .update_lemmas(set_term(en("cat")))
            .set_language(item_id("Q1860"))
            .set_lexical_category(item_id("Q1084"))
            .build()
        )
        assert update.is_empty
        assert update.base_revision_id == 7

    def test_language_must_be_item(self):
        with pytest.raises(ValidationError):
            LexemeUpdateBuilder.for_entity_id(lexeme_id("L1")).set_language(lexeme_id("L2"))

    def test_none_language(self):
        with pytest.raises(MissingValueError):
            LexemeUpdateBuilder.for_entity_id(lexeme_id("L1")).set_language(None)


class TestLexemeSubEntities:
    """Adding, updating and removing senses and forms."""

    def test_add_sense_and_form(self):
        sense = SenseDocument(entity_id=EntityId.placeholder(EntityKind.SENSE), glosses=[en("new")])
        form = FormDocument(entity_id=EntityId.placeholder(EntityKind.FORM), representations=[en("news")])
        update = (
            LexemeUpdateBuilder.for_entity_id(lexeme_id("L1"))
            .add_sense(sense)
            .add_form(form)
            .build()
        )
        assert update.added_senses == (sense,)
        assert update.added_forms == (form,)

    def test_added_sense_needs_placeholder(self):
        builder = LexemeUpdateBuilder.for_entity_id(lexeme_id("L1"))
        with pytest.raises(ValidationError, match="placeholder"):
            builder.add_sense(SenseDocument(entity_id=sense_id("L1-S5")))

    def test_add_wrong_document_type(self):
        builder = LexemeUpdateBuilder.for_entity_id(lexeme_id("L1"))
        with pytest.raises(ValidationError):
            builder.add_form(SenseDocument(entity_id=EntityId.placeholder(EntityKind.SENSE)))

    def test_update_sense_merges(self):
        builder = LexemeUpdateBuilder.for_entity_id(lexeme_id("L1"))
        builder.update_sense(gloss_update("L1-S1", "a"))
        builder.update_sense(
            SenseUpdateBuilder.for_entity_id(sense_id("L1-S1"))
            .update_glosses(set_term(MonolingualText("b", "de")))
            .build()
        )
        merged = builder.build().updated_senses[sense_id("L1-S1")]
        assert merged.glosses.modified.keys() == {"en", "de"}

    def test_update_sense_of_other_lexeme(self):
        builder = LexemeUpdateBuilder.for_entity_id(lexeme_id("L1"))
        with pytest.raises(ValidationError, match="not a sense of lexeme"):
            builder.update_sense(gloss_update("L2-S1", "a"))

    def test_update_redundant_with_base_is_dropped(self, lexeme):
        builder = LexemeUpdateBuilder.for_base_revision(lexeme)
        builder.update_sense(gloss_update("L1-S1", "domestic feline"))
        assert builder.build().is_empty

    def test_update_unknown_sense_with_base(self, lexeme):
        builder = LexemeUpdateBuilder.for_base_revision(lexeme)
        with pytest.raises(ValidationError, match="does not exist"):
            builder.update_sense(gloss_update("L1-S9", "a"))

    def test_remove_drops_pending_update(self):
        builder = LexemeUpdateBuilder.for_entity_id(lexeme_id("L1"))
        builder.update_sense(gloss_update("L1-S1", "a"))
        builder.remove_sense(sense_id("L1-S1"))
        update = builder.build()
        assert not update.updated_senses
        assert update.removed_senses == {sense_id("L1-S1")}

    def test_update_after_remove(self):
        builder = LexemeUpdateBuilder.for_entity_id(lexeme_id("L1"))
        builder.remove_sense(sense_id("L1-S1"))
        with pytest.raises(ValidationError, match="removed"):
            builder.update_sense(gloss_update("L1-S1", "a"))

    def test_remove_unknown_form_with_base(self, lexeme):
        with pytest.raises(ValidationError):
            LexemeUpdateBuilder.for_base_revision(lexeme).remove_form(form_id("L1-F9"))

    def test_update_form_features(self, lexeme):
        form_update = (
            FormUpdateBuilder.for_entity_id(form_id("L1-F1"))
            .set_grammatical_features([item_id("Q146786"), item_id("Q110786")])
            .build()
        )
        update = LexemeUpdateBuilder.for_base_revision(lexeme).update_form(form_update).build()
        assert update.updated_forms[form_id("L1-F1")].grammatical_features == {
            item_id("Q146786"), item_id("Q110786"),
        }

    def test_lexeme_update_checks_ownership(self):
        with pytest.raises(ValidationError):
            LexemeUpdate(entity_id=lexeme_id("L1"), removed_forms={form_id("L2-F1")})


class TestLexemeApply:
    """Merging lexeme updates."""

    def test_apply_matches_sequential_application(self):
        l1 = lexeme_id("L1")
        u1 = (
            LexemeUpdateBuilder.for_entity_id(l1)
            .update_lemmas(set_term(en("cat")))
            .update_sense(gloss_update("L1-S1", "a"))
            .build()
        )
        u2 = (
            LexemeUpdateBuilder.for_entity_id(l1)
            .set_language(item_id("Q1860"))
            .remove_form(form_id("L1-F1"))
            .build()
        )
        merged = LexemeUpdateBuilder.for_entity_id(l1).apply(u1).apply(u2).build()
        sequential = (
            LexemeUpdateBuilder.for_entity_id(l1)
            .update_lemmas(set_term(en("cat")))
            .update_sense(gloss_update("L1-S1", "a"))
            .set_language(item_id("Q1860"))
            .remove_form(form_id("L1-F1"))
            .build()
        )
        assert merged == sequential

    def test_failed_apply_leaves_builder_unchanged(self, lexeme):
        builder = LexemeUpdateBuilder.for_base_revision(lexeme)
        builder.update_lemmas(set_term(en("kitty")))
        before = builder.build()
        # Valid on its own, but the sense is missing from the base revision
        update = LexemeUpdate(
            entity_id=lexeme.entity_id,
            lemmas=TermUpdate(modified=[en("moggy")]),
            updated_senses={sense_id("L1-S9"): gloss_update("L1-S9", "a")},
        )
        with pytest.raises(ValidationError):
            builder.apply(update)
        assert builder.build() == before

    def test_form_update_apply(self):
        f1 = form_id("L1-F1")
        u1 = FormUpdateBuilder.for_entity_id(f1).set_grammatical_features([item_id("Q1")]).build()
        merged = FormUpdateBuilder.for_entity_id(f1).apply(u1).build()
        assert merged == u1
        assert isinstance(merged, FormUpdate)
