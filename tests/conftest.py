"""Shared test fixtures for wikibase-update."""

import pytest

from wikibase_update import (
    FormDocument,
    ItemDocument,
    LexemeDocument,
    MonolingualText,
    SenseDocument,
    SiteLink,
    Statement,
    form_id,
    item_id,
    lexeme_id,
    property_id,
    sense_id,
)


def texts(language, *values):
    """Terms in one language, in order."""
    return [MonolingualText(v, language) for v in values]


@pytest.fixture
def q1():
    return item_id("Q1")


@pytest.fixture
def statement(q1):
    """Unsaved statement about Q1."""
    return Statement(q1, property_id("P31"), "Q5")


@pytest.fixture
def saved_statement(q1):
    """Statement about Q1 that already has an ID."""
    return Statement(q1, property_id("P31"), "Q5", id="Q1$abc")


@pytest.fixture
def item(q1):
    """Revision 123 of Q1 with a label, a description, aliases and a site link."""
    return ItemDocument(
        entity_id=q1,
        revision_id=123,
        labels=[MonolingualText("Douglas Adams", "en")],
        descriptions=[MonolingualText("x", "en")],
        aliases={"en": texts("en", "a", "b")},
        site_links=[SiteLink("enwiki", "Douglas Adams")],
    )


@pytest.fixture
def lexeme():
    """Lexeme L1 with one sense and one form."""
    sense = SenseDocument(
        entity_id=sense_id("L1-S1"),
        glosses=[MonolingualText("domestic feline", "en")],
    )
    form = FormDocument(
        entity_id=form_id("L1-F1"),
        representations=[MonolingualText("cats", "en")],
        grammatical_features=[item_id("Q146786")],
    )
    return LexemeDocument(
        entity_id=lexeme_id("L1"),
        revision_id=7,
        lemmas=[MonolingualText("cat", "en")],
        language=item_id("Q1860"),
        lexical_category=item_id("Q1084"),
        senses=[sense],
        forms=[form],
    )
