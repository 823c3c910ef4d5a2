"""Builders for term updates (labels, descriptions, glosses) and aliases.

Both builders optionally know the current terms of the entity. When they do,
edits that reproduce the current state are dropped instead of recorded, and
reverting an earlier edit removes it from the pending changes.

Builders are mutable and not safe for concurrent use from several threads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from wikibase_update.exceptions import ValidationError, require
from wikibase_update.models import MonolingualText, check_code, check_text, texts_of
from wikibase_update.updates import AliasUpdate, TermUpdate

logger = logging.getLogger(__name__)


class TermUpdateBuilder:
    """Accumulates changes to single-valued terms and builds a TermUpdate."""

    def __init__(self, base: Mapping[str, MonolingualText] | None = None) -> None:
        self._base = base
        self._modified: dict[str, MonolingualText] = {}
        self._removed: set[str] = set()

    @classmethod
    def create(cls) -> TermUpdateBuilder:
        """Builder without knowledge of current terms; every edit is kept."""
        return cls()

    @classmethod
    def for_terms(
        cls, terms: Iterable[MonolingualText] | Mapping[str, MonolingualText]
    ) -> TermUpdateBuilder:
        """Builder that elides edits matching *terms*, the current values."""
        require(terms, "Base terms")
        values = terms.values() if isinstance(terms, Mapping) else terms
        base: dict[str, MonolingualText] = {}
        for term in values:
            require(term, "Base term")
            if term.language in base:
                raise ValidationError(
                    f"Base terms contain duplicate language {term.language!r}"
                )
            base[term.language] = term
        return cls(base)

    def set_term(self, term: MonolingualText) -> TermUpdateBuilder:
        """Add or replace the term for its language.

        Overrides any earlier change for the same language.
        """
        require(term, "Term")
        language = term.language
        if self._base is not None:
            original = self._base.get(language)
            if original is not None and original.text == term.text:
                logger.debug(f"Dropping redundant term for {language!r}")
                self._modified.pop(language, None)
                self._removed.discard(language)
                return self
        self._modified[language] = term
        self._removed.discard(language)
        return self

    def remove_term(self, language: str) -> TermUpdateBuilder:
        """Remove the term for *language*.

        Overrides any earlier change for the same language. Removing a term
        that the base terms do not have is a no-op.
        """
        check_code(language, "Language code")
        if self._base is not None and language not in self._base:
            logger.debug(f"Dropping removal of absent term {language!r}")
            self._modified.pop(language, None)
            return self
        self._removed.add(language)
        self._modified.pop(language, None)
        return self

    def apply(self, update: TermUpdate) -> TermUpdateBuilder:
        """Replay *update* on top of the pending changes."""
        require(update, "Term update")
        for term in update.modified.values():
            self.set_term(term)
        for language in update.removed:
            self.remove_term(language)
        return self

    def build(self) -> TermUpdate:
        return TermUpdate(
            modified=dict(self._modified), removed=frozenset(self._removed)
        )


class AliasUpdateBuilder:
    """Accumulates replacement alias lists and builds an AliasUpdate."""

    def __init__(
        self, base: Mapping[str, tuple[MonolingualText, ...]] | None = None
    ) -> None:
        self._base = base
        self._aliases: dict[str, tuple[MonolingualText, ...]] = {}

    @classmethod
    def create(cls) -> AliasUpdateBuilder:
        return cls()

    @classmethod
    def for_aliases(
        cls, aliases: Mapping[str, Iterable[MonolingualText]]
    ) -> AliasUpdateBuilder:
        """Builder that elides alias lists equal to the current *aliases*."""
        require(aliases, "Base aliases")
        return cls({
            language: tuple(require(values, "Base alias list"))
            for language, values in aliases.items()
        })

    def set_aliases(self, language: str, aliases: Iterable[str]) -> AliasUpdateBuilder:
        """Replace all aliases for *language* with *aliases*, in order.

        An empty list removes every alias in the language. Calling this again
        for the same language overwrites the earlier list.

        Raises:
            MissingValueError: if *language*, *aliases* or any alias is None
            ValidationError: if *language* is blank, an alias is not a string
                or aliases repeat
        """
        check_code(language, "Language code")
        require(aliases, "Alias list")
        if isinstance(aliases, str):
            raise ValidationError("Aliases must be given as a list of strings")
        aliases = list(aliases)
        for alias in aliases:
            check_text(alias, "Alias")
        if len(set(aliases)) != len(aliases):
            raise ValidationError(f"Aliases for {language!r} must be unique")

        values = tuple(MonolingualText(alias, language) for alias in aliases)
        if self._base is not None:
            original = self._base.get(language)
            if values == original or (not original and not values):
                logger.debug(f"Dropping redundant aliases for {language!r}")
                self._aliases.pop(language, None)
                return self
        self._aliases[language] = values
        return self

    def apply(self, update: AliasUpdate) -> AliasUpdateBuilder:
        """Replay each alias list of *update* through set_aliases()."""
        require(update, "Alias update")
        for language, values in update.aliases.items():
            self.set_aliases(language, texts_of(values))
        return self

    def build(self) -> AliasUpdate:
        return AliasUpdate(aliases=dict(self._aliases))
