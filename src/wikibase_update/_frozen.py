"""Helpers for the immutable documents and update objects."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import fields
from types import MappingProxyType
from typing import Any

from wikibase_update.exceptions import ValidationError, require
from wikibase_update.models import MonolingualText, SiteLink, check_code

EMPTY_MAPPING: Mapping[Any, Any] = MappingProxyType({})


def _hashable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return frozenset((k, _hashable(v)) for k, v in value.items())
    return value


class ValueObject:
    """Field-wise equality and hashing for frozen dataclasses.

    Subclasses are declared with ``eq=False`` so that the read-only mappings
    they hold take part in hashing.
    """

    __slots__ = ()

    def _key(self) -> tuple:
        return tuple(_hashable(getattr(self, f.name)) for f in fields(self))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))


def freeze(mapping: Mapping[Any, Any] | None) -> Mapping[Any, Any]:
    if not mapping:
        return EMPTY_MAPPING
    return MappingProxyType(dict(mapping))


def term_map(
    values: Mapping[str, MonolingualText] | Iterable[MonolingualText] | None,
) -> Mapping[str, MonolingualText]:
    """Index terms by language, rejecting mismatched keys."""
    if values is None:
        return EMPTY_MAPPING
    if isinstance(values, Mapping):
        for language, term in values.items():
            require(term, "Term")
            if term.language != language:
                raise ValidationError(
                    f"Term language {term.language!r} does not match key {language!r}"
                )
        return freeze(values)
    result: dict[str, MonolingualText] = {}
    for term in values:
        require(term, "Term")
        result[term.language] = term
    return freeze(result)


def alias_map(
    values: Mapping[str, Iterable[MonolingualText]] | None,
) -> Mapping[str, tuple[MonolingualText, ...]]:
    """Freeze per-language alias lists into tuples."""
    if not values:
        return EMPTY_MAPPING
    result: dict[str, tuple[MonolingualText, ...]] = {}
    for language, aliases in values.items():
        check_code(language, "Alias language code")
        aliases = tuple(require(aliases, "Alias list"))
        for alias in aliases:
            require(alias, "Alias")
            if alias.language != language:
                raise ValidationError(
                    f"Alias language {alias.language!r} does not match key {language!r}"
                )
        result[language] = aliases
    return freeze(result)


def site_link_map(
    values: Mapping[str, SiteLink] | Iterable[SiteLink] | None,
) -> Mapping[str, SiteLink]:
    if values is None:
        return EMPTY_MAPPING
    links = values.values() if isinstance(values, Mapping) else values
    result: dict[str, SiteLink] = {}
    for link in links:
        require(link, "Site link")
        result[link.site_key] = link
    return freeze(result)
