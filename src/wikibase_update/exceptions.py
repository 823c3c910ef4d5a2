"""Custom exception hierarchy for wikibase-update."""


class WikibaseUpdateError(Exception):
    """Base exception for all wikibase-update errors."""


class MissingValueError(WikibaseUpdateError, TypeError):
    """Required argument is None (or a list contains None)."""


class ValidationError(WikibaseUpdateError, ValueError):
    """Invalid argument (placeholder ID, duplicate alias, unknown kind)."""


class ConflictError(WikibaseUpdateError):
    """Updates based on different revisions of the same entity."""


def require(value, name: str):
    """Return *value*, raising MissingValueError if it is None."""
    if value is None:
        raise MissingValueError(f"{name} cannot be None")
    return value
