"""
Executor for batch change requests.

Replays each change of a request through the update builder of the target
entity and returns the resulting update.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List

from ..builders import EntityUpdateBuilder
from ..documents import EntityDocument, document_type_for
from ..exceptions import ValidationError, WikibaseUpdateError
from ..models import (
    EntityId,
    MonolingualText,
    SiteLink,
    Statement,
    StatementRank,
    item_id,
    property_id,
)
from ..statements import StatementUpdateBuilder
from ..terms import TermUpdateBuilder
from .schema import (
    BASE_FIELDS,
    BatchResult,
    Change,
    ChangeRequest,
    ChangeResult,
    OperationType,
)

logger = logging.getLogger(__name__)

_TERM_FIELDS = ("labels", "descriptions", "glosses", "lemmas", "representations")


def execute_change_request(request: ChangeRequest) -> BatchResult:
    """Replay a change request and build the resulting update.

    Changes that fail are recorded in the result and leave the builder
    untouched; the remaining changes are still applied.

    Args:
        request: The change request to execute

    Returns:
        BatchResult with details of each change and the built update

    Raises:
        WikibaseUpdateError: If the entity ID or base snapshot is invalid
    """
    start_time = time.time()
    builder = create_builder(request)

    results: List[ChangeResult] = []
    for i, change in enumerate(request.changes):
        results.append(_execute_change(builder, change, i))

    update = builder.build()
    success_count = sum(1 for r in results if r.success)
    logger.debug(
        f"Replayed {success_count}/{len(results)} changes on {request.entity}"
    )

    return BatchResult(
        entity=request.entity,
        total_count=len(results),
        success_count=success_count,
        failure_count=len(results) - success_count,
        changes=results,
        update=update,
        duration_seconds=time.time() - start_time,
    )


def create_builder(request: ChangeRequest) -> Any:
    """Create the update builder for the entity of *request*."""
    entity_id = EntityId(request.entity)
    if request.base is None:
        return EntityUpdateBuilder.for_entity_id(entity_id)
    return EntityUpdateBuilder.for_base_revision(
        base_document(entity_id, request.base)
    )


def base_document(entity_id: EntityId, base: Dict[str, Any]) -> EntityDocument:
    """Turn the `base` section of a change request into a document."""
    allowed = BASE_FIELDS[entity_id.kind]
    unknown = sorted(set(base) - set(allowed))
    if unknown:
        raise ValidationError(
            f"Unsupported base fields for {entity_id.kind.value}: {', '.join(unknown)}"
        )

    fields: Dict[str, Any] = {}
    for name, value in base.items():
        if name == "revision":
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValidationError("Base revision must be an integer")
            fields["revision_id"] = value
        elif name in _TERM_FIELDS:
            fields[name] = [
                MonolingualText(_string(name, text), _string(name, language))
                for language, text in _mapping(name, value).items()
            ]
        elif name == "aliases":
            fields[name] = {
                _string(name, language): [
                    MonolingualText(_string(name, text), language)
                    for text in _list(name, texts)
                ]
                for language, texts in _mapping(name, value).items()
            }
        elif name == "site_links":
            fields[name] = [
                SiteLink(_string(name, site), _string(name, title))
                for site, title in _mapping(name, value).items()
            ]
        elif name in ("language", "lexical_category"):
            fields[name] = item_id(_string(name, value))
        elif name == "grammatical_features":
            fields[name] = frozenset(_item_ids(name, value))
    return document_type_for(entity_id.kind)(entity_id=entity_id, **fields)


def _mapping(name: str, value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValidationError(f"Field '{name}' must be a mapping")
    return value


def _list(name: str, value: Any) -> List[Any]:
    if not isinstance(value, list):
        raise ValidationError(f"Field '{name}' must be a list")
    return value


def _string(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError(
            f"Field '{name}' must contain strings, got {value!r}"
        )
    return value


def _item_ids(name: str, value: Any) -> List[EntityId]:
    return [item_id(_string(name, v)) for v in _list(name, value)]


def _text(params: Dict[str, Any], name: str) -> str:
    value = params.get(name)
    if value is None:
        raise ValidationError(f"Missing required field '{name}'")
    if not isinstance(value, str):
        raise ValidationError(f"Field '{name}' must be a string")
    return value


def _statement_value(value: Any) -> Any:
    """Make a YAML value usable as a statement value."""
    if isinstance(value, list):
        return tuple(_statement_value(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((k, _statement_value(v)) for k, v in value.items()))
    return value


def _capability(builder: Any, method: str) -> Callable[..., Any]:
    if not hasattr(builder, method):
        raise ValidationError(
            f"{builder.entity_id.kind.value} entities do not support {method}()"
        )
    return getattr(builder, method)


# =============================================================================
# Operation handlers
# =============================================================================

def _set_term(method: str, what: str) -> Callable[[Any, Dict[str, Any]], str]:
    def handler(builder: Any, params: Dict[str, Any]) -> str:
        term = MonolingualText(_text(params, "value"), _text(params, "language"))
        _capability(builder, method)(TermUpdateBuilder.create().set_term(term).build())
        return f"Set {what} ({term.language})"
    return handler


def _remove_term(method: str, what: str) -> Callable[[Any, Dict[str, Any]], str]:
    def handler(builder: Any, params: Dict[str, Any]) -> str:
        language = _text(params, "language")
        _capability(builder, method)(
            TermUpdateBuilder.create().remove_term(language).build()
        )
        return f"Removed {what} ({language})"
    return handler


def _statement(builder: Any, params: Dict[str, Any], id: str = "") -> Statement:
    if "value" not in params:
        raise ValidationError("Missing required field 'value'")
    try:
        rank = StatementRank(params.get("rank", StatementRank.NORMAL.value))
    except ValueError as e:
        raise ValidationError(f"Unknown statement rank {params.get('rank')!r}") from e
    return Statement(
        subject=builder.entity_id,
        property_id=property_id(_text(params, "property")),
        value=_statement_value(params["value"]),
        id=id,
        rank=rank,
    )


def _exec_set_aliases(builder: Any, params: Dict[str, Any]) -> str:
    language = _text(params, "language")
    aliases = [_string("aliases", a) for a in _list("aliases", params.get("aliases"))]
    _capability(builder, "set_aliases")(language, aliases)
    return f"Set {len(aliases)} alias(es) ({language})"


def _exec_add_statement(builder: Any, params: Dict[str, Any]) -> str:
    update_statements = _capability(builder, "update_statements")
    statement = _statement(builder, params)
    update_statements(StatementUpdateBuilder.create().add_statement(statement).build())
    return f"Added {statement.property_id} statement"


def _exec_replace_statement(builder: Any, params: Dict[str, Any]) -> str:
    update_statements = _capability(builder, "update_statements")
    statement = _statement(builder, params, id=_text(params, "id"))
    update_statements(
        StatementUpdateBuilder.create().replace_statement(statement).build()
    )
    return f"Replaced statement {statement.id}"


def _exec_remove_statement(builder: Any, params: Dict[str, Any]) -> str:
    statement_id = _text(params, "id")
    _capability(builder, "update_statements")(
        StatementUpdateBuilder.create().remove_statement(statement_id).build()
    )
    return f"Removed statement {statement_id}"


def _exec_set_site_link(builder: Any, params: Dict[str, Any]) -> str:
    badges = frozenset(_item_ids("badges", params.get("badges", [])))
    link = SiteLink(_text(params, "site"), _text(params, "title"), badges)
    _capability(builder, "set_site_link")(link)
    return f"Set site link ({link.site_key})"


def _exec_remove_site_link(builder: Any, params: Dict[str, Any]) -> str:
    site = _text(params, "site")
    _capability(builder, "remove_site_link")(site)
    return f"Removed site link ({site})"


def _exec_set_language(builder: Any, params: Dict[str, Any]) -> str:
    language = item_id(_text(params, "value"))
    _capability(builder, "set_language")(language)
    return f"Set language to {language}"


def _exec_set_lexical_category(builder: Any, params: Dict[str, Any]) -> str:
    category = item_id(_text(params, "value"))
    _capability(builder, "set_lexical_category")(category)
    return f"Set lexical category to {category}"


def _exec_set_grammatical_features(builder: Any, params: Dict[str, Any]) -> str:
    features = _item_ids("features", params.get("features"))
    _capability(builder, "set_grammatical_features")(features)
    return f"Set {len(features)} grammatical feature(s)"


_HANDLERS: Dict[str, Callable[[Any, Dict[str, Any]], str]] = {
    OperationType.SET_LABEL.value: _set_term("update_labels", "label"),
    OperationType.REMOVE_LABEL.value: _remove_term("update_labels", "label"),
    OperationType.SET_DESCRIPTION.value: _set_term("update_descriptions", "description"),
    OperationType.REMOVE_DESCRIPTION.value: _remove_term("update_descriptions", "description"),
    OperationType.SET_ALIASES.value: _exec_set_aliases,
    OperationType.SET_GLOSS.value: _set_term("update_glosses", "gloss"),
    OperationType.REMOVE_GLOSS.value: _remove_term("update_glosses", "gloss"),
    OperationType.SET_LEMMA.value: _set_term("update_lemmas", "lemma"),
    OperationType.REMOVE_LEMMA.value: _remove_term("update_lemmas", "lemma"),
    OperationType.SET_REPRESENTATION.value: _set_term("update_representations", "representation"),
    OperationType.REMOVE_REPRESENTATION.value: _remove_term("update_representations", "representation"),
    OperationType.ADD_STATEMENT.value: _exec_add_statement,
    OperationType.REPLACE_STATEMENT.value: _exec_replace_statement,
    OperationType.REMOVE_STATEMENT.value: _exec_remove_statement,
    OperationType.SET_SITE_LINK.value: _exec_set_site_link,
    OperationType.REMOVE_SITE_LINK.value: _exec_remove_site_link,
    OperationType.SET_LANGUAGE.value: _exec_set_language,
    OperationType.SET_LEXICAL_CATEGORY.value: _exec_set_lexical_category,
    OperationType.SET_GRAMMATICAL_FEATURES.value: _exec_set_grammatical_features,
}


def _execute_change(builder: Any, change: Change, index: int) -> ChangeResult:
    """Execute a single change operation.

    Returns:
        ChangeResult with success/failure status
    """
    op = change.operation
    handler = _HANDLERS.get(op)
    if handler is None:
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=f"Unknown operation: {op}",
            error=f"Unknown operation: {op}",
        )

    try:
        message = handler(builder, change.params)
    except WikibaseUpdateError as e:
        logger.exception(f"Error executing change #{index + 1} ({op})")
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=f"Error: {e}",
            error=str(e),
        )

    return ChangeResult(index=index, operation=op, success=True, message=message)
