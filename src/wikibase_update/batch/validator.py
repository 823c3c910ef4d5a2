"""
Validation for batch change requests.

Checks the request shape (entity ID, base snapshot, required fields, value
types) and whether each operation applies to the kind of the target entity.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..exceptions import WikibaseUpdateError
from ..models import EntityId, EntityKind, item_id, property_id
from .executor import base_document
from .schema import (
    OPERATION_KINDS,
    REQUIRED_FIELDS,
    Change,
    ChangeError,
    ChangeRequest,
    ChangeWarning,
    OperationType,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def validate_change_request(request: ChangeRequest) -> ValidationResult:
    """Validate a change request.

    Args:
        request: The change request to validate

    Returns:
        ValidationResult with errors and warnings
    """
    errors: List[ChangeError] = []
    warnings: List[ChangeWarning] = []

    kind: Optional[EntityKind] = None
    try:
        entity_id = EntityId(request.entity)
    except WikibaseUpdateError as e:
        errors.append(_request_error("entity", str(e)))
    else:
        if entity_id.is_placeholder:
            errors.append(
                _request_error("entity", f"Cannot update placeholder entity {entity_id}")
            )
        else:
            kind = entity_id.kind
            if request.base is not None:
                try:
                    base_document(entity_id, request.base)
                except WikibaseUpdateError as e:
                    errors.append(_request_error("base", str(e)))

    # Slot written by each change, to report changes that undo earlier ones
    written: Dict[str, int] = {}
    for i, change in enumerate(request.changes):
        errors.extend(_validate_change(change, i, kind))

        key = change.key
        if key is None:
            continue
        if key in written:
            warnings.append(
                ChangeWarning(
                    index=i,
                    operation=change.operation,
                    message=f"Overrides change #{written[key] + 1} ({key})",
                    line_number=change.line_number,
                )
            )
        written[key] = i

    logger.debug(
        f"Validated {request.entity}: {len(errors)} error(s), {len(warnings)} warning(s)"
    )
    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _request_error(field: str, message: str) -> ChangeError:
    return ChangeError(index=-1, operation="", field=field, message=message)


def _validate_change(
    change: Change,
    index: int,
    kind: Optional[EntityKind],
) -> List[ChangeError]:
    """Validate a single change operation."""
    errors: List[ChangeError] = []

    def error(field: str, message: str) -> None:
        errors.append(
            ChangeError(
                index=index,
                operation=change.operation,
                field=field,
                message=message,
                line_number=change.line_number,
            )
        )

    valid_operations = {op.value for op in OperationType}
    op = change.operation
    if op not in valid_operations:
        error(
            "operation",
            f"Unknown operation '{op}'. Valid: {', '.join(sorted(valid_operations))}",
        )
        return errors

    if kind is not None and kind not in OPERATION_KINDS[op]:
        error("operation", f"Operation '{op}' does not apply to {kind.value} entities")

    params = change.params
    for field in REQUIRED_FIELDS[op]:
        if params.get(field) is None:
            error(field, f"Missing required field '{field}'")

    if errors:
        return errors

    for field in ("language", "id", "site", "title"):
        if field in params and not _is_text(params[field]):
            error(field, f"Field '{field}' must be a non-empty string")

    if op in (OperationType.ADD_STATEMENT.value, OperationType.REPLACE_STATEMENT.value):
        _check_id(error, "property", params["property"], property_id)
    elif op in (OperationType.SET_LANGUAGE.value, OperationType.SET_LEXICAL_CATEGORY.value):
        _check_id(error, "value", params["value"], item_id)
    elif op == OperationType.SET_GRAMMATICAL_FEATURES.value:
        _check_id_list(error, "features", params["features"])
    elif op == OperationType.SET_SITE_LINK.value and "badges" in params:
        _check_id_list(error, "badges", params["badges"])
    elif op == OperationType.SET_ALIASES.value:
        aliases = params["aliases"]
        if not isinstance(aliases, list) or not all(isinstance(a, str) for a in aliases):
            error("aliases", "Field 'aliases' must be a list of strings")
    elif "value" in params and op.split("_", 1)[1] in (
        "label", "description", "gloss", "lemma", "representation",
    ):
        if not isinstance(params["value"], str):
            error("value", "Field 'value' must be a string")

    return errors


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _check_id(error, field: str, value: Any, parse) -> None:
    if not isinstance(value, str):
        error(field, f"Field '{field}' must be a string")
        return
    try:
        parse(value)
    except WikibaseUpdateError as e:
        error(field, str(e))


def _check_id_list(error, field: str, value: Any) -> None:
    if not isinstance(value, list):
        error(field, f"Field '{field}' must be a list")
        return
    for v in value:
        _check_id(error, field, v, item_id)
