"""
Batch change request module for wikibase-update.

This module replays change requests written in YAML through the update
builders and returns the resulting entity update.

Example usage:
    from wikibase_update.batch import (
        load_change_request,
        validate_change_request,
        execute_change_request,
    )

    # Load from YAML file
    request = load_change_request("changes.yaml")

    # Validate before replaying
    validation = validate_change_request(request)
    if not validation.is_valid:
        for error in validation.errors:
            print(f"[{error.index}] {error.operation}: {error.message}")

    # Replay through the entity's update builder
    result = execute_change_request(request)
    print(f"Applied {result.success_count}/{result.total_count} changes")
    update = result.update
"""

from .schema import (
    # Enums and constants
    OperationType as OperationType,
    OPERATION_KINDS as OPERATION_KINDS,
    REQUIRED_FIELDS as REQUIRED_FIELDS,
    OPTIONAL_FIELDS as OPTIONAL_FIELDS,
    BASE_FIELDS as BASE_FIELDS,
    # Data classes
    Change as Change,
    ChangeRequest as ChangeRequest,
    ChangeError as ChangeError,
    ChangeWarning as ChangeWarning,
    ValidationResult as ValidationResult,
    ChangeResult as ChangeResult,
    BatchResult as BatchResult,
)

from .parser import (
    load_change_request as load_change_request,
    ParseError as ParseError,
)

from .validator import (
    validate_change_request as validate_change_request,
)

from .executor import (
    execute_change_request as execute_change_request,
    base_document as base_document,
)

__all__ = [
    # Enums and constants
    "OperationType",
    "OPERATION_KINDS",
    "REQUIRED_FIELDS",
    "OPTIONAL_FIELDS",
    "BASE_FIELDS",
    # Data classes
    "Change",
    "ChangeRequest",
    "ChangeError",
    "ChangeWarning",
    "ValidationResult",
    "ChangeResult",
    "BatchResult",
    # Functions
    "load_change_request",
    "validate_change_request",
    "execute_change_request",
    "base_document",
    # Exceptions
    "ParseError",
]
