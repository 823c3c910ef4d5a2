"""
Data classes and constants for the batch change request system.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

from ..models import EntityKind
from ..updates import EntityUpdate


# =============================================================================
# Operation Types
# =============================================================================

class OperationType(str, Enum):
    """Supported batch operations."""
    SET_LABEL = "set_label"
    REMOVE_LABEL = "remove_label"
    SET_DESCRIPTION = "set_description"
    REMOVE_DESCRIPTION = "remove_description"
    SET_ALIASES = "set_aliases"
    SET_GLOSS = "set_gloss"
    REMOVE_GLOSS = "remove_gloss"
    SET_LEMMA = "set_lemma"
    REMOVE_LEMMA = "remove_lemma"
    SET_REPRESENTATION = "set_representation"
    REMOVE_REPRESENTATION = "remove_representation"
    ADD_STATEMENT = "add_statement"
    REPLACE_STATEMENT = "replace_statement"
    REMOVE_STATEMENT = "remove_statement"
    SET_SITE_LINK = "set_site_link"
    REMOVE_SITE_LINK = "remove_site_link"
    SET_LANGUAGE = "set_language"
    SET_LEXICAL_CATEGORY = "set_lexical_category"
    SET_GRAMMATICAL_FEATURES = "set_grammatical_features"


# =============================================================================
# Entity kinds per operation
# =============================================================================

_ALL_KINDS: FrozenSet[EntityKind] = frozenset(EntityKind)
_LABELED: FrozenSet[EntityKind] = frozenset(
    {EntityKind.ITEM, EntityKind.PROPERTY, EntityKind.MEDIAINFO}
)
_TERMED: FrozenSet[EntityKind] = frozenset({EntityKind.ITEM, EntityKind.PROPERTY})

# Which entity kinds accept each operation
OPERATION_KINDS: Dict[str, FrozenSet[EntityKind]] = {
    OperationType.SET_LABEL.value: _LABELED,
    OperationType.REMOVE_LABEL.value: _LABELED,
    OperationType.SET_DESCRIPTION.value: _TERMED,
    OperationType.REMOVE_DESCRIPTION.value: _TERMED,
    OperationType.SET_ALIASES.value: _TERMED,
    OperationType.SET_GLOSS.value: frozenset({EntityKind.SENSE}),
    OperationType.REMOVE_GLOSS.value: frozenset({EntityKind.SENSE}),
    OperationType.SET_LEMMA.value: frozenset({EntityKind.LEXEME}),
    OperationType.REMOVE_LEMMA.value: frozenset({EntityKind.LEXEME}),
    OperationType.SET_REPRESENTATION.value: frozenset({EntityKind.FORM}),
    OperationType.REMOVE_REPRESENTATION.value: frozenset({EntityKind.FORM}),
    OperationType.ADD_STATEMENT.value: _ALL_KINDS,
    OperationType.REPLACE_STATEMENT.value: _ALL_KINDS,
    OperationType.REMOVE_STATEMENT.value: _ALL_KINDS,
    OperationType.SET_SITE_LINK.value: frozenset({EntityKind.ITEM}),
    OperationType.REMOVE_SITE_LINK.value: frozenset({EntityKind.ITEM}),
    OperationType.SET_LANGUAGE.value: frozenset({EntityKind.LEXEME}),
    OperationType.SET_LEXICAL_CATEGORY.value: frozenset({EntityKind.LEXEME}),
    OperationType.SET_GRAMMATICAL_FEATURES.value: frozenset({EntityKind.FORM}),
}


# =============================================================================
# Field Requirements
# =============================================================================

# Required fields for each operation
REQUIRED_FIELDS: Dict[str, List[str]] = {
    OperationType.SET_LABEL.value: ["language", "value"],
    OperationType.REMOVE_LABEL.value: ["language"],
    OperationType.SET_DESCRIPTION.value: ["language", "value"],
    OperationType.REMOVE_DESCRIPTION.value: ["language"],
    OperationType.SET_ALIASES.value: ["language", "aliases"],
    OperationType.SET_GLOSS.value: ["language", "value"],
    OperationType.REMOVE_GLOSS.value: ["language"],
    OperationType.SET_LEMMA.value: ["language", "value"],
    OperationType.REMOVE_LEMMA.value: ["language"],
    OperationType.SET_REPRESENTATION.value: ["language", "value"],
    OperationType.REMOVE_REPRESENTATION.value: ["language"],
    OperationType.ADD_STATEMENT.value: ["property", "value"],
    OperationType.REPLACE_STATEMENT.value: ["id", "property", "value"],
    OperationType.REMOVE_STATEMENT.value: ["id"],
    OperationType.SET_SITE_LINK.value: ["site", "title"],
    OperationType.REMOVE_SITE_LINK.value: ["site"],
    OperationType.SET_LANGUAGE.value: ["value"],
    OperationType.SET_LEXICAL_CATEGORY.value: ["value"],
    OperationType.SET_GRAMMATICAL_FEATURES.value: ["features"],
}

# Optional fields for each operation
OPTIONAL_FIELDS: Dict[str, List[str]] = {
    OperationType.ADD_STATEMENT.value: ["rank"],
    OperationType.REPLACE_STATEMENT.value: ["rank"],
    OperationType.SET_SITE_LINK.value: ["badges"],
}

# Fields accepted in the optional `base` snapshot, per entity kind
BASE_FIELDS: Dict[EntityKind, List[str]] = {
    EntityKind.ITEM: ["revision", "labels", "descriptions", "aliases", "site_links"],
    EntityKind.PROPERTY: ["revision", "labels", "descriptions", "aliases"],
    EntityKind.MEDIAINFO: ["revision", "labels"],
    EntityKind.LEXEME: ["revision", "lemmas", "language", "lexical_category"],
    EntityKind.SENSE: ["revision", "glosses"],
    EntityKind.FORM: ["revision", "representations", "grammatical_features"],
}


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Change:
    """Single change operation."""
    operation: str
    params: Dict[str, Any]
    line_number: Optional[int] = None

    @property
    def language(self) -> Optional[str]:
        """Get language code if present in params."""
        return self.params.get("language")

    @property
    def key(self) -> Optional[str]:
        """Slot this change writes to, used to spot overridden changes."""
        for name in ("language", "id", "site"):
            if name in self.params:
                return f"{self.operation.split('_', 1)[1]}:{self.params[name]}"
        return None


@dataclass
class ChangeRequest:
    """Parsed change request from YAML."""
    entity: str
    changes: List[Change]
    base: Optional[Dict[str, Any]] = None
    summary: Optional[str] = None
    source_file: Optional[Path] = None


@dataclass
class ChangeError:
    """Validation error for a specific change (index -1: the request itself)."""
    index: int
    operation: str
    field: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ChangeWarning:
    """Validation warning for a specific change."""
    index: int
    operation: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationResult:
    """Result of validating a change request."""
    is_valid: bool
    errors: List[ChangeError] = field(default_factory=list)
    warnings: List[ChangeWarning] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


@dataclass
class ChangeResult:
    """Result of replaying a single change."""
    index: int
    operation: str
    success: bool
    message: str
    error: Optional[str] = None


@dataclass
class BatchResult:
    """Result of replaying a change request through an update builder."""
    entity: str
    total_count: int
    success_count: int
    failure_count: int
    changes: List[ChangeResult]
    update: Optional[EntityUpdate]
    duration_seconds: float

    @property
    def is_empty(self) -> bool:
        return self.update is None or self.update.is_empty
