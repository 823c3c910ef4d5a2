"""Builder for statement updates.

Statements are tracked by identity: a replacement or removal is recorded even
when it matches what the entity currently holds.
"""

from __future__ import annotations

from wikibase_update.exceptions import ValidationError, require
from wikibase_update.models import EntityId, Statement
from wikibase_update.updates import StatementUpdate


class StatementUpdateBuilder:
    """Accumulates statement changes and builds a StatementUpdate.

    Not safe for concurrent use from several threads.
    """

    def __init__(self, subject: EntityId | None = None) -> None:
        self._subject = subject
        self._added: dict[Statement, None] = {}
        self._replaced: dict[str, Statement] = {}
        self._removed: set[str] = set()

    @classmethod
    def create(cls) -> StatementUpdateBuilder:
        return cls()

    @classmethod
    def for_entity(cls, subject: EntityId) -> StatementUpdateBuilder:
        """Builder that only accepts statements about *subject*."""
        return cls(require(subject, "Statement subject"))

    def _check_subject(self, statement: Statement) -> None:
        if self._subject is not None and statement.subject != self._subject:
            raise ValidationError(
                f"Statement subject {statement.subject} does not match {self._subject}"
            )

    def add_statement(self, statement: Statement) -> StatementUpdateBuilder:
        """Add a new statement. It must not have a statement ID yet."""
        require(statement, "Statement")
        if statement.id:
            raise ValidationError(
                f"Added statement cannot have an ID, got {statement.id!r}"
            )
        self._check_subject(statement)
        self._added[statement] = None
        return self

    def replace_statement(self, statement: Statement) -> StatementUpdateBuilder:
        """Replace the statement with the same ID, overriding a pending removal."""
        require(statement, "Statement")
        if not statement.id:
            raise ValidationError("Replacement statement must have an ID")
        self._check_subject(statement)
        self._replaced[statement.id] = statement
        self._removed.discard(statement.id)
        return self

    def remove_statement(self, statement_id: str) -> StatementUpdateBuilder:
        """Remove a statement by ID, overriding a pending replacement."""
        require(statement_id, "Statement ID")
        if not statement_id:
            raise ValidationError("Statement ID cannot be empty")
        self._removed.add(statement_id)
        self._replaced.pop(statement_id, None)
        return self

    def apply(self, update: StatementUpdate) -> StatementUpdateBuilder:
        """Replay added, replaced and removed statements of *update*."""
        require(update, "Statement update")
        for statement in update.added + tuple(update.replaced.values()):
            self._check_subject(statement)
        for statement in update.added:
            self.add_statement(statement)
        for statement in update.replaced.values():
            self.replace_statement(statement)
        for statement_id in update.removed:
            self.remove_statement(statement_id)
        return self

    def build(self) -> StatementUpdate:
        return StatementUpdate(
            added=tuple(self._added),
            replaced=dict(self._replaced),
            removed=frozenset(self._removed),
        )
