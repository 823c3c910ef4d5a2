"""
YAML parser for batch change requests.

A change request describes edits to a single entity::

    entity: Q42
    summary: Fix English label
    base:                      # optional snapshot of the current revision
      revision: 1234
      labels: {en: Douglas Adams}
    changes:
      - operation: set_label
        language: en
        value: Douglas Noel Adams
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .schema import Change, ChangeRequest


class ParseError(Exception):
    """Error parsing a change request file."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(message)


def load_change_request(
    source: Union[str, Path, Dict[str, Any]],
) -> ChangeRequest:
    """Load a change request from a YAML file or dictionary.

    Args:
        source: Path to YAML file, YAML string, or parsed dictionary

    Returns:
        ChangeRequest object

    Raises:
        ParseError: If the file cannot be parsed or is invalid
        FileNotFoundError: If the file does not exist
    """
    source_path: Optional[Path] = None

    if isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or (isinstance(source, str) and _is_file_path(source)):
        source_path = Path(source)
        if not source_path.exists():
            raise FileNotFoundError(f"File not found: {source_path}")
        with open(source_path, "r", encoding="utf-8") as f:
            data = _load_yaml(f, "file")
    else:
        data = _load_yaml(source, "content")

    return _parse_change_request(data, source_path)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "\n" in s:
        return False
    if "/" in s or "\\" in s:
        return True
    return s.endswith((".yaml", ".yml"))


def _load_yaml(stream: Any, what: str) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line_num = mark.line + 1 if mark else None
        raise ParseError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        raise ParseError(f"Empty YAML {what}")
    if not isinstance(data, dict):
        raise ParseError("YAML root must be a mapping (dictionary)")

    return data


def _parse_change_request(
    data: Dict[str, Any],
    source_path: Optional[Path] = None,
) -> ChangeRequest:
    """Parse a dictionary into a ChangeRequest object."""
    entity = data.get("entity")
    if not entity:
        raise ParseError("Missing required field: 'entity'")
    if not isinstance(entity, str):
        raise ParseError("Field 'entity' must be a string")

    base = data.get("base")
    if base is not None and not isinstance(base, dict):
        raise ParseError("Field 'base' must be a mapping")

    summary = data.get("summary")
    if summary is not None and not isinstance(summary, str):
        raise ParseError("Field 'summary' must be a string")

    changes_data = data.get("changes")
    if changes_data is None:
        raise ParseError("Missing required field: 'changes'")
    if not isinstance(changes_data, list):
        raise ParseError("Field 'changes' must be a list")
    if len(changes_data) == 0:
        raise ParseError("Field 'changes' cannot be empty")

    return ChangeRequest(
        entity=entity,
        changes=_parse_changes(changes_data),
        base=base,
        summary=summary,
        source_file=source_path,
    )


def _parse_changes(changes_data: List[Any]) -> List[Change]:
    """Parse a list of change dictionaries into Change objects."""
    changes = []

    for i, change_data in enumerate(changes_data):
        if not isinstance(change_data, dict):
            raise ParseError(f"Change #{i + 1} must be a mapping (dictionary)")

        operation = change_data.get("operation")
        if not operation:
            raise ParseError(f"Change #{i + 1}: Missing required field 'operation'")
        if not isinstance(operation, str):
            raise ParseError(f"Change #{i + 1}: Field 'operation' must be a string")

        params = {k: v for k, v in change_data.items() if k != "operation"}
        changes.append(Change(operation=operation, params=params))

    return changes
