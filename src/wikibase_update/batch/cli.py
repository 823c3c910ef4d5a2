"""
Command-line interface for batch change requests.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from ..exceptions import WikibaseUpdateError
from ..updates import EntityUpdate
from .executor import execute_change_request
from .parser import load_change_request, ParseError
from .schema import BatchResult, ChangeRequest, ValidationResult
from .validator import validate_change_request


def main(argv: Optional[list] = None) -> int:
    """Main entry point for wb-update CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )

    return args.func(args)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="wb-update",
        description="Build Wikibase entity updates from YAML change requests",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s (wikibase-update)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a change request file",
    )
    validate_parser.add_argument(
        "file",
        type=Path,
        help="YAML file containing change request",
    )
    validate_parser.set_defaults(func=cmd_validate)

    # build command
    build_parser = subparsers.add_parser(
        "build",
        help="Replay a change request and show the resulting update",
    )
    build_parser.add_argument(
        "file",
        type=Path,
        help="YAML file containing change request",
    )
    build_parser.set_defaults(func=cmd_build)

    return parser


def _load(path: Path) -> Optional[ChangeRequest]:
    try:
        request = load_change_request(path)
    except ParseError as e:
        print(f"\n  [PARSE ERROR] {e}")
        if e.line:
            print(f"               Line: {e.line}")
        return None
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return None

    print(f"  Entity:  {request.entity}")
    print(f"  Changes: {len(request.changes)}")
    if request.summary:
        print(f"  Summary: {request.summary}")
    return request


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    print(f"\nValidating {args.file}...")

    request = _load(args.file)
    if request is None:
        return 1

    result = validate_change_request(request)

    print("\nValidation Results:")
    _print_validation_result(result)

    if result.is_valid:
        print("\nValidation passed!")
        return 0
    print(f"\nFound {result.error_count} error(s), {result.warning_count} warning(s)")
    return 1


def cmd_build(args: argparse.Namespace) -> int:
    """Handle build command."""
    print(f"\nLoading {args.file}...")

    request = _load(args.file)
    if request is None:
        return 1

    print("\nValidating...")
    validation = validate_change_request(request)
    if not validation.is_valid:
        print("\nValidation failed:")
        _print_validation_result(validation)
        print(f"\nFound {validation.error_count} error(s). Fix errors before building.")
        return 1

    if validation.warnings:
        print("\nWarnings:")
        _print_validation_result(validation, warnings_only=True)

    print("\nReplaying changes...")
    try:
        result = execute_change_request(request)
    except WikibaseUpdateError as e:
        print(f"\n  [ERROR] {e}")
        return 1

    _print_batch_result(result)
    return 0 if result.failure_count == 0 else 1


def _print_validation_result(
    result: ValidationResult,
    warnings_only: bool = False,
) -> None:
    """Print validation errors and warnings."""
    if not warnings_only:
        for error in result.errors:
            line_info = f" (line {error.line_number})" if error.line_number else ""
            if error.index < 0:
                print(f"  [ERROR] Request: {error.message}")
            else:
                print(f"  [ERROR] Change #{error.index + 1} ({error.operation}): {error.message}{line_info}")
            if error.field:
                print(f"          Field: {error.field}")

    for warning in result.warnings:
        line_info = f" (line {warning.line_number})" if warning.line_number else ""
        print(f"  [WARN]  Change #{warning.index + 1} ({warning.operation}): {warning.message}{line_info}")


def _print_batch_result(result: BatchResult) -> None:
    """Print batch execution result."""
    print()
    for change in result.changes:
        idx = change.index + 1
        status = "OK" if change.success else "FAILED"
        print(f"  [{idx}/{result.total_count}] {change.operation}: {status}")
        if change.message:
            print(f"         {change.message}")

    print("\nResults:")
    print(f"  Total:   {result.total_count}")
    print(f"  Success: {result.success_count}")
    print(f"  Failed:  {result.failure_count}")
    print(f"  Time:    {result.duration_seconds:.2f}s")

    if result.is_empty:
        print("\nUpdate is empty; nothing to submit.")
    else:
        print(f"\nUpdate for {result.entity}:")
        _print_update(result.update)


def _print_update(update: EntityUpdate) -> None:
    if update.base_revision_id:
        print(f"  Base revision: {update.base_revision_id}")
    for name, value in _update_parts(update):
        print(f"  {name}: {value}")


def _update_parts(update: EntityUpdate):
    """Yield (name, summary) pairs for the non-empty parts of an update."""
    for name in ("labels", "descriptions", "glosses", "lemmas", "representations"):
        term_update = getattr(update, name, None)
        if term_update is None or term_update.is_empty:
            continue
        changed = sorted(term_update.modified)
        removed = sorted(term_update.removed)
        yield name, f"set {changed}, removed {removed}"

    aliases = getattr(update, "aliases", None)
    if aliases is not None and not aliases.is_empty:
        yield "aliases", f"set for {sorted(aliases.aliases)}"

    statements = getattr(update, "statements", None)
    if statements is not None and not statements.is_empty:
        yield "statements", (
            f"{len(statements.added)} added, {len(statements.replaced)} replaced, "
            f"{len(statements.removed)} removed"
        )

    site_links = getattr(update, "site_links", None)
    if site_links is not None and not site_links.is_empty:
        yield "site links", (
            f"set {sorted(site_links.modified)}, removed {sorted(site_links.removed)}"
        )

    for name in ("language", "lexical_category", "grammatical_features"):
        value = getattr(update, name, None)
        if isinstance(value, frozenset):
            value = ", ".join(sorted(str(v) for v in value)) or "(none)"
        if value is not None:
            yield name.replace("_", " "), value

    for name in ("senses", "forms"):
        added = getattr(update, f"added_{name}", ())
        updated = getattr(update, f"updated_{name}", {})
        removed = getattr(update, f"removed_{name}", frozenset())
        if added or updated or removed:
            yield name, f"{len(added)} added, {len(updated)} updated, {len(removed)} removed"


if __name__ == "__main__":
    sys.exit(main())
