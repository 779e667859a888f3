"""Named GUID CLI entry points.

This module exposes document and identifier commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.project_identifier_command import (
    add_project_identifier_command,
    run_project_identifier_command,
)
from core.config import NamedGuidConfig
from core.errors import NamedGuidError
from core.types import NotFound
from store.named_guid_sdk import NamedGuidClient

EXIT_OK = 0
EXIT_FAULT = 1
EXIT_NOT_FOUND = 3


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="named-guid",
        description="Persistent named GUIDs stored inside documents",
    )
    parser.add_argument(
        "--schema-file",
        help="YAML schema descriptor overriding NAMED_GUID_SCHEMA_FILE",
    )
    parser.add_argument(
        "--read-only",
        action="store_true",
        help="Open documents read-only; creation then fails",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_new_document_command(subparsers)
    _add_resolve_command(subparsers)
    add_project_identifier_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the named GUID CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.schema_file)
    except NamedGuidError as error:
        print(f"config_error={error}")
        return EXIT_FAULT
    if args.command == "new-document":
        return _run_new_document_command(client, args)
    if args.command == "resolve":
        return _run_resolve_command(client, args)
    if args.command == "project-id":
        return run_project_identifier_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(schema_file: str | None) -> NamedGuidClient:
    """Build SDK client with optional schema-file override.

    Args:
        schema_file: Optional schema descriptor path.

    Returns:
        Configured SDK client.
    """
    config = NamedGuidConfig.from_env()
    if schema_file:
        config = replace(config, schema_file=Path(schema_file).expanduser().resolve())
    return NamedGuidClient(config)


def _run_new_document_command(client: NamedGuidClient, args: argparse.Namespace) -> int:
    """Handle new-document command."""
    try:
        document_path = client.new_document(args.document, title=args.title)
    except NamedGuidError as error:
        print(f"storage_error={error}")
        return EXIT_FAULT
    print(document_path)
    return EXIT_OK


def _run_resolve_command(client: NamedGuidClient, args: argparse.Namespace) -> int:
    """Handle resolve command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code; 3 when the name is absent and --no-create was given.
    """
    try:
        result = client.resolve_in_file(
            args.document,
            args.name,
            create_if_missing=not args.no_create,
            read_only=args.read_only,
        )
    except NamedGuidError as error:
        print(f"storage_error={error}")
        return EXIT_FAULT
    print(f"name={result.name}")
    if isinstance(result, NotFound):
        print("identifier=-")
        return EXIT_NOT_FOUND
    print(f"identifier={result.identifier}")
    print(f"created={str(result.created).lower()}")
    return EXIT_OK


def _add_new_document_command(subparsers: Any) -> None:
    """Register new-document subcommand."""
    parser = subparsers.add_parser("new-document", help="Create and save an empty document")
    parser.add_argument("document", help="Path of the document file to create")
    parser.add_argument("--title", help="Document title, the file stem by default")


def _add_resolve_command(subparsers: Any) -> None:
    """Register resolve subcommand."""
    parser = subparsers.add_parser("resolve", help="Get or create the GUID stored for a name")
    parser.add_argument("document", help="Document file path")
    parser.add_argument("name", help="Identifier name")
    parser.add_argument(
        "--no-create",
        action="store_true",
        help="Only look the name up; exit 3 when it is absent",
    )
