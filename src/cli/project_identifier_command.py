"""Project identifier command wiring for the named GUID CLI."""

from __future__ import annotations

import argparse
from typing import Any

from core.logging_config import get_logger
from store.named_guid_sdk import NamedGuidClient

_LOGGER = get_logger(__name__)


def add_project_identifier_command(subparsers: Any) -> None:
    """Register project-id subcommand."""
    parser = subparsers.add_parser(
        "project-id",
        help="Report the document's project identifier, creating it on first use",
    )
    parser.add_argument("document", help="Document file path")
    parser.add_argument("--name", help="Identifier name, NAMED_GUID_DEFAULT_NAME by default")


def run_project_identifier_command(client: NamedGuidClient, args: argparse.Namespace) -> int:
    """Look up or create the project identifier and print a user message."""
    outcome = client.project_identifier(args.document, name=args.name, read_only=args.read_only)
    if outcome.status == "found":
        print(
            "This document already has a project identifier: "
            f"{outcome.name} = {outcome.identifier}"
        )
        return 0
    if outcome.status == "created":
        print(
            "Created a new project identifier for this document: "
            f"{outcome.name} = {outcome.identifier}"
        )
        return 0
    _LOGGER.error("project_identifier_failed", name=outcome.name, error=str(outcome.error))
    print("Something went wrong")
    return 1
