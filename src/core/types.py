"""Shared typed models.

This module defines immutable data models used by the host adapter,
the identifier store, and the SDK to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from core.constants import (
    DEFAULT_GUID_FIELD_NAME,
    DEFAULT_SCHEMA_DOCUMENTATION,
    DEFAULT_SCHEMA_ID,
    DEFAULT_SCHEMA_NAME,
)
from core.errors import NamedGuidError

ResolveStatus = Literal["found", "created", "not_found", "fault"]


@dataclass(frozen=True)
class SchemaDescriptor:
    """Identity and field layout recognized by the identifier store.

    Attributes:
        schema_id: Stable schema GUID; a new layout needs a new id.
        schema_name: Human-readable schema name.
        field_name: Name of the single GUID field.
        documentation: Optional schema description stored with the schema.
    """

    schema_id: UUID = DEFAULT_SCHEMA_ID
    schema_name: str = DEFAULT_SCHEMA_NAME
    field_name: str = DEFAULT_GUID_FIELD_NAME
    documentation: str = DEFAULT_SCHEMA_DOCUMENTATION


@dataclass(frozen=True)
class ResolvedIdentifier:
    """Identifier stored for a name.

    Attributes:
        name: Lookup key.
        identifier: Stored GUID.
        created: True only when this call created the entry.
    """

    name: str
    identifier: UUID
    created: bool


@dataclass(frozen=True)
class NotFound:
    """Lookup result when no entry exists and creation was not requested."""

    name: str


@dataclass(frozen=True)
class ResolveOutcome:
    """Typed outcome for callers that branch instead of catching faults.

    Attributes:
        name: Lookup key.
        status: found, created, not_found, or fault.
        identifier: Stored GUID for found and created outcomes.
        error: Fault raised by the storage layer for fault outcomes.
    """

    name: str
    status: ResolveStatus
    identifier: UUID | None = None
    error: NamedGuidError | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether an identifier was resolved."""
        return self.status in ("found", "created")
