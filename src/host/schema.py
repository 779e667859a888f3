"""Extensible storage schemas and the session schema registry."""

from __future__ import annotations

from dataclasses import dataclass
import threading
from typing import Literal
from uuid import UUID

from core.constants import SUPPORTED_FIELD_TYPES
from core.errors import HostDocumentError

FieldType = Literal["guid", "string"]


@dataclass(frozen=True)
class FieldSpec:
    """One simple field in a schema."""

    name: str
    value_type: FieldType


@dataclass(frozen=True)
class Schema:
    """Immutable schema identity and field layout.

    Attributes:
        schema_id: Stable schema GUID.
        schema_name: Human-readable schema name.
        fields: Ordered simple fields.
        documentation: Free-form description.
    """

    schema_id: UUID
    schema_name: str
    fields: tuple[FieldSpec, ...]
    documentation: str = ""

    def field(self, field_name: str) -> FieldSpec | None:
        """Return the field with the given name, if declared."""
        for field_spec in self.fields:
            if field_spec.name == field_name:
                return field_spec
        return None


def build_schema(
    schema_id: UUID,
    schema_name: str,
    fields: dict[str, str],
    documentation: str = "",
) -> Schema:
    """Build a validated schema from a field-name to type mapping.

    Raises:
        HostDocumentError: If the schema has no fields or an unknown field type.
    """
    if not fields:
        raise HostDocumentError(f"Schema {schema_name} ({schema_id}) must declare a field.")
    field_specs = []
    for field_name, value_type in fields.items():
        if value_type not in SUPPORTED_FIELD_TYPES:
            raise HostDocumentError(
                f"Unsupported field type {value_type!r} for field {field_name!r}. "
                f"Supported: {', '.join(SUPPORTED_FIELD_TYPES)}."
            )
        field_specs.append(FieldSpec(name=field_name, value_type=value_type))  # type: ignore[arg-type]
    return Schema(
        schema_id=schema_id,
        schema_name=schema_name,
        fields=tuple(field_specs),
        documentation=documentation,
    )


class SchemaRegistry:
    """Session-wide schema registry keyed by schema id.

    Registration never touches a document; schemas travel with documents
    only through entities that reference them.
    """

    def __init__(self) -> None:
        self._schemas: dict[UUID, Schema] = {}
        self._lock = threading.Lock()

    def lookup(self, schema_id: UUID) -> Schema | None:
        """Return the registered schema for an id."""
        with self._lock:
            return self._schemas.get(schema_id)

    def register(self, schema: Schema) -> tuple[Schema, bool]:
        """Register a schema, returning it and whether it was new.

        Raises:
            HostDocumentError: If a different layout is registered under the same id.
        """
        with self._lock:
            existing = self._schemas.get(schema.schema_id)
            if existing is None:
                self._schemas[schema.schema_id] = schema
                return schema, True
        if existing != schema:
            raise HostDocumentError(
                f"Schema id {schema.schema_id} is already registered as "
                f"{existing.schema_name} with a different layout. "
                "Use a new schema id for a changed layout."
            )
        return existing, False

    def schemas(self) -> tuple[Schema, ...]:
        with self._lock:
            return tuple(self._schemas.values())
