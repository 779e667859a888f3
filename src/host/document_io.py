"""Document file persistence.

Documents are saved as one JSON payload holding the schemas referenced by
entities and every data storage element. Opening a file registers its
schemas with the session registry before elements are rebuilt.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from uuid import UUID

from core.constants import DOCUMENT_FORMAT_VERSION
from core.errors import DocumentFileError, HostDocumentError
from host.document import Document
from host.elements import DataStorage, Entity
from host.schema import Schema, SchemaRegistry, build_schema


def write_document_file(document_path: Path, document: Document) -> None:
    """Serialize a document to disk.

    Args:
        document_path: Target file path.
        document: Document to serialize.

    Raises:
        DocumentFileError: If the file cannot be written.
    """
    payload = document_to_payload(document)
    try:
        document_path.parent.mkdir(parents=True, exist_ok=True)
        document_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as error:
        raise DocumentFileError(
            f"Failed to write document file {document_path}: {error}."
        ) from error


def read_document_file(
    document_path: Path,
    registry: SchemaRegistry,
    read_only: bool = False,
) -> Document:
    """Load a document from disk and register its schemas.

    Args:
        document_path: Source file path.
        registry: Session schema registry.
        read_only: Whether to open the document read-only.

    Returns:
        Loaded document bound to document_path.

    Raises:
        DocumentFileError: If the file is missing, unreadable, or malformed.
        HostDocumentError: If a stored schema conflicts with a registered one.
    """
    try:
        payload = json.loads(document_path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise DocumentFileError(
            f"Document file not found at {document_path}. Create it with new-document first."
        ) from error
    except json.JSONDecodeError as error:
        raise DocumentFileError(
            f"Failed to parse document file {document_path}: {error.msg}."
        ) from error
    except OSError as error:
        raise DocumentFileError(f"Failed to read document file {document_path}: {error}.") from error
    if not isinstance(payload, dict):
        raise DocumentFileError(
            f"Invalid document file {document_path}: expected JSON object at top level."
        )
    return document_from_payload(payload, document_path, registry, read_only)


def document_to_payload(document: Document) -> dict[str, Any]:
    schemas: dict[UUID, Schema] = {}
    elements_payload = []
    for element in document.data_storages():
        entities_payload = []
        for entity in element.entities():
            schemas[entity.schema.schema_id] = entity.schema
            entities_payload.append(
                {
                    "schema_id": str(entity.schema.schema_id),
                    "fields": {
                        name: str(value) for name, value in sorted(entity.values().items())
                    },
                }
            )
        elements_payload.append(
            {"element_id": element.element_id, "name": element.name, "entities": entities_payload}
        )
    return {
        "format_version": DOCUMENT_FORMAT_VERSION,
        "title": document.title,
        "next_element_id": document.next_element_id,
        "schemas": [_schema_to_payload(schema) for schema in schemas.values()],
        "elements": elements_payload,
    }


def document_from_payload(
    payload: dict[str, Any],
    document_path: Path,
    registry: SchemaRegistry,
    read_only: bool,
) -> Document:
    if payload.get("format_version") != DOCUMENT_FORMAT_VERSION:
        raise DocumentFileError(
            f"Unsupported document format {payload.get('format_version')!r} in {document_path}. "
            f"Expected format_version {DOCUMENT_FORMAT_VERSION}."
        )
    try:
        schemas = {}
        for schema_payload in payload["schemas"]:
            schema, _ = registry.register(_schema_from_payload(schema_payload))
            schemas[schema.schema_id] = schema
        elements = [_element_from_payload(item, schemas) for item in payload["elements"]]
        title = str(payload["title"])
        next_element_id = int(payload["next_element_id"])
    except (AttributeError, KeyError, TypeError, ValueError) as error:
        raise DocumentFileError(
            f"Invalid document file {document_path}: {error}. The file may be corrupted."
        ) from error
    return Document(
        title=title,
        path=document_path,
        read_only=read_only,
        elements=elements,
        next_element_id=next_element_id,
    )


def _schema_to_payload(schema: Schema) -> dict[str, Any]:
    return {
        "schema_id": str(schema.schema_id),
        "schema_name": schema.schema_name,
        "documentation": schema.documentation,
        "fields": {field.name: field.value_type for field in schema.fields},
    }


def _schema_from_payload(payload: dict[str, Any]) -> Schema:
    return build_schema(
        schema_id=UUID(str(payload["schema_id"])),
        schema_name=str(payload["schema_name"]),
        fields={str(name): str(value_type) for name, value_type in payload["fields"].items()},
        documentation=str(payload.get("documentation", "")),
    )


def _element_from_payload(payload: dict[str, Any], schemas: dict[UUID, Schema]) -> DataStorage:
    entities: dict[UUID, Entity] = {}
    for entity_payload in payload["entities"]:
        schema_id = UUID(str(entity_payload["schema_id"]))
        schema = schemas.get(schema_id)
        if schema is None:
            raise HostDocumentError(f"Entity references undeclared schema {schema_id}.")
        values = {
            name: _decode_value(schema, name, raw_value)
            for name, raw_value in entity_payload["fields"].items()
        }
        entities[schema_id] = Entity(schema, values)
    return DataStorage(int(payload["element_id"]), str(payload["name"]), entities)


def _decode_value(schema: Schema, field_name: str, raw_value: object) -> object:
    field_spec = schema.field(field_name)
    if field_spec is None:
        raise HostDocumentError(
            f"Field {field_name!r} is not declared by schema {schema.schema_name}."
        )
    if field_spec.value_type == "guid":
        return UUID(str(raw_value))
    return str(raw_value)
