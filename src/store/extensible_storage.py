"""Extensible storage adapter over the host document model.

This module is the only place that talks to host schemas, elements, and
transactions. Host failures are translated into StorageFault so the
identifier store never handles host-specific errors.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol
from uuid import UUID

from core.errors import HostDocumentError, StorageFault
from core.logging_config import get_logger
from core.types import SchemaDescriptor
from host.document import Document
from host.elements import DataStorage, Entity
from host.schema import FieldSpec, Schema, SchemaRegistry, build_schema
from host.transaction import Transaction

_LOGGER = get_logger(__name__)


class StorageAdapter(Protocol):
    """Boundary consumed by the named identifier store."""

    def find_schema(self, schema_id: UUID) -> Schema | None: ...

    def ensure_schema(self, descriptor: SchemaDescriptor) -> Schema: ...

    def find_record(self, document: Document, schema: Schema, name: str) -> DataStorage | None: ...

    def create_record(
        self,
        document: Document,
        schema: Schema,
        name: str,
        identifier: UUID,
    ) -> DataStorage: ...

    def read_field(self, record: DataStorage, schema: Schema) -> UUID: ...

    def write_transaction(self, document: Document, name: str) -> ContextManager[Transaction]: ...


class ExtensibleStorageAdapter:
    """Storage adapter backed by a host schema registry and documents."""

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry = registry

    def find_schema(self, schema_id: UUID) -> Schema | None:
        return self._registry.lookup(schema_id)

    def ensure_schema(self, descriptor: SchemaDescriptor) -> Schema:
        """Register the descriptor's schema, or return the identical registered one.

        Raises:
            StorageFault: If the id is registered with a different layout.
        """
        try:
            schema = build_schema(
                schema_id=descriptor.schema_id,
                schema_name=descriptor.schema_name,
                fields={descriptor.field_name: "guid"},
                documentation=descriptor.documentation,
            )
            registered, created = self._registry.register(schema)
        except HostDocumentError as error:
            raise StorageFault(
                f"Failed to register schema {descriptor.schema_name} "
                f"({descriptor.schema_id}): {error}"
            ) from error
        if created:
            _LOGGER.info(
                "schema_registered",
                schema_id=str(registered.schema_id),
                schema_name=registered.schema_name,
            )
        return registered

    def find_record(self, document: Document, schema: Schema, name: str) -> DataStorage | None:
        """Return the data storage element named name carrying schema, if any.

        Elements are scanned in element id order, so the oldest wins when a
        foreign writer has left duplicates behind.
        """
        matches = [
            element
            for element in document.data_storages()
            if element.name == name and element.has_entity(schema.schema_id)
        ]
        if not matches:
            return None
        if len(matches) > 1:
            _LOGGER.warning(
                "duplicate_named_guid_records",
                document=document.title,
                name=name,
                element_ids=[element.element_id for element in matches],
            )
        return matches[0]

    def create_record(
        self,
        document: Document,
        schema: Schema,
        name: str,
        identifier: UUID,
    ) -> DataStorage:
        """Create a named data storage element holding identifier.

        Must run inside an open write transaction on document.

        Raises:
            StorageFault: If no transaction is open, the document is
                read-only, or the host rejects the entity.
        """
        field_spec = _guid_field(schema)
        try:
            element = document.create_data_storage(name)
            entity = Entity(schema)
            entity.set(field_spec.name, identifier)
            document.set_entity(element, entity)
        except HostDocumentError as error:
            raise StorageFault(
                f"Failed to create storage record {name!r} in document {document.title!r}: {error}"
            ) from error
        return element

    def read_field(self, record: DataStorage, schema: Schema) -> UUID:
        """Decode the GUID stored on record.

        Raises:
            StorageFault: If the entity or its GUID value is missing.
        """
        field_spec = _guid_field(schema)
        entity = record.get_entity(schema.schema_id)
        value = entity.get(field_spec.name) if entity is not None else None
        if not isinstance(value, UUID):
            raise StorageFault(
                f"Storage record {record.name!r} (element {record.element_id}) has no valid "
                f"{field_spec.name} value for schema {schema.schema_name}."
            )
        return value

    @contextmanager
    def write_transaction(self, document: Document, name: str) -> Iterator[Transaction]:
        """Open a write transaction, nested when the caller already holds one.

        The transaction commits when the block exits normally and rolls back
        when it raises.

        Raises:
            StorageFault: If the transaction cannot start or commit.
        """
        transaction = document.transaction(name)
        try:
            transaction.start()
        except HostDocumentError as error:
            raise StorageFault(
                f"Cannot open transaction {name!r} on document {document.title!r}: {error}"
            ) from error
        try:
            yield transaction
        except BaseException:
            if transaction.status == "started":
                transaction.rollback()
            raise
        try:
            transaction.commit()
        except HostDocumentError as error:
            raise StorageFault(
                f"Transaction {name!r} on document {document.title!r} failed to commit: {error}"
            ) from error


def _guid_field(schema: Schema) -> FieldSpec:
    for field_spec in schema.fields:
        if field_spec.value_type == "guid":
            return field_spec
    raise StorageFault(f"Schema {schema.schema_name} ({schema.schema_id}) has no GUID field.")
