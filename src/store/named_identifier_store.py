"""Get-or-create store for named persistent identifiers.

This module maps a string name to a GUID stored inside a host document.
The first resolve with creation enabled generates and persists a GUID;
every later resolve returns the same value, across save and reload.
At most one record exists per name, guarded by a re-check inside the
write transaction that creates it.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from core.constants import CREATE_TRANSACTION_NAME
from core.errors import InvalidArgumentError, NamedGuidError, StorageFault
from core.logging_config import get_logger
from core.types import NotFound, ResolvedIdentifier, ResolveOutcome, SchemaDescriptor
from host.document import Document
from host.schema import Schema
from store.extensible_storage import StorageAdapter

_LOGGER = get_logger(__name__)


class NamedIdentifierStore:
    """Document-scoped name to GUID store.

    The store keeps no per-document state; the document is passed to
    every call, so one store instance serves any number of documents.
    """

    def __init__(self, adapter: StorageAdapter, descriptor: SchemaDescriptor | None = None) -> None:
        """Create a store.

        Args:
            adapter: Extensible storage adapter.
            descriptor: Schema identity; the built-in schema when omitted.
        """
        self._adapter = adapter
        self._descriptor = descriptor or SchemaDescriptor()

    @property
    def descriptor(self) -> SchemaDescriptor:
        return self._descriptor

    def resolve(
        self,
        document: Document,
        name: str,
        create_if_missing: bool = True,
    ) -> ResolvedIdentifier | NotFound:
        """Return the identifier stored for name, creating it when allowed.

        Args:
            document: Open host document.
            name: Non-empty lookup key.
            create_if_missing: Create and persist a new GUID when absent.

        Returns:
            The resolved identifier, or NotFound when absent and creation
            was not requested.

        Raises:
            InvalidArgumentError: If document is missing or name is empty.
            StorageFault: If the storage layer rejects a read or write. The
                create path is rolled back before the fault propagates.
        """
        _validate_arguments(document, name)
        schema = self._adapter.ensure_schema(self._descriptor)
        record = self._adapter.find_record(document, schema, name)
        if record is not None:
            identifier = self._adapter.read_field(record, schema)
            _LOGGER.debug("named_guid_found", name=name, identifier=str(identifier))
            return ResolvedIdentifier(name=name, identifier=identifier, created=False)
        if not create_if_missing:
            _LOGGER.debug("named_guid_not_found", name=name, document=document.title)
            return NotFound(name=name)
        return self._create(document, schema, name, uuid4())

    def try_resolve(
        self,
        document: Document,
        name: str,
        create_if_missing: bool = True,
    ) -> ResolveOutcome:
        """Resolve name and report faults as an outcome instead of raising.

        Invalid arguments still raise, since they are caller bugs rather
        than storage conditions.
        """
        try:
            result = self.resolve(document, name, create_if_missing)
        except InvalidArgumentError:
            raise
        except NamedGuidError as error:
            return ResolveOutcome(name=name, status="fault", error=error)
        return outcome_from_result(result)

    def _create(
        self,
        document: Document,
        schema: Schema,
        name: str,
        candidate: UUID,
    ) -> ResolvedIdentifier:
        try:
            with self._adapter.write_transaction(document, CREATE_TRANSACTION_NAME):
                record = self._adapter.find_record(document, schema, name)
                if record is not None:
                    identifier = self._adapter.read_field(record, schema)
                    _LOGGER.info("named_guid_race_resolved", name=name, identifier=str(identifier))
                    return ResolvedIdentifier(name=name, identifier=identifier, created=False)
                self._adapter.create_record(document, schema, name, candidate)
        except StorageFault as error:
            _LOGGER.error(
                "named_guid_create_failed",
                name=name,
                document=document.title,
                error=str(error),
            )
            raise
        _LOGGER.info(
            "named_guid_created",
            name=name,
            identifier=str(candidate),
            document=document.title,
        )
        return ResolvedIdentifier(name=name, identifier=candidate, created=True)


def outcome_from_result(result: ResolvedIdentifier | NotFound) -> ResolveOutcome:
    """Convert a resolve result into a typed outcome."""
    if isinstance(result, NotFound):
        return ResolveOutcome(name=result.name, status="not_found")
    return ResolveOutcome(
        name=result.name,
        status="created" if result.created else "found",
        identifier=result.identifier,
    )


def _validate_arguments(document: Document | None, name: object) -> None:
    if document is None:
        raise InvalidArgumentError("A document is required to resolve a named identifier.")
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError(
            f"Identifier name must be a non-empty string, got {name!r}."
        )
