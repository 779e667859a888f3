"""Python SDK for named identifier operations.

This module wires configuration, the host session, and the identifier
store together, and adds the file-level workflows used by the CLI.
"""

from __future__ import annotations

from pathlib import Path

from core.config import NamedGuidConfig
from core.errors import HostDocumentError, NamedGuidError, StorageFault
from core.logging_config import configure_logging
from core.schema_spec import load_schema_descriptor
from core.types import NotFound, ResolvedIdentifier, ResolveOutcome, SchemaDescriptor
from host.application import HostApplication
from host.document import Document
from store.extensible_storage import ExtensibleStorageAdapter
from store.named_identifier_store import NamedIdentifierStore, outcome_from_result


class NamedGuidClient:
    """Primary SDK entry point for named identifier workflows."""

    def __init__(
        self,
        config: NamedGuidConfig | None = None,
        application: HostApplication | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            application: Optional host session; a fresh one when omitted.
        """
        self._config = config or NamedGuidConfig.from_env()
        configure_logging(self._config.log_level)
        self._application = application or HostApplication()
        descriptor = (
            load_schema_descriptor(self._config.schema_file)
            if self._config.schema_file
            else SchemaDescriptor()
        )
        adapter = ExtensibleStorageAdapter(self._application.schemas)
        self._store = NamedIdentifierStore(adapter, descriptor)

    @property
    def config(self) -> NamedGuidConfig:
        return self._config

    @property
    def application(self) -> HostApplication:
        return self._application

    @property
    def store(self) -> NamedIdentifierStore:
        return self._store

    def new_document(self, document_path: str | Path, title: str | None = None) -> Path:
        """Create and save an empty document.

        Args:
            document_path: Target file; must not exist yet.
            title: Optional document title, the file stem by default.

        Returns:
            Resolved saved path.

        Raises:
            StorageFault: If the file exists or cannot be written.
        """
        target = Path(document_path).expanduser().resolve()
        if target.exists():
            raise StorageFault(
                f"Document file already exists at {target}. Choose a new path."
            )
        document = self._application.new_document(title or target.stem)
        return self.save_document(document, target)

    def open_document(self, document_path: str | Path, read_only: bool = False) -> Document:
        """Open a saved document from disk.

        Raises:
            StorageFault: If the file cannot be read or its schemas conflict.
        """
        try:
            return self._application.open_document(document_path, read_only=read_only)
        except HostDocumentError as error:
            raise StorageFault(f"Failed to open document {document_path}: {error}") from error

    def save_document(self, document: Document, document_path: str | Path | None = None) -> Path:
        """Save a document, translating host failures into StorageFault."""
        try:
            return self._application.save_document(document, document_path)
        except HostDocumentError as error:
            raise StorageFault(f"Failed to save document {document.title!r}: {error}") from error

    def resolve(
        self,
        document: Document,
        name: str,
        create_if_missing: bool = True,
    ) -> ResolvedIdentifier | NotFound:
        """Resolve name in an open document; see NamedIdentifierStore.resolve."""
        return self._store.resolve(document, name, create_if_missing)

    def try_resolve(
        self,
        document: Document,
        name: str,
        create_if_missing: bool = True,
    ) -> ResolveOutcome:
        return self._store.try_resolve(document, name, create_if_missing)

    def resolve_in_file(
        self,
        document_path: str | Path,
        name: str,
        create_if_missing: bool = True,
        read_only: bool = False,
    ) -> ResolvedIdentifier | NotFound:
        """Open a document file, resolve name, and save when an entry was created.

        Raises:
            InvalidArgumentError: If name is empty.
            StorageFault: If opening, resolving, or saving fails.
        """
        document = self.open_document(document_path, read_only=read_only)
        result = self._store.resolve(document, name, create_if_missing)
        if isinstance(result, ResolvedIdentifier) and result.created:
            self.save_document(document)
        return result

    def project_identifier(
        self,
        document_path: str | Path,
        name: str | None = None,
        read_only: bool = False,
    ) -> ResolveOutcome:
        """Return the document's project identifier, creating it on first use.

        Looks the name up without creating first, then creates only when
        absent. Every failure is reported as a fault outcome.

        Args:
            document_path: Document file path.
            name: Identifier name; the configured default when omitted.
            read_only: Open the document read-only.

        Returns:
            Outcome with status found, created, or fault.
        """
        identifier_name = name or self._config.default_name
        try:
            document = self.open_document(document_path, read_only=read_only)
            existing = self._store.resolve(document, identifier_name, create_if_missing=False)
            if isinstance(existing, ResolvedIdentifier):
                return outcome_from_result(existing)
            created = self._store.resolve(document, identifier_name, create_if_missing=True)
            if isinstance(created, ResolvedIdentifier) and created.created:
                self.save_document(document)
            return outcome_from_result(created)
        except NamedGuidError as error:
            return ResolveOutcome(name=identifier_name, status="fault", error=error)
