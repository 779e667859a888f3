"""Host application session.

The session owns the schema registry shared by every document it opens,
and the new/open/save lifecycle of documents.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import DEFAULT_DOCUMENT_TITLE
from core.errors import DocumentFileError, ReadOnlyDocumentError, TransactionError
from core.logging_config import get_logger
from host.document import Document
from host.document_io import read_document_file, write_document_file
from host.schema import SchemaRegistry

_LOGGER = get_logger(__name__)


class HostApplication:
    """One host session with its schema registry."""

    def __init__(self) -> None:
        self._schemas = SchemaRegistry()

    @property
    def schemas(self) -> SchemaRegistry:
        return self._schemas

    def new_document(self, title: str = DEFAULT_DOCUMENT_TITLE) -> Document:
        """Create an empty, unsaved document."""
        return Document(title=title)

    def open_document(self, document_path: str | Path, read_only: bool = False) -> Document:
        """Open a saved document.

        Args:
            document_path: Document file path.
            read_only: Whether to refuse all transactions on the document.

        Returns:
            Loaded document.
        """
        resolved_path = Path(document_path).expanduser().resolve()
        document = read_document_file(resolved_path, self._schemas, read_only=read_only)
        _LOGGER.info(
            "document_opened",
            path=str(resolved_path),
            element_count=len(document.data_storages()),
            read_only=read_only,
        )
        return document

    def save_document(self, document: Document, document_path: str | Path | None = None) -> Path:
        """Save a document to its own path or to a new one.

        Raises:
            ReadOnlyDocumentError: If the document is read-only.
            TransactionError: If a transaction is still open.
            DocumentFileError: If no path is known or the write fails.
        """
        if document.is_read_only:
            raise ReadOnlyDocumentError(f"Document {document.title!r} is read-only.")
        if document.has_open_transaction():
            raise TransactionError(
                f"Cannot save document {document.title!r} while a transaction is open."
            )
        target = Path(document_path) if document_path is not None else document.path
        if target is None:
            raise DocumentFileError(
                f"Document {document.title!r} has never been saved. Provide a file path."
            )
        resolved_path = target.expanduser().resolve()
        write_document_file(resolved_path, document)
        document.mark_saved(resolved_path)
        _LOGGER.info("document_saved", path=str(resolved_path), title=document.title)
        return resolved_path
