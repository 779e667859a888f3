"""Named GUID store exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Host document failures are kept apart from storage faults so the
adapter layer can translate one into the other.
"""

from __future__ import annotations


class NamedGuidError(Exception):
    """Base exception for all named GUID store failures."""


class NamedGuidConfigError(NamedGuidError):
    """Raised for invalid runtime configuration."""


class NamedGuidDependencyError(NamedGuidError):
    """Raised when an optional runtime dependency is missing."""


class SchemaSpecError(NamedGuidError):
    """Raised for invalid or unsupported schema descriptor files."""


class InvalidArgumentError(NamedGuidError, ValueError):
    """Raised when a caller passes an empty name or no document."""


class StorageFault(NamedGuidError):
    """Raised when the extensible storage layer denies a read or write."""


class HostDocumentError(NamedGuidError):
    """Raised by the host document model for invalid operations."""


class TransactionError(HostDocumentError):
    """Raised when a transaction cannot start, commit, or roll back."""


class ReadOnlyDocumentError(HostDocumentError):
    """Raised when a read-only document is asked to change."""


class DocumentFileError(HostDocumentError):
    """Raised when a document file cannot be read or written."""
