"""Public SDK surface for the named GUID store.

This module provides a stable import path for library users.
It re-exports the client, the store, and typed result models.
"""

from __future__ import annotations

from core.config import NamedGuidConfig
from core.errors import InvalidArgumentError, NamedGuidError, StorageFault
from core.schema_spec import load_schema_descriptor
from core.types import NotFound, ResolvedIdentifier, ResolveOutcome, SchemaDescriptor
from host.application import HostApplication
from host.document import Document
from store.extensible_storage import ExtensibleStorageAdapter
from store.named_guid_sdk import NamedGuidClient
from store.named_identifier_store import NamedIdentifierStore

__all__ = [
    "Document",
    "ExtensibleStorageAdapter",
    "HostApplication",
    "InvalidArgumentError",
    "NamedGuidClient",
    "NamedGuidConfig",
    "NamedGuidError",
    "NamedIdentifierStore",
    "NotFound",
    "ResolveOutcome",
    "ResolvedIdentifier",
    "SchemaDescriptor",
    "StorageFault",
    "load_schema_descriptor",
]
