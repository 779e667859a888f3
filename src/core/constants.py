"""Core constants used across named GUID store modules.

This module centralizes schema identity defaults and host literals.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from uuid import UUID

DEFAULT_SCHEMA_ID = UUID("5F374308-9C59-42AE-ACC3-A77EF45EC146")
DEFAULT_SCHEMA_NAME = "JtNamedGuiStorage"
DEFAULT_GUID_FIELD_NAME = "Guid"
DEFAULT_SCHEMA_DOCUMENTATION = "Named GUID storage, one GUID field per named record."
DEFAULT_IDENTIFIER_NAME = "TrackChanges_project_identifier"
CREATE_TRANSACTION_NAME = "Create named Guid storage"
SCHEMA_SPEC_VERSION = 1
DOCUMENT_FORMAT_VERSION = 1
DEFAULT_DOCUMENT_TITLE = "Untitled"
FIRST_ELEMENT_ID = 1
SUPPORTED_FIELD_TYPES = ("guid", "string")
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
DEFAULT_LOG_LEVEL = "info"
