"""Runtime configuration model for the named GUID store.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_IDENTIFIER_NAME, DEFAULT_LOG_LEVEL, SUPPORTED_LOG_LEVELS
from core.errors import NamedGuidConfigError


@dataclass(frozen=True)
class NamedGuidConfig:
    """Validated runtime configuration.

    Attributes:
        schema_file: Optional YAML schema descriptor overriding the default schema.
        default_name: Identifier name used by the project-id command.
        log_level: Minimum level for structured log events.
    """

    schema_file: Path | None
    default_name: str
    log_level: str

    @classmethod
    def from_env(cls) -> "NamedGuidConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            NamedGuidConfigError: If environment values are invalid.
        """
        schema_file_value = os.getenv("NAMED_GUID_SCHEMA_FILE")
        default_name = _parse_default_name(
            os.getenv("NAMED_GUID_DEFAULT_NAME", DEFAULT_IDENTIFIER_NAME)
        )
        log_level = _parse_log_level(os.getenv("NAMED_GUID_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        return cls(
            schema_file=Path(schema_file_value).expanduser().resolve()
            if schema_file_value
            else None,
            default_name=default_name,
            log_level=log_level,
        )


def _parse_default_name(raw_value: str) -> str:
    """Validate the default identifier name.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Stripped identifier name.

    Raises:
        NamedGuidConfigError: If the value is blank.
    """
    name = raw_value.strip()
    if not name:
        raise NamedGuidConfigError(
            "Invalid NAMED_GUID_DEFAULT_NAME value: expected a non-empty name. "
            "Unset the variable or set it to an identifier name."
        )
    return name


def _parse_log_level(raw_value: str) -> str:
    """Validate the log level environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Lower-case level name.

    Raises:
        NamedGuidConfigError: If the level is not supported.
    """
    level = raw_value.strip().lower()
    if level not in SUPPORTED_LOG_LEVELS:
        raise NamedGuidConfigError(
            "Invalid NAMED_GUID_LOG_LEVEL value: "
            f"expected one of {', '.join(SUPPORTED_LOG_LEVELS)}, got '{raw_value}'."
        )
    return level
