"""Structured logging configuration.

This module initializes loggers with a stable structured format.
It prefers structlog and falls back to standard logging if absent.
Events go to stderr so CLI output on stdout stays machine-readable.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from core.constants import DEFAULT_LOG_LEVEL

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
_active_level = _LEVELS[DEFAULT_LOG_LEVEL]
_standard_loggers: list[logging.Logger] = []


def configure_logging(level_name: str) -> None:
    """Set the minimum level for every logger, including existing ones.

    Args:
        level_name: One of debug, info, warning, error.
    """
    global _active_level
    _active_level = _LEVELS.get(level_name, _LEVELS[DEFAULT_LOG_LEVEL])
    if not _configure_structlog():
        for logger in _standard_loggers:
            logger.setLevel(_active_level)


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog or stdlib logger with structured output.
    """
    if not _configure_structlog():
        return _get_standard_logger(name)
    import structlog

    return structlog.get_logger(name)


def _configure_structlog() -> bool:
    """Apply the structlog pipeline at the active level.

    Loggers are not cached, so level changes reach loggers that modules
    created at import time.

    Returns:
        Whether structlog is available.
    """
    try:
        import structlog
    except ImportError:
        return False

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_active_level),
        logger_factory=_stderr_print_logger,
        cache_logger_on_first_use=False,
    )
    return True


def _stderr_print_logger(*_: object) -> Any:
    """Build a print logger bound to the current stderr stream."""
    import structlog

    return structlog.PrintLogger(file=sys.stderr)


def _get_standard_logger(name: str) -> Any:
    """Create a stdlib logger fallback.

    Args:
        name: Logger name.

    Returns:
        Configured standard logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _standard_loggers.append(logger)
    logger.setLevel(_active_level)
    return _StructuredStandardLogger(logger)


class _StructuredStandardLogger:
    """Stdlib logger adapter that accepts structured keyword fields."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def debug(self, event: str, **fields: object) -> None:
        self._logger.debug(_format_event(event, fields))

    def info(self, event: str, **fields: object) -> None:
        self._logger.info(_format_event(event, fields))

    def warning(self, event: str, **fields: object) -> None:
        self._logger.warning(_format_event(event, fields))

    def error(self, event: str, **fields: object) -> None:
        self._logger.error(_format_event(event, fields))


def _format_event(event: str, fields: dict[str, object]) -> str:
    """Render a structured event line for standard logging."""
    if not fields:
        return event
    payload = {"event": event, **fields}
    return json.dumps(payload, sort_keys=True, default=str)
