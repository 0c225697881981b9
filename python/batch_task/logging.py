"""Structured logging for batch-task.

This module provides structured logging functions that attach a flat
dict of string fields to every record, so task events can be filtered
and correlated the same way regardless of the handler in use.

Example:
    >>> from batch_task import configure_logging, log_info
    >>>
    >>> configure_logging("debug")
    >>> log_info("Reindex started", {
    ...     "task_name": "reindex",
    ...     "total": 5000,
    ... })
"""

from __future__ import annotations

import logging
import os
from typing import Any

from .types import LogContext

LOGGER_NAME = "batch_task"
LOG_LEVEL_ENV_VAR = "BATCH_TASK_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_logger = logging.getLogger(LOGGER_NAME)


def log_error(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an ERROR level message with structured fields.

    Use this for failures that stop a task from making progress.

    Args:
        message: The log message.
        fields: Optional structured fields for context. Can be a dict
                or a LogContext instance.

    Example:
        >>> log_error("Processing function raised", {
        ...     "task_name": "reindex",
        ...     "error_type": "KeyError"
        ... })
    """
    _emit(logging.ERROR, message, fields)


def log_warn(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a WARN level message with structured fields.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _emit(logging.WARNING, message, fields)


def log_info(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an INFO level message with structured fields.

    Use this for lifecycle events and state transitions.

    Args:
        message: The log message.
        fields: Optional structured fields for context.

    Example:
        >>> log_info("Task canceled", {"task_name": "reindex", "cursor": 1200})
    """
    _emit(logging.INFO, message, fields)


def log_debug(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a DEBUG level message with structured fields.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _emit(logging.DEBUG, message, fields)


def log_trace(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a TRACE level message with structured fields.

    Use this for very verbose logging, like per-batch progress.
    This level is typically disabled in production.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _emit(TRACE, message, fields)


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the batch_task logger.

    The level falls back to the BATCH_TASK_LOG_LEVEL environment
    variable, then to "info". Calling this again only updates the level.

    Args:
        level: One of trace, debug, info, warn, error.

    Returns:
        The configured batch_task logger.

    Raises:
        ValueError: If the level name is unknown.
    """
    name = (level or os.environ.get(LOG_LEVEL_ENV_VAR, "info")).lower()
    if name not in _LEVELS:
        raise ValueError(f"Unknown log level: {name!r}")

    _logger.setLevel(_LEVELS[name])
    if not any(getattr(h, "_batch_task", False) for h in _logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        handler._batch_task = True  # type: ignore[attr-defined]
        _logger.addHandler(handler)
    return _logger


def _emit(
    level: int,
    message: str,
    fields: dict[str, Any] | LogContext | None,
) -> None:
    if not _logger.isEnabledFor(level):
        return

    fields_dict = _normalize_fields(fields)
    if fields_dict:
        rendered = " ".join(f"{k}={v}" for k, v in fields_dict.items())
        message = f"{message} [{rendered}]"
    _logger.log(level, message, extra={"fields": fields_dict or {}})


def _normalize_fields(
    fields: dict[str, Any] | LogContext | None,
) -> dict[str, str] | None:
    """Normalize fields to a dict of strings.

    Args:
        fields: Input fields as dict, LogContext, or None.

    Returns:
        Dict with string values, or None if no fields.
    """
    if fields is None:
        return None

    if isinstance(fields, LogContext):
        # Drop unset context fields
        return {k: str(v) for k, v in fields.model_dump().items() if v is not None}

    return {k: str(v) for k, v in fields.items()}


__all__ = [
    "TRACE",
    "configure_logging",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]
