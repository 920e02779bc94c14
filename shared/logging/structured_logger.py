"""Structured logging configuration using structlog.

Provides JSON-formatted logs with correlation IDs, timestamps, and context.
Credential fields are scrubbed from every event before rendering.
"""

import logging
import sys
from collections.abc import Mapping
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor


REDACTED = "[REDACTED]"
SENSITIVE_KEYS = frozenset({"password", "password_hash", "hashed_password"})

_app_context: dict[str, str] = {
    "app": "patient-registration-api",
    "environment": "development",
}


def add_app_context(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application context to log entries.

    Args:
        logger: The logger instance
        method_name: The logging method name
        event_dict: The event dictionary

    Returns:
        Updated event dictionary with application context
    """
    for key, value in _app_context.items():
        event_dict.setdefault(key, value)
    return event_dict


def redact_credentials(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace credential values with a placeholder.

    Top-level keys and keys of mappings passed as values (one level deep)
    are scrubbed.

    Args:
        logger: The logger instance
        method_name: The logging method name
        event_dict: The event dictionary

    Returns:
        Event dictionary with sensitive keys masked
    """
    for key, value in list(event_dict.items()):
        if key in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, Mapping) and SENSITIVE_KEYS.intersection(value):
            # copied so the caller's mapping is left intact
            event_dict[key] = {
                k: REDACTED if k in SENSITIVE_KEYS else v for k, v in value.items()
            }
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to output logs in JSON format
        service_name: Name of the service for log tagging
        environment: Deployment environment tag
    """
    if environment:
        _app_context["environment"] = environment

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_app_context,
        redact_credentials,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # Set service name if provided; kept out of contextvars so that
    # per-request clear_context() does not drop it
    if service_name:
        _app_context["service"] = service_name


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to all subsequent log entries in this context.

    Args:
        **kwargs: Context key-value pairs to bind
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
