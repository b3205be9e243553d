"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any

import structlog

from scangate.core.config import get_settings

REDACTED = "[redacted]"


def redact_private_key(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask the configured SSH key wherever it shows up in an event.

    Scanner output is logged verbatim on parse failures and may echo the
    key written by the clone step.
    """
    secret = get_settings().git_private_ssh_key
    if not secret:
        return event_dict
    for key, value in event_dict.items():
        if isinstance(value, str) and secret in value:
            event_dict[key] = value.replace(secret, REDACTED)
    return event_dict


def configure_logging() -> None:
    """Configure structlog with appropriate processors and output format."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        redact_private_key,
    ]

    if settings.app_debug:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        # one JSON object per line for the log shipper
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # add_logger_name needs stdlib loggers (they carry .name)
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # docker-py, urllib3 and sqlalchemy log through stdlib; keep stdout for CLI output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)
