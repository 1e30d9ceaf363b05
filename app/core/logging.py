"""Structured logging configuration.

Teardown logs carry provider credentials close by (subaccount tokens, API
keys), so every event passes through a redaction processor before it is
rendered.
"""

import logging
import sys
from typing import Any

import structlog

from app.core.config import settings

# Substrings of event keys whose values must never reach the logs
SENSITIVE_KEYS = ("token", "api_key", "secret", "password", "authorization")

REDACTED = "***"


def redact_secrets(_logger: Any, _method: str, event_dict: dict) -> dict:
    """Mask values of credential-looking keys."""
    for key in event_dict:
        if any(marker in key.lower() for marker in SENSITIVE_KEYS):
            event_dict[key] = REDACTED
    return event_dict


def setup_logging() -> None:
    """Configure structlog and the stdlib root logger.

    Console output in debug, one JSON object per line otherwise.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.debug
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # SQLAlchemy, httpx and the twilio SDK log through the stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger("twilio.http_client").setLevel(max(level, logging.WARNING))


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


logger = get_logger("teardown")
