"""
Logging utilities for recaptcha_v3.

The package only ever calls get_logger(); applications that want structured
output call configure_logging() once at startup. Nothing is configured on
import.
"""

import logging
import sys

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

# Keys never written to logs in clear text
REDACTED_FIELDS = {"secret", "secret_key", "token", "response", "key"}

_PRESERVED_FIELDS = {"level", "event", "timestamp", "logger"}


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("recaptcha_classified", human=True, score=0.9)
    """
    return structlog.get_logger(name)


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact secrets and tokens from log events."""
    for key in list(event_dict.keys()):
        if key in _PRESERVED_FIELDS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or "secret" in lowered or "token" in lowered:
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """
    Configure structlog on top of standard library logging.

    Args:
        level: Log level name for the root logger
        json: Render JSON lines instead of the colored console format
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]
    if json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True, pad_event=15))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
