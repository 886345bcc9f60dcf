"""
Logging configuration using structlog.

Every module logs through ``structlog.get_logger(__name__)`` with snake_case
event names and keyword context, e.g.
``log.warning("commit_fetch_failed", repository=repo, error=str(e))``.
"""

import sys
from typing import Any

import structlog

# Event keys that may carry tracker or code host credentials
SECRET_KEYS = frozenset({"api_token", "token", "auth", "authorization", "password"})
REDACTED = "***"


def redact_credentials(_logger: Any, _method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask credential values bound to a log event."""
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines when True, a human-readable console
            format otherwise

    Log lines are written to stderr; stdout carries the report only.
    """
    renderer: Any = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_credentials,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
