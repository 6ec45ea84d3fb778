"""structlog setup for the cache service and its smoke check.

Events go through the stdlib ``logging`` root handler, rendered as JSON lines
unless ``DEBUG`` is set, in which case a colored console renderer is used.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from chatcache.core.config import get_settings

# Per-request chatter from the HTTP stack underneath the Upstash client
NOISY_LOGGERS = ("httpx", "httpcore", "upstash_redis")


def add_service_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp every event with the service name and version."""
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    return event_dict


def _renderer(debug: bool) -> list[Processor]:
    if debug:
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def setup_logging(level: str | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    ``level`` overrides ``LOG_LEVEL`` from settings.
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_service_info,
        *_renderer(settings.debug),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
