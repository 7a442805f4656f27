"""
Structured logging configuration using structlog.

Renders JSON lines in production and a readable console format elsewhere.
Everything goes to stderr, so `hotboard fetch --json` keeps stdout clean.
The orchestrator binds `source_id` inside each source task, which tags every
event that source emits.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from hotboard.config.settings import Settings, get_settings

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")


def _renderer(settings: Settings) -> list[Processor]:
    if settings.is_production:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def setup_logging(settings: Settings | None = None) -> None:
    """
    Configure structlog on top of the standard library logger.

    Usage:
        setup_logging()
        logger = structlog.get_logger(__name__)
        logger.info("Snapshot written", source_id="weibo", items=50)
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *_renderer(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, typically called with __name__."""
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """
    Attach key-value pairs to every later event in the current context.

    Inside an asyncio task the binding stays local to that task.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all bound context variables."""
    structlog.contextvars.clear_contextvars()
