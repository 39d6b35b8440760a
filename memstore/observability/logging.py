"""
Structured logging configuration using structlog.

Console rendering for local work, JSON lines for production or when
LOG_FORMAT=json. Request handlers bind a request_id into contextvars so
every line logged while serving a request carries it.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from memstore.config.settings import get_settings

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "openai", "asyncpg")


def _use_json(log_format: str | None, is_production: bool) -> bool:
    if log_format is None:
        return is_production
    return log_format == "json"


def build_processors(json_logs: bool) -> list[Processor]:
    """Processor chain shared by the API server and the CLI."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def setup_logging(level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Overrides LOG_LEVEL (the CLI passes DEBUG for --debug)

    Usage:
        setup_logging()
        logger = structlog.get_logger(__name__)
        logger.info("Document stored", document_id="123", container_tag="default")
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()

    structlog.configure(
        processors=build_processors(_use_json(settings.log_format, settings.is_production)),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """Bind context variables to all subsequent log messages."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
