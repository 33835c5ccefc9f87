"""Structured logging for the engine.

Application code logs through structlog; domain services keep plain
``logging.getLogger(__name__)`` loggers, which ``setup_logging`` routes to the
same stream. ``operation_context`` binds the current engine operation so every
event logged while it runs, including failures, carries it.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import Processor

# Third-party loggers that are too chatty at INFO while serving requests
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level}")
    return number


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'json' for one JSON object per line, 'console' for
            human-readable output
    """
    numeric_level = _level_number(level)

    logging.basicConfig(
        format="%(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
        level=numeric_level,
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Return a structlog logger, optionally bound to ``initial_context``."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


@contextmanager
def operation_context(operation: str, **fields: Any) -> Generator[None, None, None]:
    """Bind ``operation`` and ``fields`` to every log event in the block.

    None values are left out. Bindings are context-local, so concurrent
    asyncio tasks do not see each other's operation.
    """
    bound = {key: value for key, value in fields.items() if value is not None}
    with structlog.contextvars.bound_contextvars(operation=operation, **bound):
        yield
