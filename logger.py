"""Logging for the Trakt client.

Client modules log through structlog on top of stdlib loggers under the
``trakt_client`` namespace. Nothing is emitted until the application either
calls :func:`setup_logging` or configures stdlib logging itself.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

from settings import get_settings

LOGGER_NAMESPACE = "trakt_client"

logging.getLogger(LOGGER_NAMESPACE).addHandler(logging.NullHandler())


def _renderer(fmt: str):
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Send the client's log events to ``stream`` (stdout by default).

    Only the ``trakt_client`` logger tree is touched; the application's root
    logger is left alone. Level and format default to ``log_level`` and
    ``log_format`` from settings. Calling it again replaces the handler.
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    fmt = fmt or settings.log_format

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(fmt),
            ]
        )
    )
    handler.set_name(LOGGER_NAMESPACE)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    for old in [h for h in logger.handlers if h.get_name() == LOGGER_NAMESPACE]:
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level, logging.INFO))
    logger.propagate = False
    return handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger backed by ``trakt_client.<name>``."""
    return structlog.wrap_logger(
        logging.getLogger(f"{LOGGER_NAMESPACE}.{name}"),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
