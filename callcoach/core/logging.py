"""Structlog configuration.

Modules obtain loggers with ``structlog.get_logger()``; this module only
decides how events are rendered.
"""

from __future__ import annotations

import logging

import structlog

from callcoach.core.config import settings


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    """Configure structlog processors and the stdlib root level.

    Args:
        level: Log level name; defaults to ``settings.LOG_LEVEL``.
        json: Render JSON lines instead of console output; defaults to
            ``settings.LOG_JSON``.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    use_json = settings.LOG_JSON if json is None else json
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(format="%(message)s", level=numeric_level)

    renderer: structlog.types.Processor
    if use_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )


__all__ = ["configure_logging"]
