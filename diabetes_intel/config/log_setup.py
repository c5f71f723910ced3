"""structlog configuration shared by the scripts and the API."""

import logging

import structlog

from .settings import settings


def configure_logging(level: str = None) -> None:
    """Filter structlog output by level (defaults to DI_LOG_LEVEL)."""
    level_name = (level or settings.log_level).upper()
    numeric = logging.getLevelName(level_name)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level_name}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        cache_logger_on_first_use=True,
    )
