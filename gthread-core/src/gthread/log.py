"""Logging helpers, thin wrappers around structlog."""

from __future__ import annotations

import logging

import structlog


def configure_logging(level: int | str = logging.WARNING) -> None:
    """Configures structlog for the gthread loggers.

    Args:
        level: the minimum level to emit, as a logging level or its name
    """
    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Gets a logger bound to the given module name."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger_name=name)
