from __future__ import annotations

import logging

import structlog

from billsplit.config import get_settings

_PROCESSORS = [
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.JSONRenderer(),
]


def _configure_library_defaults() -> None:
    # stay silent until the host application configures logging
    logging.getLogger("billsplit").addHandler(logging.NullHandler())
    if structlog.is_configured():
        return
    structlog.configure(
        processors=list(_PROCESSORS),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def configure_logging(level: str | None = None) -> None:
    level_name = (level or get_settings().log_level).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
    )

    structlog.configure(
        processors=list(_PROCESSORS),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


_configure_library_defaults()
