from __future__ import annotations

import logging
from typing import Any

import structlog

from .config import Settings, get_settings

PACKAGE_LOGGER = "mediasearch"


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the package's stdlib logger from ``settings.observability``."""
    observability = (settings or get_settings()).observability
    level = getattr(logging, observability.log_level, logging.INFO)
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    renderer: Any
    if observability.log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(*, name: str | None = None, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger(name)
    if kwargs:
        return logger.bind(**kwargs)
    return logger
