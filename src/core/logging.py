"""
Structured logging configuration using structlog.

Console output with colors while developing, one JSON object per line in
production.

Usage:
    from core.logging import configure_logging, get_logger

    configure_logging(json_logs=False)  # Development
    configure_logging(json_logs=True)   # Production
    configure_logging_from_settings(get_settings())  # API startup

    logger = get_logger(__name__)
    logger.info("Outfit rated", garments=3, score=7.4)
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import Processor


# Per-request access lines from the server and the test client
NOISY_LOGGERS = ("httpx", "uvicorn.access")


def configure_logging(
    json_logs: bool = False,
    log_level: str = "INFO",
    include_timestamp: bool = True,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        json_logs: If True, output JSON format (for production).
                   If False, output colored console format (for development).
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        include_timestamp: Whether to include timestamp in logs
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ))

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    # basicConfig is a no-op once handlers exist (uvicorn, pytest)
    logging.getLogger().setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def configure_logging_from_settings(settings: Any) -> None:
    """
    Configure logging for the rating API from its settings.

    Production renders JSON. Debug mode forces DEBUG whatever LOG_LEVEL says.
    """
    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else settings.log_level,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__). If None, returns root logger.
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """
    Bind context variables to all subsequent logs in the current context.

    Used by the request middleware for request_id / method / path.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    """Unbind specific context variables."""
    structlog.contextvars.unbind_contextvars(*keys)


class LoggerMixin:
    """
    Mixin class that provides a logger property named after the class.

    Usage:
        class OutfitRatingService(LoggerMixin):
            def rate_outfit(self, outfit):
                self.logger.info("Rating outfit")
    """

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return get_logger(self.__class__.__name__)
