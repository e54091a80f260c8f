"""Structured logging configuration using structlog.

This module sets up structured logging for the entire application.
Logs are output in JSON format in production and as colored console
lines elsewhere.

The log level is applied once, at startup. Services receive a logger
instance through their constructor (falling back to a module logger) and
never inspect the level themselves.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from app.core.config import Config, get_config


def _app_context_processor(config: Config) -> Processor:
    """Build a processor that adds application context to log events.

    Args:
        config: Application configuration

    Returns:
        structlog processor
    """

    def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["app"] = config.app_name
        event_dict["env"] = config.app_env
        return event_dict

    return add_app_context


def setup_logging(config: Config | None = None) -> None:
    """Configure structured logging for the application.

    This function sets up structlog with:
    - JSON output for production
    - Console output for development
    - Log level taken from configuration
    - Standard library integration

    Args:
        config: Application configuration (defaults to the global config)

    Example:
        >>> setup_logging()
        >>> logger = structlog.get_logger()
        >>> logger.info("Server started", port=8000)
    """
    config = config or get_config()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.log_level),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _app_context_processor(config),
    ]

    # Callsite info only in development
    if config.is_development:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    if config.is_production:
        processors.extend(
            [
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(),
            ]
        )
    else:
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.dev.ConsoleRenderer(colors=True),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name (defaults to calling module)

    Returns:
        Configured structlog logger

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Generation started", model_id="123")
        >>> logger.error("Generation failed", model_id="123", error="Upstream timeout")
    """
    return structlog.get_logger(name)
