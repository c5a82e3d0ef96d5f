"""
Structured logging for nomadwatch.

Library modules only call get_logger(); nothing is configured on import.
Applications (and the CLI) call setup_logging() once at start-up to route
structlog through the standard library with JSON or console output.
"""

import logging
import logging.config
import sys
from typing import Optional

import structlog
from pythonjsonlogger.json import JsonFormatter

from ..config import LoggingConfig, LogLevel
from ..exceptions import ConfigurationError


class LogConfig:
    """Configuration class for logging setup."""

    def __init__(
        self,
        name: str = "nomadwatch",
        level: LogLevel = LogLevel.INFO,
        format_type: str = "json",
        stream=None,
    ):
        self.name = name
        self.level = level
        self.format_type = format_type
        self.stream = stream or sys.stderr

    @classmethod
    def from_settings(cls, settings: LoggingConfig, **kwargs) -> "LogConfig":
        """Build a LogConfig from the logging section of NomadWatchConfig."""
        return cls(level=settings.level, format_type=settings.format, **kwargs)


def setup_logging(config: LogConfig) -> None:
    """
    Setup structured logging with the given configuration.

    Args:
        config: LogConfig instance with logging configuration
    """
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.format_type == "json":
        # Event keys become record extras; JsonFormatter emits them as fields.
        processors.append(structlog.stdlib.render_to_log_kwargs)
    else:
        processors.extend(
            [
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
                structlog.dev.ConsoleRenderer(),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
            "standard": {
                "format": "%(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": config.level.value,
                "formatter": "json" if config.format_type == "json" else "standard",
                "stream": config.stream,
            },
        },
        "loggers": {
            config.name: {
                "handlers": ["console"],
                "level": config.level.value,
                "propagate": False,
            },
        },
    }

    try:
        logging.config.dictConfig(logging_config)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        raise ConfigurationError(f"Failed to configure logging: {e}")


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    The logger always wraps a standard library logger, so until
    setup_logging() runs its output follows the host application's logging
    configuration (DEBUG lines are dropped by default).

    Args:
        name: Logger name, typically __name__

    Returns:
        structlog.BoundLogger bound to the given name
    """
    return structlog.wrap_logger(
        logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger
    )


__all__ = ["LogConfig", "get_logger", "setup_logging"]
