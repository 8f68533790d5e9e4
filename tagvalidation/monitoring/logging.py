"""
Structured Logging Configuration Module

This module configures structlog on top of the standard library logging
module for the tag validation engine. Engine modules obtain their loggers with
structlog.get_logger at import time; configure_logging decides how those
loggers render.

Key Features:
- structlog processor pipeline with logger name, level and ISO timestamps
- Console rendering by default
- JSON output through python-json-logger, with structlog event fields passed
  as LogRecord extras
- Idempotent configuration guarded by a module lock

Dependencies:
- structlog for structured logging
- python-json-logger for JSON formatting of stdlib records
- tagvalidation.config.settings for log level and format
"""

import logging
import sys
import threading
from typing import Any, List, Optional

import structlog
from pythonjsonlogger import jsonlogger
from structlog.types import EventDict, WrappedLogger

from tagvalidation.config.settings import ValidationSettings, get_settings

ENGINE_LOGGER_NAMES = (
    'validation',
    'tagvalidation',
)


class LoggingConfigurationError(Exception):
    """Custom exception for logging configuration errors."""
    pass


def add_engine_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Tag every event emitted through structlog with the engine component.

    Args:
        logger: Wrapped logger instance
        method_name: Logging method name
        event_dict: Event dictionary

    Returns:
        Event dictionary with the component field set
    """
    event_dict.setdefault('component', 'tagvalidation')
    return event_dict


class LoggingConfiguration:
    """
    Logging configuration manager.

    Builds the structlog processor pipeline and the stdlib handler that the
    rendered events are written to.
    """

    def __init__(self, settings: Optional[ValidationSettings] = None):
        """
        Initialize logging configuration.

        Args:
            settings: Validation settings or None to load the cached settings
        """
        self.settings = settings or get_settings()
        self.is_configured = False

    def _build_processors(self) -> List[Any]:
        processors = [
            structlog.contextvars.merge_contextvars,
            add_engine_context,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        if self.settings.LOG_JSON:
            # Event fields travel as LogRecord extras; JsonFormatter serializes them.
            processors.append(structlog.stdlib.render_to_log_kwargs)
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))

        return processors

    def _create_handler(self) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        if self.settings.LOG_JSON:
            handler.setFormatter(jsonlogger.JsonFormatter(
                '%(asctime)s %(name)s %(levelname)s %(message)s'
            ))
        else:
            handler.setFormatter(logging.Formatter('%(message)s'))
        return handler

    def configure(self) -> None:
        """
        Configure structlog and the engine's stdlib loggers.

        Raises:
            LoggingConfigurationError: When the configured level is unknown
        """
        level = logging.getLevelName(self.settings.LOG_LEVEL)
        if not isinstance(level, int):
            raise LoggingConfigurationError(f"Unknown log level: {self.settings.LOG_LEVEL}")

        handler = self._create_handler()
        for name in ENGINE_LOGGER_NAMES:
            component_logger = logging.getLogger(name)
            component_logger.handlers = [handler]
            component_logger.setLevel(level)
            component_logger.propagate = False

        structlog.configure(
            processors=self._build_processors(),
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        self.is_configured = True


_logging_config: Optional[LoggingConfiguration] = None
_logging_lock = threading.Lock()


def configure_logging(settings: Optional[ValidationSettings] = None,
                      force: bool = False) -> LoggingConfiguration:
    """
    Configure logging for the validation engine.

    Args:
        settings: Settings to configure from, defaults to get_settings()
        force: Reconfigure even if logging was configured before

    Returns:
        Configured LoggingConfiguration instance
    """
    global _logging_config

    with _logging_lock:
        if _logging_config is None or force:
            _logging_config = LoggingConfiguration(settings)
            _logging_config.configure()

    return _logging_config


__all__ = [
    'LoggingConfiguration',
    'LoggingConfigurationError',
    'configure_logging',
]
