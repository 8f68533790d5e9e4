"""Logging setup for the tag validation engine."""

from tagvalidation.monitoring.logging import (
    LoggingConfiguration,
    LoggingConfigurationError,
    configure_logging,
)

__all__ = [
    'LoggingConfiguration',
    'LoggingConfigurationError',
    'configure_logging',
]
