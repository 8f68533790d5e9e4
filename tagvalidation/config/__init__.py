"""
Configuration package for the tag validation engine.

Exposes the environment-driven settings used by the tag parser, the record
driver and logging setup.
"""

from tagvalidation.config.settings import (
    EnvironmentManager,
    SettingsError,
    ValidationSettings,
    get_settings,
)

__all__ = [
    'EnvironmentManager',
    'SettingsError',
    'ValidationSettings',
    'get_settings',
]
