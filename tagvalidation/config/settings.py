"""
Validation Engine Configuration Module

This module provides configuration for the tag validation engine. Settings are
read from environment variables, optionally seeded from a .env file through
python-dotenv, and exposed as a single ValidationSettings instance.

Key Features:
- python-dotenv environment variable loading with override=False
- Typed accessors for required and optional variables
- Validation of separator and key settings at load time
- Cached settings factory with explicit reload

Environment Variables:
    TAG_VALIDATION_TAG_NAME: Metadata key holding the rule tag string
    TAG_VALIDATION_SEPARATOR: Separator between tag entries
    TAG_VALIDATION_VALUE_SEPARATOR: Separator between a tag key and its value
    TAG_VALIDATION_NAME_KEY: Key of the display-name directive and metadata entry
    TAG_VALIDATION_MAX_WORKERS: Default worker count for the record driver
    TAG_VALIDATION_LOG_LEVEL: Log level for the engine loggers
    TAG_VALIDATION_LOG_JSON: Render logs as JSON instead of console output
"""

import logging
import os
import threading
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "TAG_VALIDATION_"

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class SettingsError(Exception):
    """Custom exception for configuration validation errors."""
    pass


class EnvironmentManager:
    """
    Environment variable management using python-dotenv.

    Loads the .env file once (never overriding variables already present in
    the process environment) and provides typed accessors.
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize environment manager.

        Args:
            env_file: Optional path to .env file, defaults to auto-discovery
        """
        self.env_file = env_file if env_file is not None else find_dotenv(usecwd=True)
        self.logger = logging.getLogger(f"{__name__}.EnvironmentManager")
        self._load_environment_variables()

    def _load_environment_variables(self) -> None:
        """
        Load environment variables from the .env file.

        Raises:
            SettingsError: When the file exists but cannot be loaded
        """
        if not self.env_file:
            return

        try:
            load_dotenv(self.env_file, override=False)
            self.logger.debug("Environment variables loaded from %s", self.env_file)
        except (OSError, ValueError) as e:
            error_msg = f"Failed to load environment variables: {str(e)}"
            self.logger.error(error_msg)
            raise SettingsError(error_msg) from e

    def get_required_env(self, key: str, var_type: type = str) -> Any:
        """
        Get required environment variable with type conversion.

        Args:
            key: Environment variable name
            var_type: Expected variable type

        Returns:
            Converted environment variable value

        Raises:
            SettingsError: When the variable is missing or invalid
        """
        value = os.getenv(key)
        if value is None:
            raise SettingsError(f"Required environment variable '{key}' not found")
        return self._convert(key, value, var_type)

    def get_optional_env(self, key: str, default: Any = None, var_type: type = str) -> Any:
        """
        Get optional environment variable with default value and type conversion.

        Args:
            key: Environment variable name
            default: Default value if variable is not set
            var_type: Expected variable type

        Returns:
            Environment variable value or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return self._convert(key, value, var_type)

    @staticmethod
    def _convert(key: str, value: str, var_type: type) -> Any:
        try:
            if var_type == bool:
                return value.lower() in ('true', '1', 'yes', 'on')
            elif var_type == int:
                return int(value)
            else:
                return var_type(value)
        except (ValueError, TypeError) as e:
            raise SettingsError(f"Environment variable '{key}' has invalid type: {str(e)}") from e


class ValidationSettings:
    """
    Validation engine settings.

    The separators and key names define the metadata wire format: changing
    them changes how every tag string is parsed.
    """

    def __init__(self, env_manager: Optional[EnvironmentManager] = None):
        env = env_manager or EnvironmentManager()

        # Metadata format
        self.TAG_NAME = env.get_optional_env(f'{ENV_PREFIX}TAG_NAME', 'validation')
        self.SEPARATOR = env.get_optional_env(f'{ENV_PREFIX}SEPARATOR', ',')
        self.VALUE_SEPARATOR = env.get_optional_env(f'{ENV_PREFIX}VALUE_SEPARATOR', '=')
        self.NAME_KEY = env.get_optional_env(f'{ENV_PREFIX}NAME_KEY', 'name')

        # Record driver
        self.MAX_WORKERS = env.get_optional_env(f'{ENV_PREFIX}MAX_WORKERS', 1, int)

        # Logging
        self.LOG_LEVEL = env.get_optional_env(f'{ENV_PREFIX}LOG_LEVEL', 'INFO').upper()
        self.LOG_JSON = env.get_optional_env(f'{ENV_PREFIX}LOG_JSON', False, bool)

        self._validate()

    def _validate(self) -> None:
        """
        Validate loaded settings.

        Raises:
            SettingsError: When a setting is out of range
        """
        for attr in ('TAG_NAME', 'SEPARATOR', 'VALUE_SEPARATOR', 'NAME_KEY'):
            if not getattr(self, attr):
                raise SettingsError(f"{attr} must not be empty")

        if self.SEPARATOR == self.VALUE_SEPARATOR:
            raise SettingsError("SEPARATOR and VALUE_SEPARATOR must differ")

        if self.MAX_WORKERS < 1:
            raise SettingsError(f"MAX_WORKERS must be at least 1, got {self.MAX_WORKERS}")

        if self.LOG_LEVEL not in VALID_LOG_LEVELS:
            raise SettingsError(
                f"Invalid LOG_LEVEL '{self.LOG_LEVEL}'. "
                f"Available levels: {', '.join(VALID_LOG_LEVELS)}"
            )

    def __repr__(self) -> str:
        return (
            f"ValidationSettings(tag_name={self.TAG_NAME!r}, separator={self.SEPARATOR!r}, "
            f"value_separator={self.VALUE_SEPARATOR!r}, name_key={self.NAME_KEY!r}, "
            f"max_workers={self.MAX_WORKERS})"
        )


_settings: Optional[ValidationSettings] = None
_settings_lock = threading.Lock()


def get_settings(reload: bool = False) -> ValidationSettings:
    """
    Settings factory returning the process-wide ValidationSettings.

    Args:
        reload: Rebuild the settings from the current environment

    Returns:
        Cached ValidationSettings instance

    Raises:
        SettingsError: When the environment holds invalid settings
    """
    global _settings

    with _settings_lock:
        if _settings is None or reload:
            _settings = ValidationSettings()
            logger.debug("Validation settings loaded: %r", _settings)
        return _settings


__all__ = [
    'EnvironmentManager',
    'SettingsError',
    'ValidationSettings',
    'get_settings',
]
