"""
Logging configuration tests.

Covers structlog configuration in console and JSON modes and the structured
log entries written by engine exceptions.
"""

import json
import logging

import pytest
import structlog

from tagvalidation.config.settings import EnvironmentManager, ValidationSettings
from tagvalidation.monitoring import logging as logging_module
from tagvalidation.monitoring.logging import (
    ENGINE_LOGGER_NAMES,
    LoggingConfiguration,
    LoggingConfigurationError,
    configure_logging,
)
from tagvalidation.validation.exceptions import ErrorSeverity, UnknownRuleError


@pytest.fixture
def restore_logging(monkeypatch):
    """Undo structlog and stdlib logger changes made by a test."""
    monkeypatch.setattr(logging_module, "_logging_config", None)
    saved = {name: (logging.getLogger(name).handlers[:],
                    logging.getLogger(name).level,
                    logging.getLogger(name).propagate)
             for name in ENGINE_LOGGER_NAMES}
    yield
    structlog.reset_defaults()
    for name, (handlers, level, propagate) in saved.items():
        component_logger = logging.getLogger(name)
        component_logger.handlers = handlers
        component_logger.setLevel(level)
        component_logger.propagate = propagate


def _settings(monkeypatch, **env):
    for key, value in env.items():
        monkeypatch.setenv(f"TAG_VALIDATION_{key}", value)
    return ValidationSettings(EnvironmentManager(env_file=""))


@pytest.mark.unit
class TestLoggingConfiguration:
    """Test LoggingConfiguration and configure_logging."""

    def test_json_output(self, monkeypatch, capsys, restore_logging):
        """Test JSON mode writes one JSON object per event with its fields."""
        configure_logging(_settings(monkeypatch, LOG_JSON="true"), force=True)

        structlog.get_logger("validation.test").info("Rule dispatched", rule="max", passed=False)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["message"] == "Rule dispatched"
        assert entry["rule"] == "max"
        assert entry["passed"] is False
        assert entry["component"] == "tagvalidation"

    def test_console_output_respects_level(self, monkeypatch, capsys, restore_logging):
        """Test events below the configured level are dropped."""
        configure_logging(_settings(monkeypatch, LOG_LEVEL="WARNING"), force=True)
        log = structlog.get_logger("validation.test")

        log.info("hidden event")
        log.warning("visible event", field="Age")

        err = capsys.readouterr().err
        assert "hidden event" not in err
        assert "visible event" in err
        assert "field=Age" in err

    def test_configure_is_idempotent(self, monkeypatch, restore_logging):
        """Test a second call without force reuses the first configuration."""
        first = configure_logging(_settings(monkeypatch))

        assert configure_logging() is first
        assert first.is_configured

    def test_unknown_level_rejected(self, monkeypatch):
        """Test a level that passed settings validation but is unknown to logging."""
        loaded = _settings(monkeypatch)
        loaded.LOG_LEVEL = "LOUD"

        with pytest.raises(LoggingConfigurationError):
            LoggingConfiguration(loaded).configure()


@pytest.mark.unit
class TestExceptionLogging:
    """Test the structured log entry written by engine exceptions."""

    def test_configuration_error_logged_at_error(self, mocker):
        logger = mocker.patch("tagvalidation.validation.exceptions.logger")

        error = UnknownRuleError("min", field_name="Age")

        logger.error.assert_called_once()
        kwargs = logger.error.call_args.kwargs
        assert kwargs["error_code"] == "UNKNOWN_RULE"
        assert kwargs["context"] == {"rule_name": "min", "field_name": "Age"}
        assert error.severity is ErrorSeverity.HIGH

    def test_to_dict(self, mocker):
        mocker.patch("tagvalidation.validation.exceptions.logger")

        payload = UnknownRuleError("min").to_dict()

        assert payload["error"]["code"] == "UNKNOWN_RULE"
        assert payload["error"]["category"] == "configuration"
        assert payload["error"]["severity"] == "high"
