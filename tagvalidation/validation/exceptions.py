"""
Validation Engine Exception Classes

This module provides the exception hierarchy for the tag validation engine. It
separates the two error classes the engine knows about:

- Validation failures are expected and data-driven. They are never raised; they
  are recorded as human-readable messages in the run's failure sink.
- Configuration errors are program-integrity problems (a rule applied to a field
  kind it does not support, a tag naming an unknown rule, two rules registered
  under one name). They are raised to the immediate caller and should be treated
  as fatal to the run.

Classes:
    BaseValidationException: Base class for all engine exceptions
    ConfigurationError: Base class for configuration errors
    UnexpectedTypeError: Rule applied to an unsupported field kind
    UnknownRuleError: Tag key does not name a registered rule
    DuplicateRuleError: Two rules registered under the same name
    UnsupportedRecordError: Record driver given something it cannot walk
    RecordValidationError: Raised by validate_or_raise when failures were recorded
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

logger = structlog.get_logger("validation.exceptions")


class ErrorSeverity(Enum):
    """
    Error severity classification for validation exceptions.

    Lets callers and log consumers tell configuration problems, which point at
    a broken program, apart from ordinary validation outcomes.
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error category classification for validation exception types."""
    CONFIGURATION = "configuration"
    DATA_VALIDATION = "data_validation"


class BaseValidationException(Exception):
    """
    Base exception class for all validation engine errors.

    Carries a stable error code, a severity and category for log consumers, and
    a context dictionary describing the field, tag or rule involved. Every
    instance writes one structured log entry when it is created.

    Attributes:
        message (str): Human-readable error message
        error_code (str): Stable error identifier
        severity (ErrorSeverity): Error severity level
        category (ErrorCategory): Error category for classification
        context (Dict[str, Any]): Additional error context
        cause (Optional[Exception]): Exception that triggered this one
        timestamp (datetime): Error occurrence timestamp

    Example:
        try:
            dispatch(context, tag, registry)
        except BaseValidationException as e:
            logger.error("Field could not be validated", error=e.to_dict())
            raise
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.CONFIGURATION,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ) -> None:
        """
        Initialize base validation exception.

        Args:
            message: Human-readable error message
            error_code: Stable error identifier
            severity: Error severity level
            category: Error category for classification
            context: Additional error context
            cause: Original exception that caused this one
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = dict(context or {})
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        self._log_exception()

    def _log_exception(self) -> None:
        """Write one structured log entry at a level matching the severity."""
        log_data = {
            'event_type': 'validation_exception',
            'exception_class': self.__class__.__name__,
            'error_code': self.error_code,
            'severity': self.severity.value,
            'category': self.category.value,
            'context': self.context,
        }

        if self.cause is not None:
            log_data['cause_type'] = type(self.cause).__name__

        if self.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.HIGH):
            logger.error(self.message, **log_data)
        elif self.severity == ErrorSeverity.MEDIUM:
            logger.warning(self.message, **log_data)
        else:
            logger.info(self.message, **log_data)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error
        """
        return {
            'error': {
                'message': self.message,
                'code': self.error_code,
                'severity': self.severity.value,
                'category': self.category.value,
                'timestamp': self.timestamp.isoformat(),
                'context': self.context,
            }
        }


class ConfigurationError(BaseValidationException):
    """
    Exception for configuration errors detected while validating.

    Raised when a tag and the field it is attached to do not fit together, or
    when the rule set itself is inconsistent. These errors propagate to the
    caller and the field involved must not be considered passed.

    Example:
        if context.field_value.kind not in SUPPORTED_KINDS:
            raise UnexpectedTypeError(rule_name="max", field_name=context.field_name,
                                      kind=context.field_value.kind.value)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIGURATION_ERROR",
        rule_name: Optional[str] = None,
        field_name: Optional[str] = None,
        **kwargs
    ) -> None:
        """
        Initialize configuration exception.

        Args:
            message: Human-readable error message
            error_code: Stable error identifier
            rule_name: Name of the rule involved, if any
            field_name: Identifier of the field involved, if any
            **kwargs: Additional arguments passed to BaseValidationException
        """
        kwargs.setdefault('severity', ErrorSeverity.HIGH)
        kwargs.setdefault('category', ErrorCategory.CONFIGURATION)

        context = kwargs.get('context') or {}
        if rule_name:
            context['rule_name'] = rule_name
        if field_name:
            context['field_name'] = field_name
        kwargs['context'] = context

        super().__init__(message, error_code, **kwargs)

        self.rule_name = rule_name
        self.field_name = field_name


class UnexpectedTypeError(ConfigurationError):
    """Raised when a rule is applied to a field kind it cannot evaluate."""

    def __init__(self, rule_name: str, kind: str, field_name: Optional[str] = None) -> None:
        super().__init__(
            message=f"Rule '{rule_name}' cannot be applied to a field of kind '{kind}'",
            error_code="UNEXPECTED_TYPE",
            rule_name=rule_name,
            field_name=field_name,
            context={'kind': kind}
        )
        self.kind = kind


class UnknownRuleError(ConfigurationError):
    """Raised when a tag key does not name any registered rule."""

    def __init__(self, rule_name: str, field_name: Optional[str] = None) -> None:
        super().__init__(
            message=f"Unknown validation rule: '{rule_name}'",
            error_code="UNKNOWN_RULE",
            rule_name=rule_name,
            field_name=field_name
        )


class DuplicateRuleError(ConfigurationError):
    """Raised when a second rule is registered under a name already in use."""

    def __init__(self, rule_name: str) -> None:
        super().__init__(
            message=f"A validation rule named '{rule_name}' is already registered",
            error_code="DUPLICATE_RULE",
            rule_name=rule_name,
            severity=ErrorSeverity.CRITICAL
        )


class UnsupportedRecordError(ConfigurationError):
    """Raised when the record driver is handed a value it cannot walk."""

    def __init__(self, record_type: str) -> None:
        super().__init__(
            message=f"Cannot validate a record of type '{record_type}'; "
                    f"expected a dataclass or pydantic model instance",
            error_code="UNSUPPORTED_RECORD",
            context={'record_type': record_type}
        )
        self.record_type = record_type


class RecordValidationError(BaseValidationException):
    """
    Exception carrying the failure messages of a completed run.

    Only raised by validate_or_raise; the engine itself never turns validation
    failures into exceptions.

    Attributes:
        failures (List[str]): Failure messages recorded during the run
    """

    def __init__(self, failures: List[str], record_type: Optional[str] = None) -> None:
        super().__init__(
            message=f"Record validation failed with {len(failures)} failure(s)",
            error_code="RECORD_VALIDATION_FAILED",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.DATA_VALIDATION,
            context={'record_type': record_type, 'failure_count': len(failures)}
        )
        self.failures = list(failures)


# Exception registry used by callers mapping errors to codes
VALIDATION_EXCEPTION_REGISTRY = {
    BaseValidationException: 'base_validation_exception',
    ConfigurationError: 'configuration_error',
    UnexpectedTypeError: 'unexpected_type',
    UnknownRuleError: 'unknown_rule',
    DuplicateRuleError: 'duplicate_rule',
    UnsupportedRecordError: 'unsupported_record',
    RecordValidationError: 'record_validation_failed',
}
