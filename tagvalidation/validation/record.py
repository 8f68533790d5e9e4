"""
Record driver: validate every tagged field of a record.

Records are dataclass instances, with rule tags in ``dataclasses.field``
metadata, or pydantic model instances, with rule tags in the field's
``json_schema_extra``:

    @dataclass
    class Person:
        first_name: str = field(metadata={"validation": "required"})
        age: int = field(default=0, metadata={"validation": "max=150"})

    class Person(BaseModel):
        first_name: str = Field(json_schema_extra={"validation": "required"})

Fields without rule tags are skipped. Every validated field gets its own
FieldContext; all contexts of one call share one FailureSink.
"""

import dataclasses
import typing
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel

from tagvalidation.config.settings import ValidationSettings, get_settings
from tagvalidation.validation.context import FailureSink, FieldContext, FieldDescriptor
from tagvalidation.validation.dispatch import validate_field
from tagvalidation.validation.exceptions import (
    ConfigurationError,
    RecordValidationError,
    UnsupportedRecordError,
)
from tagvalidation.validation.registry import RuleRegistry, default_registry
from tagvalidation.validation.values import FieldValue

logger = structlog.get_logger("validation.record")


def _dataclass_fields(record: Any) -> List[Tuple[FieldDescriptor, Any]]:
    hints = typing.get_type_hints(type(record), include_extras=True)
    return [
        (FieldDescriptor(name=f.name, metadata=dict(f.metadata),
                         annotation=hints.get(f.name, f.type)),
         getattr(record, f.name))
        for f in dataclasses.fields(record)
    ]


def _pydantic_fields(record: BaseModel) -> List[Tuple[FieldDescriptor, Any]]:
    described = []
    for name, info in type(record).model_fields.items():
        extra = info.json_schema_extra
        metadata = dict(extra) if isinstance(extra, dict) else {}
        described.append(
            (FieldDescriptor(name=name, metadata=metadata, annotation=info.annotation),
             getattr(record, name))
        )
    return described


def describe_fields(record: Any) -> List[Tuple[FieldDescriptor, Any]]:
    """
    Describe every field of a record with its current value.

    Raises:
        UnsupportedRecordError: When the record is neither a dataclass nor a
            pydantic model instance
    """
    if isinstance(record, BaseModel):
        return _pydantic_fields(record)
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return _dataclass_fields(record)
    raise UnsupportedRecordError(type(record).__name__)


def build_context(descriptor: FieldDescriptor, value: Any, failures: FailureSink,
                  settings: Optional[ValidationSettings] = None) -> FieldContext:
    """
    Build the FieldContext for one field, deriving its kind from its annotation.

    Raises:
        ConfigurationError: When the value cannot belong to the declared kind
    """
    try:
        field_value = FieldValue.from_annotation(descriptor.annotation, value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            message=f"Field '{descriptor.name}' holds a value its declared type does not allow",
            error_code="INVALID_FIELD_VALUE",
            field_name=descriptor.name,
            cause=e
        ) from e
    return FieldContext(descriptor, field_value, failures, settings)


def _validate_one(descriptor: FieldDescriptor, value: Any, failures: FailureSink,
                  registry: RuleRegistry, settings: ValidationSettings) -> bool:
    context = build_context(descriptor, value, failures, settings)
    return validate_field(context, registry)


def validate(
    record: Any,
    registry: Optional[RuleRegistry] = None,
    *,
    max_workers: Optional[int] = None,
    settings: Optional[ValidationSettings] = None
) -> List[str]:
    """
    Validate every tagged field of a record.

    Args:
        record: Dataclass or pydantic model instance
        registry: Rule registry, defaults to the built-in rules
        max_workers: Worker threads for per-field validation; 1 validates
            sequentially. Defaults to the MAX_WORKERS setting.
        settings: Metadata format settings, defaults to get_settings()

    Returns:
        Failure messages. With more than one worker, message order across
        fields is unspecified.

    Raises:
        ConfigurationError: On the first configuration error, in field order
    """
    settings = settings or get_settings()
    if registry is None:
        registry = default_registry()
    workers = max_workers if max_workers is not None else settings.MAX_WORKERS

    tagged = [
        (descriptor, value)
        for descriptor, value in describe_fields(record)
        if settings.TAG_NAME in descriptor.metadata
    ]
    failures = FailureSink()

    if workers <= 1 or len(tagged) <= 1:
        for descriptor, value in tagged:
            _validate_one(descriptor, value, failures, registry, settings)
    else:
        with ThreadPoolExecutor(max_workers=workers,
                                thread_name_prefix='tag-validation') as executor:
            futures = [
                executor.submit(_validate_one, descriptor, value, failures, registry, settings)
                for descriptor, value in tagged
            ]
            wait(futures)

        for future in futures:
            error = future.exception()
            if error is not None:
                raise error

    messages = failures.messages()
    logger.debug("Record validated",
                 record_type=type(record).__name__,
                 fields_validated=len(tagged),
                 failure_count=len(messages),
                 workers=workers)
    return messages


def validate_or_raise(record: Any, registry: Optional[RuleRegistry] = None,
                      **kwargs: Any) -> None:
    """
    Validate a record and raise if any failure was recorded.

    Raises:
        RecordValidationError: Carrying the failure messages
        ConfigurationError: On configuration errors, as validate does
    """
    failures = validate(record, registry, **kwargs)
    if failures:
        raise RecordValidationError(failures, record_type=type(record).__name__)


def validation_summary(record: Any, registry: Optional[RuleRegistry] = None,
                       **kwargs: Any) -> Dict[str, Any]:
    """Validate a record and return a JSON-serializable summary."""
    failures = validate(record, registry, **kwargs)
    return {
        'record_type': type(record).__name__,
        'valid': not failures,
        'failures': failures,
    }
