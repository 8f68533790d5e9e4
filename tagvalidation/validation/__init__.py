"""
Tag validation engine.

Package Components:
    Tag Model (tags.py):
        - Parsing of raw metadata strings into ordered tag collections
    Field Values (values.py):
        - FieldKind-tagged value variants used by rules in place of reflection
    Field Context (context.py):
        - Per-field context, display-name derivation, shared failure sink
    Rule Registry (registry.py):
        - Explicit name-to-rule mapping built from a list of rule classes
    Dispatch (dispatch.py):
        - Lookup-and-invoke of a tag's rule, failure routing
    Built-in Rules (rules/):
        - "max" and "required"
    Record Driver (record.py):
        - Validation of whole dataclass or pydantic records

Usage Examples:
    from tagvalidation.validation import validate

    failures = validate(person)

    # One field, by hand
    sink = FailureSink()
    context = FieldContext(FieldDescriptor("Age", {"validation": "max=150"}),
                           FieldValue.signed(200), sink)
    validate_field(context, build_default_registry())
"""

from tagvalidation.validation.context import (
    FailureSink,
    FieldContext,
    FieldDescriptor,
    ReadWriteLock,
    format_field_name,
)
from tagvalidation.validation.dispatch import dispatch, validate_field
from tagvalidation.validation.exceptions import (
    BaseValidationException,
    ConfigurationError,
    DuplicateRuleError,
    ErrorCategory,
    ErrorSeverity,
    RecordValidationError,
    UnexpectedTypeError,
    UnknownRuleError,
    UnsupportedRecordError,
)
from tagvalidation.validation.record import (
    build_context,
    describe_fields,
    validate,
    validate_or_raise,
    validation_summary,
)
from tagvalidation.validation.registry import (
    RuleRegistry,
    build_default_registry,
    default_registry,
)
from tagvalidation.validation.rules import BUILTIN_RULES, MaxRule, RequiredRule, Rule
from tagvalidation.validation.tags import Tag, TagCollection, parse_tags
from tagvalidation.validation.values import (
    FieldKind,
    FieldValue,
    Reference,
    Unsigned,
    kind_for_annotation,
)

__all__ = [
    # Tags
    'Tag',
    'TagCollection',
    'parse_tags',
    # Values
    'FieldKind',
    'FieldValue',
    'Reference',
    'Unsigned',
    'kind_for_annotation',
    # Context
    'FailureSink',
    'FieldContext',
    'FieldDescriptor',
    'ReadWriteLock',
    'format_field_name',
    # Rules and registry
    'BUILTIN_RULES',
    'MaxRule',
    'RequiredRule',
    'Rule',
    'RuleRegistry',
    'build_default_registry',
    'default_registry',
    # Dispatch and driver
    'dispatch',
    'validate_field',
    'build_context',
    'describe_fields',
    'validate',
    'validate_or_raise',
    'validation_summary',
    # Exceptions
    'BaseValidationException',
    'ConfigurationError',
    'DuplicateRuleError',
    'ErrorCategory',
    'ErrorSeverity',
    'RecordValidationError',
    'UnexpectedTypeError',
    'UnknownRuleError',
    'UnsupportedRecordError',
]
