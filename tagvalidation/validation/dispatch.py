"""
Dispatch: connect a parsed tag to its registered rule.

A rule returning False is a validation failure and is recorded in the run's
failure sink. A rule raising ConfigurationError, or a tag naming no registered
rule, is a configuration error and propagates to the caller.
"""

from typing import Optional

import structlog

from tagvalidation.validation.context import FieldContext
from tagvalidation.validation.registry import RuleRegistry, default_registry
from tagvalidation.validation.tags import Tag

logger = structlog.get_logger("validation.dispatch")


def is_directive(context: FieldContext, tag: Tag) -> bool:
    """Tags that configure the context rather than name a rule."""
    return tag.key == "" or tag.key == context.settings.NAME_KEY


def dispatch(context: FieldContext, tag: Tag, registry: RuleRegistry) -> bool:
    """
    Run the rule named by ``tag`` against ``context``.

    Args:
        context: Field context under validation
        tag: Tag whose key names the rule and whose value is its argument
        registry: Registry to look the rule up in

    Returns:
        True if the constraint holds or the tag is a directive, False if a
        failure was recorded

    Raises:
        UnknownRuleError: When the tag names no registered rule
        ConfigurationError: When the rule cannot evaluate this field
    """
    if is_directive(context, tag):
        return True

    rule = registry.require(tag.key, field_name=context.field_name)

    passed = rule.test(context, tag)
    registry.record_outcome(tag.key, passed)

    if not passed:
        context.set_failure(tag, rule.failure_message(context, tag))

    logger.debug("Rule dispatched",
                 field=context.field_name,
                 rule=tag.key,
                 argument=tag.value,
                 passed=passed)
    return passed


def validate_field(context: FieldContext, registry: Optional[RuleRegistry] = None) -> bool:
    """
    Dispatch every tag of a context in order.

    Every tag runs even after a failure. The first configuration error stops
    the field and propagates.

    Returns:
        True if every tag passed
    """
    if registry is None:
        registry = default_registry()

    passed = True
    for tag in context.tags:
        if not dispatch(context, tag, registry):
            passed = False
    return passed
