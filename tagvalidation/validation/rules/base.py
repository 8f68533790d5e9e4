"""
Rule contract.

A rule is a stateless object registered under a name. Dispatch calls
``test`` with the field context and the tag that named the rule; when it
returns False, dispatch records ``failure_message`` in the run's failure sink.
A rule that cannot evaluate the field at all (wrong field kind) raises a
ConfigurationError from ``test`` instead of returning.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from tagvalidation.validation.context import FieldContext
    from tagvalidation.validation.tags import Tag

logger = structlog.get_logger("validation.rules")


class Rule(ABC):
    """
    Base class for validation rules.

    Subclasses set ``name`` and implement both operations. They must keep no
    per-call state; everything a test needs comes from the context and tag.

    Example:
        class MinLengthRule(Rule):
            name = "minlen"

            def test(self, context, tag):
                return len(context.field_value.value) >= int(tag.value)

            def failure_message(self, context, tag):
                return f"{context.formatted_field_name} is too short."
    """

    name: str = ""

    @abstractmethod
    def test(self, context: "FieldContext", tag: "Tag") -> bool:
        """
        Decide whether the field satisfies the constraint.

        Returns:
            True if satisfied, False if violated or the tag's argument is malformed

        Raises:
            ConfigurationError: When the rule cannot evaluate this field
        """

    @abstractmethod
    def failure_message(self, context: "FieldContext", tag: "Tag") -> str:
        """Format the human-readable message recorded when ``test`` fails."""

    def report_malformed_argument(self, context: "FieldContext", tag: "Tag", expected: str) -> None:
        """Log a tag argument that could not be parsed; the test then fails."""
        logger.warning("Malformed rule argument",
                       rule=self.name,
                       field=context.field_name,
                       argument=tag.value,
                       expected=expected)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
