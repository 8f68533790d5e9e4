"""
The "required" rule: text must be non-empty and references must be present.

A reference is followed through every level of indirection; an absent target
at any level fails the test.
"""

from tagvalidation.validation.context import FieldContext
from tagvalidation.validation.exceptions import UnexpectedTypeError
from tagvalidation.validation.rules.base import Rule
from tagvalidation.validation.tags import Tag
from tagvalidation.validation.values import FieldKind, Reference


class RequiredRule(Rule):
    name = "required"

    def test(self, context: FieldContext, tag: Tag) -> bool:
        kind = context.field_value.kind

        if kind == FieldKind.TEXT:
            return len(context.field_value.value) > 0

        if kind == FieldKind.REFERENCE:
            value = context.field_value.value
            while True:
                if value is None:
                    return False
                if not isinstance(value, Reference):
                    return True
                value = value.target

        raise UnexpectedTypeError(rule_name=self.name, kind=kind.value,
                                  field_name=context.field_name)

    def failure_message(self, context: FieldContext, tag: Tag) -> str:
        return f"{context.formatted_field_name} required."
