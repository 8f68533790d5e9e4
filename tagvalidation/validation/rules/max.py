"""
The "max" rule: a numeric field must not exceed the tag's bound.

Signed integers, unsigned integers and floats are separate branches, each
parsing the bound into its own representation. A bound that does not parse
fails the test rather than raising.
"""

import math
import re
from typing import Optional

from tagvalidation.validation.context import FieldContext
from tagvalidation.validation.exceptions import UnexpectedTypeError
from tagvalidation.validation.rules.base import Rule
from tagvalidation.validation.tags import Tag
from tagvalidation.validation.values import FieldKind

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

_SIGNED_PATTERN = re.compile(r'[+-]?[0-9]+')
_UNSIGNED_PATTERN = re.compile(r'[0-9]+')


def parse_signed(text: str) -> Optional[int]:
    if not _SIGNED_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        return None
    return value


def parse_unsigned(text: str) -> Optional[int]:
    if not _UNSIGNED_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if value > UINT64_MAX:
        return None
    return value


def parse_float(text: str) -> Optional[float]:
    # float() tolerates padding and digit underscores; bounds may not.
    if not text or text != text.strip() or '_' in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isinf(value) and 'inf' not in text.lower():
        return None
    return value


class MaxRule(Rule):
    name = "max"

    def test(self, context: FieldContext, tag: Tag) -> bool:
        kind = context.field_value.kind

        if kind == FieldKind.SIGNED_INT:
            return self._test_bound(context, tag, parse_signed(tag.value), "signed integer")
        elif kind == FieldKind.UNSIGNED_INT:
            return self._test_bound(context, tag, parse_unsigned(tag.value), "unsigned integer")
        elif kind == FieldKind.FLOAT:
            return self._test_bound(context, tag, parse_float(tag.value), "float")

        raise UnexpectedTypeError(rule_name=self.name, kind=kind.value,
                                  field_name=context.field_name)

    def _test_bound(self, context: FieldContext, tag: Tag, bound, expected: str) -> bool:
        if bound is None:
            self.report_malformed_argument(context, tag, expected)
            return False
        return context.field_value.value <= bound

    def failure_message(self, context: FieldContext, tag: Tag) -> str:
        return f"{context.formatted_field_name} cannot be greater than {tag.value}."
