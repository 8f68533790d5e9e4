"""Built-in validation rules and the rule contract."""

from tagvalidation.validation.rules.base import Rule
from tagvalidation.validation.rules.max import MaxRule
from tagvalidation.validation.rules.required import RequiredRule

# Rule classes registered by build_default_registry, in registration order.
BUILTIN_RULES = (
    MaxRule,
    RequiredRule,
)

__all__ = [
    'BUILTIN_RULES',
    'MaxRule',
    'RequiredRule',
    'Rule',
]
