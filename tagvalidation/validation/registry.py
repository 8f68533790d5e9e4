"""
Rule registry.

An explicit name-to-rule mapping, built once before validation starts and
handed to dispatch. build_default_registry registers the built-in rules from an
explicit list, so registration order never depends on import side effects.
"""

import threading
from typing import Any, Dict, Iterable, List, Optional, Type

import structlog

from tagvalidation.validation.exceptions import DuplicateRuleError, UnknownRuleError
from tagvalidation.validation.rules import BUILTIN_RULES, Rule

logger = structlog.get_logger("validation.registry")


class RuleRegistry:
    """
    Mapping from rule name to rule instance, with per-rule outcome counters.

    Example:
        registry = RuleRegistry()
        registry.register(MaxRule())
        rule = registry.require("max")
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: Dict[str, Rule] = {}
        self._stats_lock = threading.Lock()
        self._stats: Dict[str, Dict[str, int]] = {}

        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule, name: Optional[str] = None, replace: bool = False) -> None:
        """
        Register a rule.

        Args:
            rule: Rule instance
            name: Name to register under, defaults to ``rule.name``
            replace: Allow replacing a rule already registered under the name

        Raises:
            DuplicateRuleError: When the name is taken and replace is False
            ValueError: When the rule has no name
        """
        rule_name = name or rule.name
        if not rule_name:
            raise ValueError(f"Rule {rule!r} has no name")

        if rule_name in self._rules and not replace:
            raise DuplicateRuleError(rule_name)

        self._rules[rule_name] = rule
        with self._stats_lock:
            self._stats[rule_name] = {'execution_count': 0, 'failure_count': 0}

        logger.debug("Validation rule registered",
                     rule_name=rule_name,
                     rule_class=type(rule).__name__,
                     replaced=replace)

    def get(self, name: str) -> Optional[Rule]:
        return self._rules.get(name)

    def require(self, name: str, field_name: Optional[str] = None) -> Rule:
        """
        Get a rule by name.

        Raises:
            UnknownRuleError: When no rule is registered under the name
        """
        rule = self._rules.get(name)
        if rule is None:
            raise UnknownRuleError(name, field_name=field_name)
        return rule

    def names(self) -> List[str]:
        return sorted(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def record_outcome(self, name: str, passed: bool) -> None:
        with self._stats_lock:
            stats = self._stats.setdefault(name, {'execution_count': 0, 'failure_count': 0})
            stats['execution_count'] += 1
            if not passed:
                stats['failure_count'] += 1

    def get_validation_metrics(self) -> Dict[str, Any]:
        """
        Get per-rule execution statistics.

        Returns:
            Dictionary with per-rule counts and success rates
        """
        with self._stats_lock:
            rule_stats = {}
            for rule_name, stats in self._stats.items():
                executed = stats['execution_count']
                rule_stats[rule_name] = {
                    'execution_count': executed,
                    'failure_count': stats['failure_count'],
                    'success_rate': (
                        (executed - stats['failure_count']) / executed
                    ) if executed > 0 else 1.0
                }

        return {
            'rule_statistics': rule_stats,
            'total_rules': len(self._rules),
        }


def build_default_registry(rule_classes: Iterable[Type[Rule]] = BUILTIN_RULES) -> RuleRegistry:
    """
    Build a registry from an explicit list of rule classes.

    Args:
        rule_classes: Rule classes to instantiate, defaults to the built-in rules

    Returns:
        Populated RuleRegistry
    """
    return RuleRegistry(rule_class() for rule_class in rule_classes)


_default_registry: Optional[RuleRegistry] = None
_default_registry_lock = threading.Lock()


def default_registry() -> RuleRegistry:
    """Return the process-wide registry of built-in rules, building it once."""
    global _default_registry

    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = build_default_registry()
        return _default_registry
