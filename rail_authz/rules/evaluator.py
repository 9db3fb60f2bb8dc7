"""
Rule-based access evaluator.

Rules are static configuration grouped by action. A check passes when any
rule targeting the action has all of its user and resource conditions
satisfied; otherwise access is denied. Evaluation performs no I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Union

from .operators import apply_operator
from .types import AccessContext, AccessRule, Condition, RuleDecision

logger = logging.getLogger(__name__)

_MISSING = object()


def resolve_attribute(source: Any, path: str) -> Any:
    """Resolve a dotted attribute path on mappings or objects."""
    current = source
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return _MISSING
            current = current[part]
        elif current is None:
            return _MISSING
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return _MISSING
    return current


class RuleEvaluator:
    """Evaluates attribute rules for an action, first match wins."""

    def __init__(self, rules: Optional[Iterable[AccessRule]] = None):
        self._rules: tuple[AccessRule, ...] = ()
        self._by_action: dict[str, tuple[AccessRule, ...]] = {}
        self.set_rules(rules or ())

    def set_rules(self, rules: Iterable[AccessRule]) -> None:
        """Replace the rule set. Rule order is preserved per action."""
        ordered = tuple(rules)
        by_action: dict[str, list[AccessRule]] = {}
        for rule in ordered:
            by_action.setdefault(rule.action, []).append(rule)
        self._rules = ordered
        self._by_action = {action: tuple(items) for action, items in by_action.items()}

    @property
    def rules(self) -> tuple[AccessRule, ...]:
        return self._rules

    def rules_for(self, action: str) -> tuple[AccessRule, ...]:
        return self._by_action.get(action, ())

    def check(
        self, action: str, context: Union[AccessContext, Mapping[str, Any], None]
    ) -> bool:
        """Return True if any rule for ``action`` fully matches ``context``."""
        return self._find_match(action, AccessContext.coerce(context)) is not None

    def explain(
        self, action: str, context: Union[AccessContext, Mapping[str, Any], None]
    ) -> RuleDecision:
        """Same as ``check`` but reports which rule matched."""
        candidates = self.rules_for(action)
        if not candidates:
            return RuleDecision(allowed=False, action=action, reason="no_rules")
        matched = self._find_match(action, AccessContext.coerce(context))
        if matched is None:
            return RuleDecision(allowed=False, action=action, reason="no_match")
        return RuleDecision(allowed=True, action=action, rule=matched, reason="rule_matched")

    def _find_match(self, action: str, context: AccessContext) -> Optional[AccessRule]:
        for rule in self.rules_for(action):
            if self._rule_matches(rule, context):
                return rule
        return None

    def _rule_matches(self, rule: AccessRule, context: AccessContext) -> bool:
        return all(
            self._condition_matches(condition, context.user)
            for condition in rule.user_conditions
        ) and all(
            self._condition_matches(condition, context.resource)
            for condition in rule.resource_conditions
        )

    def _condition_matches(self, condition: Condition, source: Any) -> bool:
        actual = resolve_attribute(source, condition.field)
        if actual is _MISSING:
            return False
        return apply_operator(condition.operator, actual, condition.value)


__all__ = ["RuleEvaluator", "resolve_attribute"]
