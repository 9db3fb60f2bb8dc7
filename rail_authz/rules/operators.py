"""
Condition operators for attribute-based access rules.

The operator set is closed: each member of ``ConditionOperator`` maps to a
pure comparison function in ``OPERATOR_FUNCTIONS``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class ConditionOperator(Enum):
    EQ = "eq"
    NE = "ne"
    IN = "in"
    NOT_IN = "not_in"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    CONTAINS = "contains"

    @classmethod
    def parse(cls, value: Any) -> Optional["ConditionOperator"]:
        """Return the operator for ``value`` or None when it is unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


def _eq(actual: Any, expected: Any) -> bool:
    return actual == expected


def _ne(actual: Any, expected: Any) -> bool:
    return actual != expected


def _in(actual: Any, expected: Any) -> bool:
    if isinstance(expected, (str, bytes)) or not hasattr(expected, "__contains__"):
        return False
    try:
        return actual in expected
    except TypeError:
        # unhashable value tested against a set
        return False


def _not_in(actual: Any, expected: Any) -> bool:
    if isinstance(expected, (str, bytes)) or not hasattr(expected, "__contains__"):
        return False
    try:
        return actual not in expected
    except TypeError:
        return False


def _contains(actual: Any, expected: Any) -> bool:
    try:
        return expected in actual
    except TypeError:
        return False


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def evaluate(actual: Any, expected: Any) -> bool:
        if actual is None or expected is None:
            return False
        try:
            return bool(compare(actual, expected))
        except TypeError:
            return False

    return evaluate


OPERATOR_FUNCTIONS: dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQ: _eq,
    ConditionOperator.NE: _ne,
    ConditionOperator.IN: _in,
    ConditionOperator.NOT_IN: _not_in,
    ConditionOperator.GT: _ordered(lambda a, b: a > b),
    ConditionOperator.GTE: _ordered(lambda a, b: a >= b),
    ConditionOperator.LT: _ordered(lambda a, b: a < b),
    ConditionOperator.LTE: _ordered(lambda a, b: a <= b),
    ConditionOperator.CONTAINS: _contains,
}


def apply_operator(operator: Any, actual: Any, expected: Any) -> bool:
    """Evaluate one comparison. Unknown operators evaluate to False."""
    resolved = ConditionOperator.parse(operator)
    if resolved is None:
        logger.warning("Unknown rule condition operator %r; condition fails", operator)
        return False
    return OPERATOR_FUNCTIONS[resolved](actual, expected)


__all__ = ["ConditionOperator", "OPERATOR_FUNCTIONS", "apply_operator"]
