"""
Attribute-based access rules.

Exports:
    - ConditionOperator: Closed set of comparison operators
    - Condition / AccessRule: Rule configuration
    - AccessContext / RuleDecision: Evaluation input and explained output
    - RuleEvaluator: First-match, default-deny evaluator
    - load_configured_rules / load_app_access_rules: Rule store loading
"""

from .evaluator import RuleEvaluator
from .loader import build_rules, load_app_access_rules, load_configured_rules
from .operators import ConditionOperator
from .types import AccessContext, AccessRule, Condition, RuleDecision

__all__ = [
    "ConditionOperator",
    "Condition",
    "AccessRule",
    "AccessContext",
    "RuleDecision",
    "RuleEvaluator",
    "build_rules",
    "load_app_access_rules",
    "load_configured_rules",
]
