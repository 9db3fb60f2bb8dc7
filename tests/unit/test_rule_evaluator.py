"""
Unit tests for attribute-based access rules.
"""

import logging
from types import SimpleNamespace

import pytest

from rail_authz.exceptions import RuleConfigurationError
from rail_authz.rules import (
    AccessContext,
    AccessRule,
    Condition,
    ConditionOperator,
    RuleEvaluator,
)

pytestmark = pytest.mark.unit


def _rule(rule_id, action, user=(), resource=()):
    return AccessRule(
        id=rule_id,
        action=action,
        user_conditions=[Condition(*c) for c in user],
        resource_conditions=[Condition(*c) for c in resource],
    )


@pytest.fixture
def evaluator():
    return RuleEvaluator(
        [
            _rule(
                "owner-edit",
                "document.edit",
                user=[("department", ConditionOperator.EQ, "legal")],
                resource=[("owner_department", ConditionOperator.EQ, "legal")],
            ),
            _rule(
                "public-read",
                "document.read",
                resource=[("visibility", ConditionOperator.EQ, "public")],
            ),
            _rule(
                "staff-read",
                "document.read",
                user=[
                    ("level", ConditionOperator.GTE, 3),
                    ("status", ConditionOperator.IN, ["active", "on_leave"]),
                ],
            ),
        ]
    )


def test_no_rules_for_action_denies(evaluator):
    assert evaluator.check("document.delete", {"user": {}, "resource": {}}) is False


def test_all_conditions_must_match(evaluator):
    context = {"user": {"department": "legal"}, "resource": {"owner_department": "sales"}}
    assert evaluator.check("document.edit", context) is False

    context["resource"]["owner_department"] = "legal"
    assert evaluator.check("document.edit", context) is True


def test_any_matching_rule_grants(evaluator):
    public = AccessContext(user={}, resource={"visibility": "public"})
    staff = AccessContext(user={"level": 4, "status": "on_leave"}, resource={})
    junior = AccessContext(user={"level": 1, "status": "active"}, resource={})

    assert evaluator.check("document.read", public) is True
    assert evaluator.check("document.read", staff) is True
    assert evaluator.check("document.read", junior) is False


def test_explain_names_the_first_matching_rule(evaluator):
    context = AccessContext(
        user={"level": 5, "status": "active"}, resource={"visibility": "public"}
    )

    decision = evaluator.explain("document.read", context)

    assert decision.allowed is True
    assert decision.rule.id == "public-read"
    assert evaluator.explain("document.read", AccessContext()).reason == "no_match"
    assert evaluator.explain("unknown", AccessContext()).reason == "no_rules"


def test_missing_attributes_fail_the_condition():
    evaluator = RuleEvaluator(
        [_rule("not-banned", "post.create", user=[("status", ConditionOperator.NE, "banned")])]
    )

    assert evaluator.check("post.create", {"user": {"status": "active"}}) is True
    assert evaluator.check("post.create", {"user": {}}) is False
    assert evaluator.check("post.create", None) is False


def test_nested_paths_and_objects_are_resolved():
    evaluator = RuleEvaluator(
        [
            _rule(
                "same-org",
                "invoice.view",
                user=[("org.id", ConditionOperator.EQ, "acme")],
                resource=[("tags", ConditionOperator.CONTAINS, "finance")],
            )
        ]
    )
    user = SimpleNamespace(org=SimpleNamespace(id="acme"))

    assert evaluator.check(
        "invoice.view", AccessContext(user=user, resource={"tags": ["finance", "q3"]})
    ) is True
    assert evaluator.check(
        "invoice.view", AccessContext(user=user, resource={"tags": ["hr"]})
    ) is False


@pytest.mark.parametrize(
    "operator,actual,expected,result",
    [
        (ConditionOperator.EQ, "a", "a", True),
        (ConditionOperator.NE, "a", "b", True),
        (ConditionOperator.IN, "a", ["a", "b"], True),
        (ConditionOperator.IN, "a", "abc", False),
        (ConditionOperator.NOT_IN, "c", ["a", "b"], True),
        (ConditionOperator.GT, 5, 3, True),
        (ConditionOperator.GT, "5", 3, False),
        (ConditionOperator.LT, None, 3, False),
        (ConditionOperator.LTE, 3, 3, True),
        (ConditionOperator.CONTAINS, 7, 1, False),
        (ConditionOperator.IN, ["a"], frozenset({"a"}), False),
        (ConditionOperator.NOT_IN, {"k": "a"}, {"a", "b"}, False),
        (ConditionOperator.IN, ["a"], [["a"], ["b"]], True),
    ],
)
def test_operator_semantics(operator, actual, expected, result):
    evaluator = RuleEvaluator([_rule("r", "act", user=[("value", operator, expected)])])

    assert evaluator.check("act", {"user": {"value": actual}}) is result


def test_unknown_operator_fails_only_its_rule(caplog):
    rules = [
        AccessRule.from_dict(
            {
                "id": "broken",
                "action": "report.export",
                "user_conditions": [{"field": "role", "operator": "matches", "value": "x"}],
            }
        ),
        AccessRule.from_dict(
            {
                "id": "fallback",
                "action": "report.export",
                "user_conditions": [{"field": "role", "value": "analyst"}],
            }
        ),
    ]
    evaluator = RuleEvaluator(rules)

    with caplog.at_level(logging.WARNING, logger="rail_authz.rules.operators"):
        assert evaluator.check("report.export", {"user": {"role": "x"}}) is False
        assert evaluator.check("report.export", {"user": {"role": "analyst"}}) is True

    assert "Unknown rule condition operator" in caplog.text
    assert rules[0].user_conditions[0].operator == "matches"


def test_strict_rule_parsing_rejects_unknown_operator():
    with pytest.raises(RuleConfigurationError) as excinfo:
        AccessRule.from_dict(
            {
                "id": "strict",
                "action": "x",
                "user_conditions": [{"field": "a", "operator": "regex"}],
            },
            strict=True,
        )
    assert excinfo.value.rule_id == "strict"


def test_rule_round_trips_through_dict():
    rule = _rule("r1", "act", user=[("level", ConditionOperator.GT, 2)])

    assert AccessRule.from_dict(rule.to_dict()) == rule


def test_set_rules_replaces_rule_set(evaluator):
    evaluator.set_rules([])

    assert evaluator.rules == ()
    assert evaluator.check("document.read", {"resource": {"visibility": "public"}}) is False
