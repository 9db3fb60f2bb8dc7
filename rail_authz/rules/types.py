"""
Type definitions for attribute-based access rules.

- Condition: a single ``field <operator> value`` test
- AccessRule: user and resource conditions that must all hold for an action
- AccessContext: the user/resource attributes a check runs against
- RuleDecision: outcome of an explained check
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ..exceptions import RuleConfigurationError
from .operators import ConditionOperator


@dataclass(frozen=True)
class Condition:
    field: str
    operator: Union[ConditionOperator, str] = ConditionOperator.EQ
    value: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, strict: bool = False) -> "Condition":
        """Build a condition; unknown operators are kept verbatim unless ``strict``."""
        field_name = data.get("field")
        if not field_name or not isinstance(field_name, str):
            raise RuleConfigurationError("Condition requires a 'field' string")
        raw_operator = data.get("operator", ConditionOperator.EQ.value)
        operator = ConditionOperator.parse(raw_operator)
        if operator is None:
            if strict:
                raise RuleConfigurationError(
                    f"Unknown condition operator {raw_operator!r} for field '{field_name}'"
                )
            operator = str(raw_operator)
        return cls(field=field_name, operator=operator, value=data.get("value"))

    def to_dict(self) -> dict[str, Any]:
        operator = self.operator
        if isinstance(operator, ConditionOperator):
            operator = operator.value
        return {"field": self.field, "operator": operator, "value": self.value}


@dataclass(frozen=True)
class AccessRule:
    id: str
    action: str
    user_conditions: tuple[Condition, ...] = ()
    resource_conditions: tuple[Condition, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "user_conditions", tuple(self.user_conditions))
        object.__setattr__(self, "resource_conditions", tuple(self.resource_conditions))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, strict: bool = False) -> "AccessRule":
        rule_id = data.get("id")
        action = data.get("action")
        if not rule_id or not action:
            raise RuleConfigurationError(
                "Access rule requires 'id' and 'action'", rule_id=rule_id
            )
        try:
            user_conditions = [
                Condition.from_dict(item, strict=strict)
                for item in data.get("user_conditions") or []
            ]
            resource_conditions = [
                Condition.from_dict(item, strict=strict)
                for item in data.get("resource_conditions") or []
            ]
        except RuleConfigurationError as exc:
            raise RuleConfigurationError(str(exc), rule_id=str(rule_id)) from exc
        except (AttributeError, TypeError) as exc:
            raise RuleConfigurationError(
                f"Malformed conditions: {exc}", rule_id=str(rule_id)
            ) from exc
        return cls(
            id=str(rule_id),
            action=str(action),
            user_conditions=tuple(user_conditions),
            resource_conditions=tuple(resource_conditions),
            description=str(data.get("description", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "action": self.action,
            "description": self.description,
            "user_conditions": [c.to_dict() for c in self.user_conditions],
            "resource_conditions": [c.to_dict() for c in self.resource_conditions],
        }


@dataclass
class AccessContext:
    """Attributes of the requesting user and the target resource."""

    user: Any = field(default_factory=dict)
    resource: Any = field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Union["AccessContext", Mapping[str, Any], None]) -> "AccessContext":
        if isinstance(value, AccessContext):
            return value
        if value is None:
            return cls()
        return cls(user=value.get("user") or {}, resource=value.get("resource") or {})


@dataclass
class RuleDecision:
    allowed: bool
    action: str
    rule: Optional[AccessRule] = None
    reason: Optional[str] = None


__all__ = ["Condition", "AccessRule", "AccessContext", "RuleDecision"]
