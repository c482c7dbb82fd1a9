"""Condition evaluator and visibility filtering.

`evaluate(condition, answers)` is total: it never raises for a well-typed
Condition, whatever the answer map holds. A condition referencing a field
that has not been answered (or does not exist) compares against an empty
value.

Operators:
  eq / neq             string comparison; lists compare as "a,b"
  gt / lt / gte / lte  numeric; false when either side is not a number
  contains             substring for scalars, membership for lists
  notContains          negation of contains
  empty                absent, "" or []
  notEmpty             negation of empty
"""

from typing import Any

from stepform.engine.values import is_empty, stringify, to_number
from stepform.schemas.wizard import Condition, Operator, WizardField, WizardStep, WizardTemplate

_NUMERIC_OPERATORS = {
    Operator.GT: lambda a, b: a > b,
    Operator.LT: lambda a, b: a < b,
    Operator.GTE: lambda a, b: a >= b,
    Operator.LTE: lambda a, b: a <= b,
}


def _contains(answer: Any, needle: str) -> bool:
    if isinstance(answer, (list, tuple)):
        return any(stringify(item) == needle for item in answer)
    return needle in stringify(answer)


def evaluate(condition: Condition | None, answers: dict[str, Any]) -> bool:
    """Return True when the gated step or field should be visible."""
    if condition is None:
        return True

    answer = answers.get(condition.field_id)
    op = condition.operator

    if op == Operator.EQ:
        return stringify(answer) == condition.value
    if op == Operator.NEQ:
        return stringify(answer) != condition.value
    if op in _NUMERIC_OPERATORS:
        left = to_number(answer)
        right = to_number(condition.value)
        if left is None or right is None:
            return False
        return _NUMERIC_OPERATORS[op](left, right)
    if op == Operator.CONTAINS:
        return _contains(answer, condition.value)
    if op == Operator.NOT_CONTAINS:
        return not _contains(answer, condition.value)
    if op == Operator.EMPTY:
        return is_empty(answer)
    if op == Operator.NOT_EMPTY:
        return not is_empty(answer)
    return False


def visible_steps(template: WizardTemplate, answers: dict[str, Any]) -> list[WizardStep]:
    """Steps whose condition holds, in template order."""
    return [step for step in template.steps if evaluate(step.condition, answers)]


def visible_fields(step: WizardStep, answers: dict[str, Any]) -> list[WizardField]:
    """Fields of `step` whose condition holds, in step order."""
    return [field for field in step.fields if evaluate(field.condition, answers)]
