"""Condition clause evaluation.

Both operands are compared as strings: an unset variable counts as ``""`` and
numeric-looking values are never compared numerically.
"""

from collections.abc import Mapping
from typing import Any

from chatflow.config.blocks import ConditionClause, ConditionOperator
from chatflow.core.template import stringify


def variable_text(name: str, variables: Mapping[str, Any]) -> str:
    """String form of a variable, ``""`` when unset."""
    value = variables.get(name)
    if value is None:
        return ""
    return stringify(value)


def evaluate_condition(clause: ConditionClause, variables: Mapping[str, Any]) -> bool:
    """Evaluate a clause against the current variables.

    Examples:
        >>> clause = ConditionClause(variable="x", operator="equals", value="yes")
        >>> evaluate_condition(clause, {"x": "yes"})
        True
        >>> evaluate_condition(clause, {})
        False
    """
    current = variable_text(clause.variable, variables)
    expected = str(clause.value)

    match clause.operator:
        case ConditionOperator.EQUALS:
            return current == expected
        case ConditionOperator.NOT_EQUALS:
            return current != expected
        case ConditionOperator.CONTAINS:
            return expected in current

    return False
