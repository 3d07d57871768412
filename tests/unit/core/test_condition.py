"""Tests for condition clause evaluation."""

import pytest

from chatflow.config.blocks import ConditionClause, ConditionOperator
from chatflow.core.condition import evaluate_condition, variable_text


def make_clause(operator: str = "equals", value: str = "yes", variable: str = "answer"):
    return ConditionClause(variable=variable, operator=operator, value=value)


class TestEvaluateCondition:
    """Tests for evaluate_condition()."""

    @pytest.mark.parametrize(
        "operator,current,expected",
        [
            ("equals", "yes", True),
            ("equals", "Yes", False),
            ("not_equals", "no", True),
            ("not_equals", "yes", False),
            ("contains", "oh yes please", True),
            ("contains", "nope", False),
        ],
    )
    def test_string_operators(self, operator, current, expected):
        clause = make_clause(operator=operator)

        assert evaluate_condition(clause, {"answer": current}) is expected

    def test_unset_variable_compares_as_empty_string(self):
        assert evaluate_condition(make_clause(value=""), {}) is True
        assert evaluate_condition(make_clause(value="yes"), {}) is False

    def test_unset_variable_is_not_equal_to_value(self):
        assert evaluate_condition(make_clause("not_equals", "x"), {}) is True

    def test_numbers_compare_as_text(self):
        clause = make_clause(value="10")

        assert evaluate_condition(clause, {"answer": 10}) is True
        assert evaluate_condition(make_clause(value="10.0"), {"answer": 10}) is False

    def test_contains_on_structured_value_uses_json_text(self):
        clause = make_clause("contains", '"ok"')

        assert evaluate_condition(clause, {"answer": {"status": "ok"}}) is True

    def test_numeric_clause_value_is_coerced_to_text(self):
        clause = ConditionClause.model_validate({"variable": "answer", "value": 5})

        assert clause.value == "5"
        assert clause.operator is ConditionOperator.EQUALS
        assert evaluate_condition(clause, {"answer": "5"}) is True


def test_variable_text_defaults_to_empty():
    assert variable_text("missing", {}) == ""
    assert variable_text("zero", {"zero": 0}) == "0"
