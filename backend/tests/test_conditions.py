"""Tests for the condition evaluator and visibility filtering."""

import pytest

from stepform.engine.conditions import evaluate, visible_fields, visible_steps
from stepform.engine.values import is_empty, stringify, to_number
from stepform.schemas.wizard import Condition

from fakes import make_field, make_step, make_template


def cond(field_id: str, operator: str, value="") -> Condition:
    return Condition.model_validate({"fieldId": field_id, "operator": operator, "value": value})


ALL_OPERATORS = ["eq", "neq", "gt", "lt", "gte", "lte", "contains", "notContains", "empty", "notEmpty"]
VALUE_SHAPES = [None, "", [], "x", ["a", "b"], 0, 3.5, True, False]


@pytest.mark.unit
class TestEvaluate:
    """Operator semantics."""

    def test_no_condition_is_always_visible(self):
        assert evaluate(None, {}) is True
        assert evaluate(None, {"anything": ["a"]}) is True

    @pytest.mark.parametrize("operator", ALL_OPERATORS)
    @pytest.mark.parametrize("answer", VALUE_SHAPES)
    def test_total_for_every_operator_and_shape(self, operator, answer):
        answers = {} if answer is None else {"f": answer}
        assert evaluate(cond("f", operator, "1"), answers) in (True, False)

    def test_unknown_field_compares_as_empty(self):
        assert evaluate(cond("missing", "eq", ""), {}) is True
        assert evaluate(cond("missing", "eq", "yes"), {}) is False
        assert evaluate(cond("missing", "empty"), {"other": "x"}) is True

    def test_eq_coerces_numbers_and_booleans(self):
        assert evaluate(cond("n", "eq", "5"), {"n": 5}) is True
        assert evaluate(cond("n", "eq", "5"), {"n": 5.0}) is True
        assert evaluate(cond("b", "eq", "true"), {"b": True}) is True
        assert evaluate(cond("b", "neq", "true"), {"b": False}) is True

    def test_condition_value_is_stringified(self):
        assert cond("n", "eq", 5).value == "5"
        assert cond("b", "eq", True).value == "true"

    def test_eq_on_multiselect_compares_joined_form(self):
        assert evaluate(cond("m", "eq", "a"), {"m": ["a"]}) is True
        assert evaluate(cond("m", "eq", "a"), {"m": ["a", "b"]}) is False
        assert evaluate(cond("m", "eq", "a,b"), {"m": ["a", "b"]}) is True

    @pytest.mark.parametrize(
        "operator,answer,value,expected",
        [
            ("gt", 10, "5", True),
            ("gt", "10", "5", True),
            ("lt", 3, "5", True),
            ("gte", 5, "5", True),
            ("lte", 5.5, "5", False),
            ("gt", "abc", "5", False),
            ("gt", "1_000", "5", False),
            ("gt", 10, "abc", False),
            ("lt", "", "5", False),
            ("gt", True, "0", False),
            ("lt", ["1"], "5", False),
        ],
    )
    def test_numeric_operators(self, operator, answer, value, expected):
        assert evaluate(cond("n", operator, value), {"n": answer}) is expected

    def test_numeric_operator_on_unanswered_field_is_false(self):
        assert evaluate(cond("n", "lt", "5"), {}) is False

    def test_contains_is_substring_for_strings(self):
        assert evaluate(cond("s", "contains", "ell"), {"s": "hello"}) is True
        assert evaluate(cond("s", "notContains", "xyz"), {"s": "hello"}) is True

    def test_contains_is_membership_for_lists(self):
        # "b" must be an element, not a substring of one
        assert evaluate(cond("m", "contains", "b"), {"m": ["abc"]}) is False
        assert evaluate(cond("m", "contains", "abc"), {"m": ["abc"]}) is True

    def test_multiselect_membership_scenario(self):
        condition = cond("interests", "contains", "b")
        assert evaluate(condition, {"interests": ["a", "b"]}) is True
        assert evaluate(condition, {"interests": ["a"]}) is False

    @pytest.mark.parametrize("answer", VALUE_SHAPES)
    def test_empty_and_not_empty_are_negations(self, answer):
        answers = {} if answer is None else {"f": answer}
        assert evaluate(cond("f", "empty"), answers) is not evaluate(cond("f", "notEmpty"), answers)


@pytest.mark.unit
class TestValues:
    def test_stringify(self):
        assert stringify(None) == ""
        assert stringify(True) == "true"
        assert stringify(5.0) == "5"
        assert stringify(2.5) == "2.5"
        assert stringify(["a", "b"]) == "a,b"

    def test_to_number(self):
        assert to_number("  42 ") == 42.0
        assert to_number("1e3") == 1000.0
        assert to_number("nan") is None
        assert to_number("inf") is None
        assert to_number(False) is None
        assert to_number("") is None

    def test_to_number_rejects_python_only_literals(self):
        assert to_number("1_000") is None
        assert to_number("Infinity") is None
        assert to_number("1.5j") is None
        assert to_number(".5") == 0.5
        assert to_number("-3.") == -3.0
        assert to_number("0x1F") == 31.0

    def test_is_empty(self):
        assert is_empty(None) and is_empty("") and is_empty([])
        assert not is_empty(0)
        assert not is_empty(False)
        assert not is_empty(" ")


@pytest.mark.unit
class TestVisibility:
    def test_visible_steps_preserve_order(self):
        template = make_template(
            make_step("One", make_field("has_budget")),
            make_step("Two", make_field("budget"), condition={"fieldId": "has_budget", "operator": "eq", "value": "yes"}),
            make_step("Three", make_field("notes")),
        )
        titles = [s.title for s in visible_steps(template, {"has_budget": "no"})]
        assert titles == ["One", "Three"]

        titles = [s.title for s in visible_steps(template, {"has_budget": "yes"})]
        assert titles == ["One", "Two", "Three"]

    def test_visible_fields_follow_same_step_answers(self):
        step = make_step(
            "Contact",
            make_field("channel"),
            make_field("call_hours", condition={"field_id": "channel", "operator": "eq", "value": "phone"}),
            make_field("email"),
        )
        names = [f.name for f in visible_fields(step, {"channel": "email"})]
        assert names == ["channel", "email"]
        names = [f.name for f in visible_fields(step, {"channel": "phone"})]
        assert names == ["channel", "call_hours", "email"]
