"""Tests for template substitution."""

import pytest

from chatflow.core.template import placeholders, resolve, stringify


class TestResolve:
    """Tests for resolve()."""

    def test_replaces_known_variable(self):
        assert resolve("Hello {{user_name}}", {"user_name": "Ana"}) == "Hello Ana"

    def test_trims_identifier_whitespace(self):
        assert resolve("Hi {{ name }}!", {"name": "Bo"}) == "Hi Bo!"

    def test_missing_variable_keeps_placeholder(self):
        assert resolve("Hello {{missing}}", {}) == "Hello {{missing}}"

    def test_none_value_keeps_placeholder(self):
        assert resolve("Hello {{name}}", {"name": None}) == "Hello {{name}}"

    def test_structured_value_renders_as_indented_json(self):
        result = resolve("{{data}}", {"data": {"city": "São Paulo", "n": 1}})

        assert result == '{\n  "city": "São Paulo",\n  "n": 1\n}'

    def test_list_value_renders_as_json(self):
        assert resolve("{{items}}", {"items": [1, 2]}) == "[\n  1,\n  2\n]"

    def test_primitive_values_use_string_form(self):
        variables = {"count": 3, "price": 2.5, "flag": True}

        assert resolve("{{count}} {{price}} {{flag}}", variables) == "3 2.5 true"

    def test_zero_is_substituted(self):
        assert resolve("{{n}}", {"n": 0}) == "0"

    def test_multiple_occurrences(self):
        assert resolve("{{a}}-{{b}}-{{a}}", {"a": "x", "b": "y"}) == "x-y-x"

    @pytest.mark.parametrize("value", [None, 42, 3.5])
    def test_non_string_input_is_stringified(self, value):
        assert resolve(value, {"x": "y"}) == str(value)

    def test_text_without_placeholders_is_unchanged(self):
        assert resolve("plain text", {"plain": "no"}) == "plain text"

    def test_does_not_mutate_variables(self):
        variables = {"name": "Ana"}

        resolve("{{name}} {{other}}", variables)

        assert variables == {"name": "Ana"}

    def test_is_idempotent_for_resolved_text(self):
        variables = {"name": "Ana"}
        once = resolve("Hello {{name}}", variables)

        assert resolve(once, variables) == once


class TestStringify:
    """Tests for stringify()."""

    def test_false_uses_json_spelling(self):
        assert stringify(False) == "false"

    def test_string_is_returned_as_is(self):
        assert stringify("abc") == "abc"

    def test_tuple_renders_as_json_array(self):
        assert stringify(("a",)) == '[\n  "a"\n]'


def test_placeholders_lists_names_in_order():
    assert placeholders("{{ b }} and {{a}} then {{b}}") == ["b", "a", "b"]
