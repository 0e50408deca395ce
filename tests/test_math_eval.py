"""Tests for arithmetic evaluation of dimension values."""

import pytest

from tokensmith.errors import MalformedExpressionError, UnitMismatchError
from tokensmith.math_eval import (
    evaluate_expression,
    evaluate_value,
    format_number,
    is_expression,
)


class TestEvaluateExpression:
    def test_scaling_keeps_unit(self):
        assert evaluate_expression("8px * 2") == "16px"

    def test_operator_precedence(self):
        assert evaluate_expression("2 + 3 * 4") == 14

    def test_parentheses(self):
        assert evaluate_expression("(2px + 3px) * 4") == "20px"

    def test_division(self):
        assert evaluate_expression("10rem / 4") == "2.5rem"

    def test_same_unit_division_is_unitless(self):
        assert evaluate_expression("16px / 8px") == 2

    def test_unitless_operand_adopts_unit(self):
        assert evaluate_expression("8px + 2") == "10px"

    def test_percent_unit(self):
        assert evaluate_expression("50% - 12.5%") == "37.5%"

    def test_unary_minus(self):
        assert evaluate_expression("-(4px * 2)") == "-8px"

    def test_float_result_rounded(self):
        assert evaluate_expression("10 / 3") == pytest.approx(3.3333)

    def test_whitespace_separated_parts(self):
        assert evaluate_expression("8px 4px*2") == "8px 8px"

    def test_negative_part_in_list(self):
        assert evaluate_expression("0 4px 8px -2px") == "0 4px 8px -2px"
        assert evaluate_expression("8px - 2px") == "6px"
        assert evaluate_expression("8px-2px") == "6px"

    def test_mismatched_addition(self):
        with pytest.raises(UnitMismatchError, match="8px and 50%"):
            evaluate_expression("8px + 50%")

    def test_unit_times_unit(self):
        with pytest.raises(UnitMismatchError):
            evaluate_expression("2px * 3px")

    def test_unitless_divided_by_unit(self):
        with pytest.raises(UnitMismatchError):
            evaluate_expression("2 / 3px")

    def test_division_by_zero(self):
        with pytest.raises(MalformedExpressionError, match="division by zero"):
            evaluate_expression("4px / 0")

    def test_dangling_operator(self):
        with pytest.raises(MalformedExpressionError):
            evaluate_expression("8px +")

    def test_unbalanced_parentheses(self):
        with pytest.raises(MalformedExpressionError):
            evaluate_expression("(8px + 2")

    def test_invalid_character(self):
        with pytest.raises(MalformedExpressionError, match="unexpected character"):
            evaluate_expression("8px + #fff")


class TestIsExpression:
    @pytest.mark.parametrize(
        "text", ["8px * 2", "1 + 1", "-4px + 1px", "(2 + 2)", "8px-2px", "8px +"]
    )
    def test_expressions(self, text):
        assert is_expression(text)

    @pytest.mark.parametrize(
        "text",
        [
            "8px",
            "0 4px 8px",
            "1px solid",
            "#ff0000",
            "{a} * 2",
            "",
            "-8",
            "+8",
            "(8px)",
            "0 4px 8px -2px",
        ],
    )
    def test_literals(self, text):
        assert not is_expression(text)


class TestEvaluateValue:
    def test_literal_unchanged(self):
        assert evaluate_value("1.50px") == "1.50px"

    def test_signed_literals_stay_strings(self):
        assert evaluate_value("-8") == "-8"
        assert evaluate_value("(8px)") == "(8px)"
        assert evaluate_value("0 4px -2px") == "0 4px -2px"

    def test_non_string_unchanged(self):
        assert evaluate_value(12) == 12
        assert evaluate_value({"a": "1 + 1"}) == {"a": "1 + 1"}

    def test_expression_evaluated(self):
        assert evaluate_value("4px * 3") == "12px"


class TestFormatNumber:
    def test_integral(self):
        assert format_number(16.0) == "16"

    def test_trailing_zeros_stripped(self):
        assert format_number(1.5) == "1.5"

    def test_negative_zero(self):
        assert format_number(-0.0) == "0"

    def test_non_finite(self):
        with pytest.raises(MalformedExpressionError):
            format_number(float("inf"))
