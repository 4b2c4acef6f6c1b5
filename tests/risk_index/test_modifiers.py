"""
Tests for Risk Index Post-Calculation Modifiers.
"""

import pytest

from risk_index.modifiers import apply_modifiers, apply_operation, condition_matches
from risk_index.types import ModifierOperation, ModifierOperator, ModifierSpec


COLUMNS = {"Re-entry": 0, "Status": 1}


def op(operator, value):
    return ModifierOperation(operator=ModifierOperator(operator), value=value)


def modifier(condition_value, operations, column="Re-entry"):
    return ModifierSpec(
        name="mod",
        condition_column=column,
        condition_value=condition_value,
        operations=tuple(operations),
    )


# ============================================================
# TEST: Condition matching
# ============================================================

class TestConditionMatches:

    @pytest.mark.parametrize("cell", ["TRUE", "true", "True", True])
    def test_boolean_true_condition(self, cell):
        assert condition_matches(modifier(True, []), [cell, ""], COLUMNS)

    @pytest.mark.parametrize("cell", ["FALSE", "no", "", None, False])
    def test_boolean_true_condition_misses(self, cell):
        assert not condition_matches(modifier(True, []), [cell, ""], COLUMNS)

    def test_boolean_false_condition_matches_anything_not_true(self):
        assert condition_matches(modifier(False, []), ["no", ""], COLUMNS)
        assert not condition_matches(modifier(False, []), ["TRUE", ""], COLUMNS)

    def test_string_condition_is_case_insensitive(self):
        mod = modifier("Probation", [], column="Status")
        assert condition_matches(mod, ["", "PROBATION"], COLUMNS)
        assert not condition_matches(mod, ["", "good standing"], COLUMNS)

    def test_numeric_condition_matches_text_cell(self):
        mod = modifier(1.0, [], column="Status")
        assert condition_matches(mod, ["", "1"], COLUMNS)

    def test_unmapped_condition_column(self):
        mod = modifier(True, [], column="Missing")
        assert not condition_matches(mod, ["TRUE", "TRUE"], COLUMNS)


# ============================================================
# TEST: Operations
# ============================================================

class TestApplyOperation:

    @pytest.mark.parametrize("operator, value, expected", [
        ("+", 5, 15),
        ("-", 5, 5),
        ("*", 2, 20),
        ("/", 4, 2.5),
    ])
    def test_operators(self, operator, value, expected):
        assert apply_operation(10, op(operator, value)) == expected

    def test_divide_by_zero_leaves_total(self):
        assert apply_operation(10, op("/", 0)) == 10


# ============================================================
# TEST: Fold
# ============================================================

class TestApplyModifiers:

    def test_order_sensitivity(self):
        """+5 then *2 gives 30; *2 then +5 gives 25."""
        record = ["TRUE", ""]
        add_then_double = [modifier(True, [op("+", 5)]), modifier(True, [op("*", 2)])]
        double_then_add = [modifier(True, [op("*", 2)]), modifier(True, [op("+", 5)])]

        assert apply_modifiers(10, add_then_double, record, COLUMNS) == 30
        assert apply_modifiers(10, double_then_add, record, COLUMNS) == 25

    def test_operations_within_modifier_in_order(self):
        """Re-entry TRUE on 40: 40 / 2 + 50 = 70."""
        mod = modifier(True, [op("/", 2), op("+", 50)])
        assert apply_modifiers(40, [mod], ["TRUE", ""], COLUMNS) == 70

    def test_unmatched_modifier_skipped(self):
        mod = modifier(True, [op("+", 100)])
        assert apply_modifiers(40, [mod], ["FALSE", ""], COLUMNS) == 40

    def test_divide_by_zero_in_chain(self):
        mod = modifier(True, [op("/", 0), op("+", 1)])
        assert apply_modifiers(10, [mod], ["TRUE", ""], COLUMNS) == 11

    def test_can_drive_total_negative(self):
        mod = modifier(True, [op("-", 50)])
        assert apply_modifiers(10, [mod], ["TRUE", ""], COLUMNS) == -40

    def test_no_modifiers(self):
        assert apply_modifiers(12, [], ["TRUE", ""], COLUMNS) == 12

    def test_non_finite_step_skipped(self):
        """5 * 1e308 overflows and is skipped twice; +1 still applies."""
        mod = modifier(True, [op("*", 1e308), op("*", 1e308), op("+", 1)])
        assert apply_modifiers(5, [mod], ["TRUE", ""], COLUMNS) == 6
