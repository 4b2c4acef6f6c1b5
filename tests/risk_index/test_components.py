"""
Tests for Risk Index Component Evaluators.

============================================================
PURPOSE
============================================================
- Each variant formula
- Clamp to max(0, round_half_up(raw))
- Missing columns and non-numeric cells score 0
- Unknown types and evaluator failures degrade to 0

============================================================
"""

import logging
from types import MappingProxyType

import pytest

from risk_index.coercion import parse_number, read_cell, round_half_up, stringify
from risk_index.components import evaluate_component
from risk_index.types import (
    InverseLinearComponent,
    InverseRatioComponent,
    LinearComponent,
    LinearMultiplierComponent,
    UnknownComponent,
    ValueMapComponent,
)


COLUMNS = {
    "Grade": 0,
    "Days Out": 1,
    "GPA": 2,
    "Times Contacted": 3,
    "Contact Attempts": 4,
}


def make_record(grade="B", days_out=15, gpa=80, contacted=4, attempts=2):
    return [grade, days_out, gpa, contacted, attempts]


# ============================================================
# TEST: Coercion helpers
# ============================================================

class TestCoercion:

    @pytest.mark.parametrize("value, expected", [
        (12, 12.0),
        (3.5, 3.5),
        ("15", 15.0),
        (" 7.25 ", 7.25),
        ("85%", 85.0),
        ("", 0.0),
        ("n/a", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
    ])
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value, expected", [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (5.0, "5"),
        (2.5, "2.5"),
        ("B", "B"),
        (7, "7"),
    ])
    def test_stringify(self, value, expected):
        assert stringify(value) == expected

    @pytest.mark.parametrize("value, expected", [
        (7.5, 8),
        (4.0, 4),
        (4.49, 4),
        (-2.5, -2),
        (-2.6, -3),
        (0.49999999999999994, 0),
        (-0.5, 0),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_read_cell_unmapped_column(self):
        assert read_cell(make_record(), COLUMNS, "Nope") is None

    def test_read_cell_index_outside_row(self):
        assert read_cell(["only"], {"Far": 9}, "Far") is None


# ============================================================
# TEST: Variant formulas
# ============================================================

class TestValueMap:

    def make(self, **kwargs):
        return ValueMapComponent(
            name="grade",
            column="Grade",
            mapping=MappingProxyType({"A": 0, "B": 5, "F": 20}),
            **kwargs,
        )

    def test_match(self):
        """Grade B maps to 5 points."""
        outcome = evaluate_component(self.make(), make_record(grade="B"), COLUMNS)
        assert outcome.points == 5
        assert outcome.ok

    def test_missing_key_scores_zero(self):
        assert evaluate_component(self.make(), make_record(grade="C"), COLUMNS).points == 0

    def test_lookup_is_case_sensitive(self):
        assert evaluate_component(self.make(), make_record(grade="b"), COLUMNS).points == 0

    def test_weight_does_not_cap_map_values(self):
        component = self.make(weight=10)
        assert evaluate_component(component, make_record(grade="F"), COLUMNS).points == 20

    def test_numeric_cell_matches_integer_key(self):
        component = ValueMapComponent(name="n", column="Days Out", mapping={"15": 3})
        assert evaluate_component(component, make_record(days_out=15.0), COLUMNS).points == 3


class TestLinear:

    def test_capped_at_weight(self):
        """Days Out 15 with weight 10 scores 10."""
        component = LinearComponent(name="days", column="Days Out", weight=10)
        assert evaluate_component(component, make_record(days_out=15), COLUMNS).points == 10

    def test_below_weight(self):
        component = LinearComponent(name="days", column="Days Out", weight=10)
        assert evaluate_component(component, make_record(days_out=3), COLUMNS).points == 3

    def test_negative_value_floored(self):
        component = LinearComponent(name="days", column="Days Out", weight=10)
        assert evaluate_component(component, make_record(days_out=-4), COLUMNS).points == 0

    def test_non_numeric_cell_scores_zero(self):
        component = LinearComponent(name="days", column="Days Out", weight=10)
        assert evaluate_component(component, make_record(days_out="unknown"), COLUMNS).points == 0


class TestLinearMultiplier:

    def test_multiplier_applied(self):
        component = LinearMultiplierComponent(
            name="days", column="Days Out", weight=30, multiplier=2,
        )
        assert evaluate_component(component, make_record(days_out=7), COLUMNS).points == 14

    def test_capped_at_weight(self):
        component = LinearMultiplierComponent(
            name="days", column="Days Out", weight=30, multiplier=3,
        )
        assert evaluate_component(component, make_record(days_out=20), COLUMNS).points == 30


class TestInverseLinear:

    def test_percentage(self):
        """GPA 80% with weight 20 scores round(0.2 * 20) = 4."""
        component = InverseLinearComponent(name="gpa", column="GPA", weight=20)
        assert evaluate_component(component, make_record(gpa=80), COLUMNS).points == 4

    def test_above_hundred_floored(self):
        component = InverseLinearComponent(name="gpa", column="GPA", weight=20)
        assert evaluate_component(component, make_record(gpa=120), COLUMNS).points == 0

    def test_below_zero_extrapolates(self):
        component = InverseLinearComponent(name="gpa", column="GPA", weight=20)
        assert evaluate_component(component, make_record(gpa=-50), COLUMNS).points == 30


class TestInverseRatio:

    def make(self):
        return InverseRatioComponent(
            name="contact",
            weight=15,
            numerator_column="Times Contacted",
            denominator_column="Contact Attempts",
        )

    def test_ratio_rounds_half_up(self):
        """(1 - 2/4) * 15 = 7.5 rounds to 8."""
        outcome = evaluate_component(self.make(), make_record(contacted=4, attempts=2), COLUMNS)
        assert outcome.points == 8

    def test_zero_numerator_scores_zero(self):
        outcome = evaluate_component(self.make(), make_record(contacted=0, attempts=2), COLUMNS)
        assert outcome.points == 0
        assert outcome.ok

    def test_denominator_above_numerator_floored(self):
        outcome = evaluate_component(self.make(), make_record(contacted=2, attempts=6), COLUMNS)
        assert outcome.points == 0


# ============================================================
# TEST: Graceful degradation
# ============================================================

class TestDegradation:

    def test_unknown_type_scores_zero(self):
        component = UnknownComponent(name="future", weight=50, raw_type="bogus")
        outcome = evaluate_component(component, make_record(), COLUMNS)
        assert outcome.points == 0
        assert outcome.fault is None

    def test_missing_column_scores_zero(self):
        component = LinearComponent(name="absent", column="Not In Sheet", weight=10)
        outcome = evaluate_component(component, make_record(), COLUMNS)
        assert outcome.points == 0
        assert outcome.ok

    def test_component_without_column(self):
        component = InverseLinearComponent(name="nocol", weight=20)
        assert evaluate_component(component, make_record(), COLUMNS).points == 20

    def test_malformed_map_value_becomes_fault(self, caplog):
        component = ValueMapComponent(name="grade", column="Grade", mapping={"B": "lots"})

        with caplog.at_level(logging.WARNING, logger="risk_index.components"):
            outcome = evaluate_component(component, make_record(grade="B"), COLUMNS)

        assert outcome.points == 0
        assert outcome.fault is not None
        assert outcome.fault.component == "grade"
        assert "grade" in caplog.text

    def test_fault_logging_can_be_silenced(self, caplog):
        component = ValueMapComponent(name="grade", column="Grade", mapping={"B": None})

        with caplog.at_level(logging.WARNING, logger="risk_index.components"):
            outcome = evaluate_component(component, make_record(grade="B"), COLUMNS, log_faults=False)

        assert outcome.fault is not None
        assert caplog.records == []
