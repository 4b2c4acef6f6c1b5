"""
Risk Index Engine - Post-Calculation Modifiers.

Modifiers adjust the summed component score when a record's
condition column matches. They fold over the running total in
declared order, so ``+5`` then ``*2`` differs from ``*2`` then
``+5``.
"""

import logging
import math
from typing import Iterable

from .coercion import read_cell, stringify
from .types import (
    ColumnIndexMap,
    ModifierOperation,
    ModifierOperator,
    ModifierSpec,
    Record,
)


logger = logging.getLogger(__name__)


def condition_matches(
    modifier: ModifierSpec,
    record: Record,
    column_index_map: ColumnIndexMap,
) -> bool:
    """
    Check a modifier's trigger condition against a record.

    Boolean conditions compare against the cell read as
    ``"true"``; all others compare case-insensitively as text.
    """
    actual = stringify(read_cell(record, column_index_map, modifier.condition_column)).lower()
    expected = modifier.condition_value

    if isinstance(expected, bool):
        return (actual == "true") == expected
    return actual == stringify(expected).lower()


def apply_operation(total: float, operation: ModifierOperation) -> float:
    """Apply one operation. Division by zero leaves the total unchanged."""
    if operation.operator is ModifierOperator.ADD:
        return total + operation.value
    if operation.operator is ModifierOperator.SUBTRACT:
        return total - operation.value
    if operation.operator is ModifierOperator.MULTIPLY:
        return total * operation.value
    if operation.operator is ModifierOperator.DIVIDE:
        if operation.value == 0:
            return total
        return total / operation.value
    return total


def apply_modifiers(
    total: float,
    modifiers: Iterable[ModifierSpec],
    record: Record,
    column_index_map: ColumnIndexMap,
) -> float:
    """
    Fold matching modifiers over ``total``.

    Args:
        total: Summed component points
        modifiers: Modifiers in declared order
        record: Row of raw cell values
        column_index_map: Logical column name -> row position

    Returns:
        The adjusted (unclamped) total. An operation that would
        overflow to infinity or NaN is skipped, so the total is
        always finite.
    """
    running = total
    for modifier in modifiers:
        if not condition_matches(modifier, record, column_index_map):
            continue
        before = running
        for operation in modifier.operations:
            result = apply_operation(running, operation)
            if not math.isfinite(result):
                logger.warning(
                    f"Modifier '{modifier.name}': skipping '{operation.operator.value} "
                    f"{operation.value}', result is not finite; keeping {running}"
                )
                continue
            running = result
        logger.debug(f"Modifier '{modifier.name}' applied: {before} -> {running}")
    return running
