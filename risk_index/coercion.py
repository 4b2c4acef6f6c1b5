"""
Risk Index Engine - Value Coercion.

Helpers that turn raw spreadsheet cells into the numbers and
strings the evaluators compare. None of them raise on bad
input: unreadable values fall back to 0 or the empty string.
"""

import math
import re
from decimal import Decimal
from typing import Any, Optional

from .types import ColumnIndexMap, Record


# Leading numeric prefix, the way a lenient float parse reads "85%" or "12 days".
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(value: Any) -> float:
    """
    Best-effort numeric coercion of a cell value.

    Args:
        value: Raw cell value (number, string, bool, None, ...)

    Returns:
        The parsed number, or 0.0 when nothing numeric can be read
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value.strip())
        if not match:
            return 0.0
        try:
            number = float(match.group(0))
        except ValueError:
            return 0.0
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def stringify(value: Any) -> str:
    """
    Render a cell value as the string used for map keys and
    condition matching.

    Booleans become ``"true"``/``"false"`` and integral floats
    drop their ``.0`` so that a numeric cell 5.0 matches key "5".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    whole = math.floor(value)
    return int(whole) + (1 if value - whole >= 0.5 else 0)


def read_cell(record: Record, column_index_map: ColumnIndexMap, column: Optional[str]) -> Any:
    """
    Resolve a logical column to its cell in ``record``.

    Unmapped columns and indices outside the row yield None.
    """
    if not column:
        return None
    index = column_index_map.get(column)
    if index is None or isinstance(index, bool) or not isinstance(index, int):
        return None
    if index < 0 or index >= len(record):
        return None
    return record[index]
