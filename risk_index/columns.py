"""
Risk Index Engine - Column Resolution.

Matches the logical column names a formula uses against the
actual headers of a sheet and produces the ColumnIndexMap the
engine consumes. Matching is case-insensitive and goes through
an alias table, so a formula asking for "Grade" finds a sheet
headed "Course Grade".
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence


logger = logging.getLogger(__name__)


DEFAULT_COLUMN_ALIASES: Dict[str, List[str]] = {
    "Student Name": ["studentname", "student name", "student"],
    "Student ID": ["student id", "systudentid", "id"],
    "Student Number": ["studentnumber", "student identifier", "student number"],
    "Course": ["course"],
    "Course ID": ["course id"],
    "Course Last Access": ["course last access"],
    "Current Score": ["current score", "grade", "course grade"],
    "Grade": ["grade", "course grade", "grades", "current score"],
    "Days Out": ["days out", "daysout"],
    "Last LDA": ["lda", "last lda"],
    "Assigned": ["assigned"],
    "Program Version": ["programversion", "program version"],
    "Missing Assignments": ["missing assignments", "course missing assignments"],
    "Zero Assignments": ["zero assignments", "course zero assignments"],
}


def find_column_index(headers: Sequence[str], aliases: Iterable[str]) -> int:
    """
    Position of the first alias found in ``headers``.

    Both sides are compared lower-cased and stripped. Returns -1
    when no alias matches.
    """
    normalized = [str(h).strip().lower() if h is not None else "" for h in headers]
    for alias in aliases:
        try:
            return normalized.index(alias.strip().lower())
        except ValueError:
            continue
    return -1


def build_column_index_map(
    headers: Sequence[str],
    columns: Iterable[str],
    aliases: Optional[Mapping[str, Iterable[str]]] = None,
) -> Dict[str, int]:
    """
    Resolve logical columns against sheet headers.

    Args:
        headers: Header row of the sheet
        columns: Logical column names to resolve
        aliases: Logical name -> alternative header names.
                 Defaults to DEFAULT_COLUMN_ALIASES.

    Returns:
        Logical name -> zero-based index. Unresolved names are omitted.
    """
    alias_table = DEFAULT_COLUMN_ALIASES if aliases is None else aliases
    resolved: Dict[str, int] = {}

    for column in columns:
        candidates = [column] + [a for a in alias_table.get(column, ()) if a != column]
        index = find_column_index(headers, candidates)
        if index == -1:
            logger.debug(f"Column '{column}' not found in headers")
            continue
        resolved[column] = index

    return resolved
