"""
In-memory operations over dataset rows: search and applying edits.

Rows are plain dictionaries resent by the client on every request, so
every function here is pure and returns new lists instead of mutating
its input.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)


def stringify(value: Any) -> str:
    """Render a cell the way the browser displays it.

    Booleans become ``true``/``false``, integral floats lose their
    trailing ``.0`` and ``None`` becomes an empty string.
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def search_rows(rows: List[Dict[str, Any]], query: str) -> List[Dict[str, Any]]:
    """Return the rows where any value contains ``query``, ignoring case."""
    needle = query.lower()
    return [row for row in rows if any(needle in stringify(value).lower() for value in row.values())]


def apply_modifications(
    rows: List[Dict[str, Any]],
    modifications: List[Dict[str, Any]],
) -> Tuple[List[Dict[str, Any]], int]:
    """Apply single-cell edits to a copy of ``rows``.

    Args:
        rows: The dataset to edit.  It is left untouched.
        modifications: Edits of the form ``{"rowIndex", "column",
            "newValue"}``.  Edits whose row index is out of range are
            skipped.

    Returns:
        A tuple of (edited rows, number of edits applied).
    """
    updated = copy.deepcopy(rows)
    applied = 0
    for mod in modifications:
        index = mod.get('rowIndex')
        column = mod.get('column')
        if not isinstance(index, int) or isinstance(index, bool) or not column:
            logger.warning(f"Skipping malformed modification: {mod}")
            continue
        if index < 0 or index >= len(updated):
            logger.warning(f"Skipping modification for out-of-range row {index}")
            continue
        updated[index][column] = mod.get('newValue', '')
        applied += 1
    return updated, applied
