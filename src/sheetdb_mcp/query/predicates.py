# Google SheetDB MCP Server
# File: query/predicates.py
# Version: v1

"""Row predicate evaluation.

``matches`` is total: an unknown operator or an unparseable value makes the
condition false instead of raising, so one bad row or condition never
aborts a bulk scan.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..models import OPERATORS, Comparison, Condition, Filter, Literal, field_value, normalize_filter
from .coercion import coerce, compare, is_date_column, parse_decimal

logger = logging.getLogger(__name__)

_ORDERED_OPS: Dict[str, Callable[[int], bool]] = {
    ">": lambda c: c > 0,
    "<": lambda c: c < 0,
    ">=": lambda c: c >= 0,
    "<=": lambda c: c <= 0,
}


def loose_equals(row_val: str, literal: Any) -> bool:
    """String/number equivalence: ``"25"`` equals ``25`` and ``"25.0"``.

    A ``None`` literal matches nothing; booleans compare as 1 and 0.
    """
    if literal is None:
        return False
    if isinstance(literal, (int, float)):
        number = parse_decimal(row_val)
        return number is not None and not math.isnan(literal) and number == float(literal)
    return row_val == str(literal)


def _compare_condition(column: str, row_val: str, cond: Comparison) -> bool:
    op = cond.operator
    if op not in OPERATORS:
        logger.debug("Unknown operator %r on column %r never matches.", op, column)
        return False
    if op == "contains":
        needle = "" if cond.value is None else str(cond.value)
        return needle.lower() in row_val.lower()

    is_date = is_date_column(column)
    outcome = compare(coerce(row_val, is_date), coerce(cond.value, is_date))

    if op == "=":
        return outcome == 0
    if op == "!=":
        return outcome != 0
    return outcome is not None and _ORDERED_OPS[op](outcome)


def condition_matches(column: str, row_val: str, cond: Condition) -> bool:
    if isinstance(cond, Literal):
        return loose_equals(row_val, cond.value)
    return _compare_condition(column, row_val, cond)


def matches(row: Mapping[str, Any], where: Optional[Mapping[str, Any]]) -> bool:
    """True iff every condition in ``where`` holds for ``row``.

    ``where`` may hold tagged conditions or the loose JSON shape
    (``{"age": 25}``, ``{"age": {"op": ">", "value": 18}}``).
    An empty filter matches every row.
    """
    conditions: Filter = normalize_filter(where)
    for column, cond in conditions.items():
        raw = field_value(row, column)
        row_val = "" if raw is None else str(raw)
        if not condition_matches(column, row_val, cond):
            return False
    return True


def filter_rows(rows: Iterable[Mapping[str, Any]], where: Optional[Mapping[str, Any]]) -> List[Any]:
    conditions = normalize_filter(where)
    return [row for row in rows if matches(row, conditions)]
