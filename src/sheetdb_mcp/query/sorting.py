# Google SheetDB MCP Server
# File: query/sorting.py
# Version: v1

"""Multi-key stable sort over coerced cell values."""

from __future__ import annotations

import math
from functools import cmp_to_key
from typing import Any, Iterable, List, Mapping, Sequence

from ..models import OrderKey, field_value, normalize_order_by
from .coercion import ComparableValue, coerce, compare, is_date_column


def _rank(value: ComparableValue) -> int:
    # numbers < strings < unparseable dates
    if isinstance(value, float):
        return 2 if math.isnan(value) else 0
    return 1


def sort_compare(a: ComparableValue, b: ComparableValue) -> int:
    """Total three-way order over coerced values of any kind.

    Unlike ``compare``, mixed kinds never tie: numbers sort before strings
    and ``nan`` sorts last, so a blank cell in a numeric column cannot
    break the ordering of the numbers around it.
    """
    rank_a, rank_b = _rank(a), _rank(b)
    if rank_a != rank_b:
        return -1 if rank_a < rank_b else 1
    return compare(a, b) or 0


def _make_comparator(keys: Sequence[OrderKey]):
    date_hints = [is_date_column(k.column) for k in keys]

    def _cmp(a: Mapping[str, Any], b: Mapping[str, Any]) -> int:
        for key, is_date in zip(keys, date_hints):
            outcome = sort_compare(
                coerce(field_value(a, key.column), is_date),
                coerce(field_value(b, key.column), is_date),
            )
            if outcome:
                return -outcome if key.descending else outcome
        return 0

    return _cmp


def sort_rows(rows: Iterable[Mapping[str, Any]], order_by: Any) -> List[Any]:
    """Return ``rows`` ordered by ``order_by``.

    Rows equal on every key keep their input order. An empty ``order_by``
    returns the rows unchanged.
    """
    keys = normalize_order_by(order_by)
    out = list(rows)
    if not keys:
        return out
    # list.sort is stable, so ties keep their relative input order.
    out.sort(key=cmp_to_key(_make_comparator(keys)))
    return out
