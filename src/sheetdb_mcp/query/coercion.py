# Google SheetDB MCP Server
# File: query/coercion.py
# Version: v1

"""Value coercion for comparisons.

A raw cell is turned into something comparable:

- date-hinted columns -> epoch milliseconds (``nan`` when unparseable),
- full decimal numbers -> ``float``,
- anything else -> the lower-cased string.

The date hint is a heuristic on the column *name* (it contains "date",
case-insensitively), not a declared column type: ``created_date`` and
``Update Date`` are date columns, ``created_at`` is not. ISO-formatted
values still order chronologically on non-date columns because the
lower-cased strings compare lexicographically.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional, Union

ComparableValue = Union[float, str]

_DECIMAL_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")

# Formats tried after ISO-8601; naive values are read as UTC.
_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
)


def is_date_column(column: str) -> bool:
    return "date" in str(column).lower()


def parse_decimal(raw: str) -> Optional[float]:
    if _DECIMAL_RE.match(raw):
        return float(raw)
    return None


def parse_date_millis(raw: str) -> float:
    """Parse a date/time string into epoch milliseconds, or ``nan``."""
    text = raw.strip()
    if not text:
        return math.nan

    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00") if text.endswith("Z") else text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return math.nan
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000.0


def coerce(raw: Any, is_date: bool = False) -> ComparableValue:
    """Normalise a raw value into a comparable one. Never raises."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        # Numbers are already comparable; on a date column they are epoch millis.
        return float(raw)

    text = "" if raw is None else str(raw)
    if is_date:
        return parse_date_millis(text)

    number = parse_decimal(text)
    if number is not None:
        return number
    return text.lower()


def _is_nan(value: ComparableValue) -> bool:
    return isinstance(value, float) and math.isnan(value)


def compare(a: ComparableValue, b: ComparableValue) -> Optional[int]:
    """Three-way compare two coerced values.

    Returns ``None`` when the pair is unordered: either side is ``nan`` or
    one side is numeric and the other a string.
    """
    if _is_nan(a) or _is_nan(b):
        return None
    if isinstance(a, float) != isinstance(b, float):
        return None
    if a < b:  # type: ignore[operator]
        return -1
    if a > b:  # type: ignore[operator]
        return 1
    return 0
