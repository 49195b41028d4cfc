# Google SheetDB MCP Server
# File: query/projection.py
# Version: v1

"""Field projection."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..models import field_value


def project(rows: Iterable[Mapping[str, Any]], fields: Sequence[str]) -> List[Dict[str, Any]]:
    """Narrow each row to exactly ``fields``, in that order.

    Unknown fields map to ``None``. The positional identifier is only kept
    when ``_row`` is requested explicitly.
    """
    names = list(fields)
    return [{name: field_value(row, name) for name in names} for row in rows]
