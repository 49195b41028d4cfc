# Google SheetDB MCP Server
# File: store.py
# Version: v1

"""Row store port consumed by ``SheetDB``.

Positions are 1-based sheet rows; the header occupies position 1. The
store owns the data: ``SheetDB`` only holds a snapshot between a read and
the writes it informs, and nothing here locks. A positional write issued
after another writer moved rows acts on whatever row now sits at that
position.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol, Sequence

from .models import Row


class RowStore(Protocol):
    """Anything that can read and write rows of a named tab."""

    async def ping(self) -> bool: ...

    async def read_all(self, table: str) -> List[Row]: ...

    async def read_header(self, table: str) -> List[str]: ...

    async def write_range(
        self, table: str, position: int, values: Sequence[Any]
    ) -> Optional[str]: ...

    async def append_rows(
        self, table: str, rows: Sequence[Sequence[Any]]
    ) -> Optional[str]: ...

    async def clear_range(
        self, table: str, position: int, width: Optional[int] = None
    ) -> None: ...

    async def clear_below_header(self, table: str, width: Optional[int] = None) -> None: ...

    async def insert_row_at(self, table: str, position: int) -> None: ...

    async def create_tab(self, table: str) -> bool: ...

    async def delete_tab(self, table: str) -> bool: ...

    async def list_tabs(self) -> List[str]: ...


def rows_from_values(values: Sequence[Sequence[Any]]) -> List[Row]:
    """Header-keyed rows from a raw value grid (first line is the header).

    Fully blank lines are skipped but still consume a position.
    """
    if not values:
        return []
    header = [str(h) for h in values[0]]
    rows: List[Row] = []
    for idx, cells in enumerate(values[1:]):
        row = Row.from_cells(header, list(cells or []), position=idx + 2)
        if not row.is_blank:
            rows.append(row)
    return rows


def column_letter(index: int) -> str:
    """1-based column index to A1 letters: 1 -> A, 26 -> Z, 27 -> AA."""
    if index < 1:
        raise ValueError(f"column index must be >= 1, got {index}")
    letters = ""
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def quote_tab(table: str) -> str:
    """Quote a tab name for A1 notation (``'My Tab'``, ``'` doubled)."""
    return "'" + table.replace("'", "''") + "'"


def a1_row_range(table: str, position: int, width: int) -> str:
    return f"{quote_tab(table)}!A{position}:{column_letter(max(width, 1))}{position}"
