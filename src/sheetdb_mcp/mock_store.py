# Google SheetDB MCP Server
# File: mock_store.py
# Version: v1

"""Small in-memory stand-in for the Google Sheets row store.

Activated when SHEETDB_MOCK_MODE is truthy, and used throughout the tests.
It mirrors the Sheets behaviours ``SheetDB`` relies on:

- appends land after the last non-blank row,
- clearing a row leaves a blank line that still occupies its position,
- inserting a row shifts everything at and below it down by one.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .errors import StoreError
from .models import Row
from .store import column_letter, quote_tab, rows_from_values

DEMO_TAB = "Users"

DEMO_VALUES: List[List[str]] = [
    ["id", "name", "age", "signup_date"],
    ["1", "Alice", "30", "2024-03-15"],
    ["2", "Bob", "25", "2024-01-02"],
    ["3", "Charlie", "35", "2023-11-20"],
    ["4", "Dana", "25", "2024-03-01"],
]


def _is_blank(line: Sequence[Any]) -> bool:
    return all(str(c) == "" for c in line)


class MockSheetsStore:
    """In-process row store keyed by tab name."""

    def __init__(
        self,
        tabs: Optional[Dict[str, List[List[Any]]]] = None,
        seed_demo: bool = False,
    ) -> None:
        self.tabs: Dict[str, List[List[str]]] = {}
        if seed_demo:
            self.tabs[DEMO_TAB] = [list(r) for r in DEMO_VALUES]
        for name, values in (tabs or {}).items():
            self.tabs[name] = [[str(c) for c in r] for r in values]

    def _tab(self, table: str) -> List[List[str]]:
        if table not in self.tabs:
            raise StoreError(f"Unable to parse range: unknown mock tab '{table}'.")
        return self.tabs[table]

    def _ensure_line(self, lines: List[List[str]], position: int) -> List[str]:
        while len(lines) < position:
            lines.append([])
        return lines[position - 1]

    async def ping(self) -> bool:
        return True

    async def read_all(self, table: str) -> List[Row]:
        return rows_from_values(self._tab(table))

    async def read_header(self, table: str) -> List[str]:
        lines = self._tab(table)
        return list(lines[0]) if lines else []

    async def write_range(self, table: str, position: int, values: Sequence[Any]) -> Optional[str]:
        lines = self._tab(table)
        line = self._ensure_line(lines, position)
        cells = ["" if v is None else str(v) for v in values]
        line[: len(cells)] = cells
        return f"{quote_tab(table)}!A{position}:{column_letter(max(len(cells), 1))}{position}"

    async def append_rows(self, table: str, rows: Sequence[Sequence[Any]]) -> Optional[str]:
        lines = self._tab(table)
        while lines and _is_blank(lines[-1]):
            lines.pop()
        start = len(lines) + 1
        width = 1
        for row in rows:
            cells = ["" if v is None else str(v) for v in row]
            width = max(width, len(cells))
            lines.append(cells)
        end = len(lines)
        return f"{quote_tab(table)}!A{start}:{column_letter(width)}{end}"

    async def clear_range(self, table: str, position: int, width: Optional[int] = None) -> None:
        lines = self._tab(table)
        if position > len(lines):
            return
        line = lines[position - 1]
        span = len(line) if width is None else min(width, len(line))
        line[:span] = [""] * span

    async def clear_below_header(self, table: str, width: Optional[int] = None) -> None:
        lines = self._tab(table)
        del lines[1:]

    async def insert_row_at(self, table: str, position: int) -> None:
        lines = self._tab(table)
        if position > 1:
            self._ensure_line(lines, position - 1)
        lines.insert(position - 1, [])

    async def create_tab(self, table: str) -> bool:
        if table in self.tabs:
            return False
        self.tabs[table] = []
        return True

    async def delete_tab(self, table: str) -> bool:
        return self.tabs.pop(table, None) is not None

    async def list_tabs(self) -> List[str]:
        return list(self.tabs)
