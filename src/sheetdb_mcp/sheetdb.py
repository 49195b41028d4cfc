# Google SheetDB MCP Server
# File: sheetdb.py
# Version: v1

"""Table operations over one tab of a row store.

Each operation reads at most once, evaluates filters/sorting/projection in
memory and then issues its writes in order. There is no isolation between
two operations on the same tab: ``update`` and ``delete`` address rows by
position, so a concurrent writer that shifts rows between the read and the
write makes the write land on a different row. Callers that need safety
must keep to a single writer per tab.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union, assert_never

from .commands import (
    Command,
    CreateTable,
    Delete,
    DropTable,
    GetTables,
    InsertMany,
    InsertOne,
    Select,
    ShowTableDetail,
    TruncateTable,
    Update,
)
from .errors import MissingRequiredArgument
from .models import Filter, SelectOptions, normalize_filter
from .query import filter_rows, project, sort_rows, translate
from .store import RowStore

logger = logging.getLogger(__name__)


def _check_required(payload: Mapping[str, Any], required: Optional[Iterable[str]], what: str) -> None:
    if not required:
        return
    missing = [key for key in required if key not in payload]
    if missing:
        raise MissingRequiredArgument(
            f"{what} is missing required key(s): {', '.join(missing)}.",
            details={"missing": missing},
        )


def _cell(value: Any) -> Any:
    return "" if value is None else value


class SheetDB:
    """SQL-ish table facade bound to a single tab."""

    def __init__(self, store: RowStore, table: str) -> None:
        self.store = store
        self.table = table

    # ------------------------------------------------------------------
    # Schema / tab lifecycle
    # ------------------------------------------------------------------

    async def create_table(self, columns: Sequence[str]) -> Dict[str, Any]:
        if not columns or isinstance(columns, str):
            raise MissingRequiredArgument("You must pass a non-empty list of column names.")

        columns = [str(c) for c in columns]
        if await self.store.create_tab(self.table):
            logger.info("Sheet %r created.", self.table)
        else:
            logger.info("Sheet %r already exists.", self.table)

        await self.store.write_range(self.table, 1, columns)
        return {"success": True, "message": "Table created with headers.", "columns": columns}

    async def drop_table(self) -> Dict[str, Any]:
        if not await self.store.delete_tab(self.table):
            return {"success": False, "message": "Sheet not found"}
        logger.info("Sheet %r dropped.", self.table)
        return {"success": True, "message": f'Sheet "{self.table}" dropped.'}

    async def truncate_table(self) -> Dict[str, Any]:
        headers = await self.store.read_header(self.table)
        await self.store.clear_below_header(self.table, width=len(headers) or None)
        return {
            "success": True,
            "message": f'Table "{self.table}" truncated (data cleared, headers kept).',
            "headers": headers,
        }

    async def get_tables(self) -> Dict[str, Any]:
        return {"success": True, "tables": await self.store.list_tabs()}

    async def show_table_detail(self) -> Dict[str, Any]:
        return {
            "success": True,
            "sheet_name": self.table,
            "columns": await self.store.read_header(self.table),
        }

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    async def insert_one(
        self,
        obj: Mapping[str, Any],
        required: Optional[Iterable[str]] = None,
        position: Optional[int] = None,
    ) -> Dict[str, Any]:
        if not obj:
            raise MissingRequiredArgument("insert_one() needs a non-empty row mapping.")
        _check_required(obj, required, "Inserted row")

        headers = await self.store.read_header(self.table)
        line = [_cell(obj.get(h)) for h in headers]

        if position is not None:
            if position < 2:
                raise ValueError("position must be >= 2 (row 1 holds the header)")
            await self.store.insert_row_at(self.table, position)
            updated_range = await self.store.write_range(self.table, position, line)
        else:
            updated_range = await self.store.append_rows(self.table, [line])

        return {"success": True, "updated_range": updated_range, "inserted_data": dict(obj)}

    async def insert_many(
        self,
        objs: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
        required: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        batch = [objs] if isinstance(objs, Mapping) else list(objs)
        if not batch:
            raise MissingRequiredArgument("insert_many() needs at least one row.")
        for idx, obj in enumerate(batch):
            _check_required(obj, required, f"Row {idx}")

        headers = await self.store.read_header(self.table)
        lines = [[_cell(obj.get(h)) for h in headers] for obj in batch]
        updated_range = await self.store.append_rows(self.table, lines)

        return {
            "success": True,
            "inserted_count": len(lines),
            "updated_range": updated_range,
            "inserted_data": [dict(o) for o in batch],
        }

    async def select(
        self,
        where: Optional[Mapping[str, Any]] = None,
        options: Optional[SelectOptions] = None,
    ) -> List[Dict[str, Any]]:
        options = options or SelectOptions()
        rows = filter_rows(await self.store.read_all(self.table), where)

        if options.order_by:
            rows = sort_rows(rows, options.order_by)
        if options.offset:
            rows = rows[options.offset:]
        if options.limit is not None:
            rows = rows[: options.limit]

        if options.select_fields:
            return project(rows, options.select_fields)
        return [row.to_dict() for row in rows]

    async def update(
        self,
        where: Optional[Mapping[str, Any]],
        new_data: Mapping[str, Any],
        required: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        if not new_data:
            raise MissingRequiredArgument("update() needs at least one column to set.")
        _check_required(new_data, required, "Update payload")

        conditions: Filter = normalize_filter(where)
        snapshot = await self.store.read_all(self.table)
        headers = list(snapshot[0]) if snapshot else []
        matching = filter_rows(snapshot, conditions)

        updated: List[Dict[str, Any]] = []
        for row in matching:
            line = [
                new_data[h] if new_data.get(h) is not None else row.get(h, "")
                for h in headers
            ]
            await self.store.write_range(self.table, row.position, line)
            updated.append({"row": row.position, "new_data": line})

        logger.debug("Updated %d row(s) in %r.", len(updated), self.table)
        return {"success": True, "updated_count": len(updated), "updated_rows": updated}

    async def delete(self, where: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        snapshot = await self.store.read_all(self.table)
        width = len(snapshot[0]) if snapshot else None
        matching = filter_rows(snapshot, where)

        deleted: List[int] = []
        for row in matching:
            await self.store.clear_range(self.table, row.position, width=width)
            deleted.append(row.position)

        logger.debug("Cleared %d row(s) in %r.", len(deleted), self.table)
        return {"success": True, "deleted_count": len(deleted), "deleted_rows": deleted}

    # ------------------------------------------------------------------
    # Command dispatch
    # ------------------------------------------------------------------

    async def execute(self, command: Command) -> Any:
        match command:
            case CreateTable(columns=columns):
                return await self.create_table(columns)
            case DropTable():
                return await self.drop_table()
            case TruncateTable():
                return await self.truncate_table()
            case InsertOne(obj=obj):
                return await self.insert_one(obj)
            case InsertMany(rows=rows):
                return await self.insert_many(rows)
            case Select(where=where, options=options):
                return await self.select(where, options)
            case Update(where=where, new_data=new_data):
                return await self.update(where, new_data)
            case Delete(where=where):
                return await self.delete(where)
            case GetTables():
                return await self.get_tables()
            case ShowTableDetail():
                return await self.show_table_detail()
            case _:
                assert_never(command)

    async def query(self, text: str) -> Any:
        """Translate one statement and run it against the bound tab."""
        return await self.execute(translate(text))
