# Google SheetDB MCP Server
# File: tests/test_tasks.py
# Version: v1

from __future__ import annotations

import pytest

from sheetdb_mcp.mock_store import MockSheetsStore
from sheetdb_mcp.tools import tasks


class DummyServer:
    def __init__(self):
        self.tools = {}

    def tool(self, name=None, description=None):
        def decorator(fn):
            self.tools[name] = fn
            return fn

        return decorator


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("SHEETDB_MOCK_MODE", "1")
    monkeypatch.setenv("SHEETDB_SHEET_NAME", "Users")
    monkeypatch.setenv("SHEETDB_CACHE_TTL_SECONDS", "0")


@pytest.mark.asyncio
async def test_ping_in_mock_mode(mock_env):
    assert await tasks.ping() == {"ok": True}


@pytest.mark.asyncio
async def test_run_query_select(mock_env):
    out = await tasks.run_query("SELECT name FROM Users WHERE age = '25'")

    assert out["ok"] is True
    assert out["rows"] == [{"name": "Bob"}, {"name": "Dana"}]
    assert out["meta"]["command"] == "select"
    assert out["meta"]["table"] == "Users"
    assert out["meta"]["row_count"] == 2


@pytest.mark.asyncio
async def test_run_query_applies_row_cap(mock_env, monkeypatch):
    monkeypatch.setenv("SHEETDB_MAX_ROWS_SELECT", "2")

    out = await tasks.run_query("SELECT * FROM Users LIMIT 100")
    assert len(out["rows"]) == 2
    assert out["meta"]["requested_limit"] == 100
    assert out["meta"]["effective_limit"] == 2
    assert out["meta"]["cap_applied"] is True

    out = await tasks.run_query("SELECT * FROM Users")
    assert len(out["rows"]) == 2
    assert out["meta"]["cap_applied"] is False


@pytest.mark.asyncio
async def test_run_query_reports_syntax_errors(mock_env):
    out = await tasks.run_query("MERGE INTO Users")
    assert out["ok"] is False
    assert out["error"]["code"] == "UNSUPPORTED_SYNTAX"

    out = await tasks.run_query("SELECT * FROM Users WHERE age > 30")
    assert out["ok"] is False
    assert out["error"]["code"] == "MALFORMED_STATEMENT"
    assert out["error"]["details"]["statement"] == "SELECT * FROM Users WHERE age > 30"


@pytest.mark.asyncio
async def test_run_query_writes_are_visible_across_calls(mock_env):
    out = await tasks.run_query("INSERT INTO Users (id, name, age) VALUES ('5', 'Eve', '41')")
    assert out["ok"] is True
    assert out["meta"]["command"] == "insertOne"

    out = await tasks.run_query("UPDATE Users SET age = 42 WHERE name = 'Eve'")
    assert out["result"]["updated_count"] == 1

    out = await tasks.run_query("SELECT name, age FROM Users WHERE id = 5")
    assert out["rows"] == [{"name": "Eve", "age": "42"}]


@pytest.mark.asyncio
async def test_run_query_metadata_statements(mock_env):
    out = await tasks.run_query("GET TABLES")
    assert out["ok"] is True
    assert out["tables"] == ["Users"]
    assert out["meta"] == {"command": "getTables"}

    out = await tasks.run_query("SHOW TABLE DETAIL")
    assert out["columns"] == ["id", "name", "age", "signup_date"]


@pytest.mark.asyncio
async def test_run_query_unknown_tab_is_backend_error(mock_env):
    out = await tasks.run_query("SELECT * FROM Nope", table="Nope")
    assert out["ok"] is False
    assert out["error"]["code"] == "BACKEND_ERROR"


@pytest.mark.asyncio
async def test_select_rows_structured(mock_env):
    out = await tasks.select_rows(
        where={"age": {"op": ">", "value": 26}},
        order_by=[{"column": "age", "direction": "desc"}],
        select_fields=["name", "_row"],
    )
    assert out["ok"] is True
    assert out["rows"] == [{"name": "Charlie", "_row": 4}, {"name": "Alice", "_row": 2}]
    assert out["meta"]["effective_limit"] == 500
    assert out["meta"]["cap_applied"] is False


@pytest.mark.asyncio
async def test_select_rows_rejects_negative_offset(mock_env):
    out = await tasks.select_rows(offset=-1)
    assert out["ok"] is False
    assert out["error"]["code"] == "INVALID_ARGUMENT"


@pytest.mark.asyncio
async def test_insert_update_delete_rows(mock_env):
    out = await tasks.insert_rows([{"id": "5", "name": "Eve"}], required=["id"])
    assert out["ok"] is True
    assert out["inserted_count"] == 1

    out = await tasks.update_rows(where={"name": "Eve"}, new_data={"age": 33})
    assert out["updated_rows"] == [{"row": 6, "new_data": ["5", "Eve", 33, ""]}]

    out = await tasks.delete_rows(where={"age": {"op": ">=", "value": 33}})
    assert out["deleted_rows"] == [4, 6]


@pytest.mark.asyncio
async def test_missing_arguments_are_reported(mock_env):
    out = await tasks.update_rows(where={"id": "1"}, new_data={})
    assert out["ok"] is False
    assert out["error"]["code"] == "MISSING_ARGUMENT"

    out = await tasks.insert_rows([{"name": "Eve"}], required=["id"])
    assert out["error"]["code"] == "MISSING_ARGUMENT"
    assert out["error"]["details"] == {"missing": ["id"]}


@pytest.mark.asyncio
async def test_table_lifecycle(mock_env):
    out = await tasks.create_table(["id", "total"], table="Orders")
    assert out["ok"] is True

    assert (await tasks.get_tables())["tables"] == ["Users", "Orders"]
    assert (await tasks.show_table_detail("Orders"))["columns"] == ["id", "total"]

    out = await tasks.truncate_table(table="Users")
    assert out["headers"] == ["id", "name", "age", "signup_date"]
    assert (await tasks.select_rows())["rows"] == []

    out = await tasks.drop_table(table="Orders")
    assert out["ok"] is True
    out = await tasks.drop_table(table="Orders")
    assert out["ok"] is False
    assert out["message"] == "Sheet not found"


@pytest.mark.asyncio
async def test_metadata_cache_hits_and_invalidation(mock_env, monkeypatch):
    monkeypatch.setenv("SHEETDB_CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("SHEETDB_CACHE_MAX_ENTRIES", "32")

    await tasks.get_tables()
    await tasks.get_tables()
    diag = await tasks.diagnostics()
    assert diag["meta"]["cache"]["enabled"] is True
    assert diag["meta"]["cache"]["hits"] >= 1

    await tasks.run_query("CREATE TABLE Orders (id)", table="Orders")
    assert (await tasks.get_tables())["tables"] == ["Users", "Orders"]


@pytest.mark.asyncio
async def test_store_factory_can_be_replaced(monkeypatch):
    store = MockSheetsStore(tabs={"Sheet1": [["sku", "qty"], ["A-1", "3"]]})
    monkeypatch.setattr(tasks, "_make_store", lambda: store)

    out = await tasks.select_rows()
    assert out["rows"] == [{"sku": "A-1", "qty": "3", "_row": 2}]
    assert out["meta"]["table"] == "Sheet1"


@pytest.mark.asyncio
async def test_diagnostics_in_mock_mode(mock_env):
    diag = await tasks.diagnostics()

    assert diag["ok"] is True
    assert diag["mock_mode"] is True
    assert [c["name"] for c in diag["checks"]] == ["client_init", "ping", "list_tabs"]
    assert all(c["ok"] for c in diag["checks"])


@pytest.mark.asyncio
async def test_diagnostics_without_spreadsheet_id():
    diag = await tasks.diagnostics()

    assert diag["ok"] is False
    ping = next(c for c in diag["checks"] if c["name"] == "ping")
    assert ping["error"]["code"] == "CONFIG_ERROR"


@pytest.mark.asyncio
async def test_config_info_does_not_leak_secrets(monkeypatch):
    monkeypatch.setenv("SHEETDB_SPREADSHEET_ID", "sheet-123")
    monkeypatch.setenv("SHEETDB_ACCESS_TOKEN", "ya29.super-secret")
    monkeypatch.setenv("SHEETDB_CLIENT_SECRET", "client-secret-value")

    info = await tasks.get_config_info()
    assert info["spreadsheet_id"] == "sheet-123"
    assert info["oauth"]["access_token_configured"] is True
    assert "super-secret" not in str(info)
    assert "client-secret-value" not in str(info)


def test_register_tools_exposes_every_operation():
    server = DummyServer()
    tasks.register_tools(server)

    assert set(server.tools) == {
        "sheetdb_ping",
        "sheetdb_query",
        "sheetdb_select",
        "sheetdb_insert",
        "sheetdb_update",
        "sheetdb_delete",
        "sheetdb_create_table",
        "sheetdb_drop_table",
        "sheetdb_truncate_table",
        "sheetdb_get_tables",
        "sheetdb_show_table_detail",
        "sheetdb_get_config_info",
        "sheetdb_diagnostics",
    }


@pytest.mark.asyncio
async def test_registered_query_tool_runs(mock_env):
    server = DummyServer()
    tasks.register_tools(server)

    out = await server.tools["sheetdb_query"](sql="SELECT id FROM Users ORDER BY id DESC LIMIT 1")
    assert out["rows"] == [{"id": "4"}]


def test_register_tools_rejects_non_server():
    with pytest.raises(ValueError):
        tasks.register_tools(object())


@pytest.mark.asyncio
async def test_select_rows_rejects_order_by_without_column(mock_env):
    out = await tasks.select_rows(order_by=[{"direction": "desc"}])
    assert out["ok"] is False
    assert out["error"]["code"] == "INVALID_ARGUMENT"
    assert "column" in out["error"]["message"]
