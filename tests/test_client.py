# Google SheetDB MCP Server
# File: tests/test_client.py
# Version: v1

from __future__ import annotations

import json

import httpx
import pytest

from sheetdb_mcp.auth import OAuthClient
from sheetdb_mcp.client import SheetsClient
from sheetdb_mcp.config import SheetDBConfig
from sheetdb_mcp.errors import StoreError
from sheetdb_mcp.models import Row
from sheetdb_mcp.store import a1_row_range, column_letter, quote_tab, rows_from_values

SHEETS = {"sheets": [{"properties": {"sheetId": 0, "title": "Users"}}, {"properties": {"sheetId": 7, "title": "Orders"}}]}


def _config(spreadsheet_id: str | None = "SPREAD") -> SheetDBConfig:
    return SheetDBConfig(
        spreadsheet_id=spreadsheet_id,
        sheet_name="Users",
        access_token="tok",
        client_id=None,
        client_secret=None,
        refresh_token=None,
        mock_mode=False,
    )


class FakeSheetsApi:
    """Records requests and answers them from a small route table."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for (method, suffix), response in self.routes.items():
            if request.method == method and path.endswith(suffix):
                if isinstance(response, httpx.Response):
                    return response
                return httpx.Response(200, json=response)
        return httpx.Response(200, json={})

    def bodies(self, method: str):
        return [json.loads(r.content) for r in self.requests if r.method == method and r.content]


def _client(api: FakeSheetsApi, cfg: SheetDBConfig | None = None) -> SheetsClient:
    cfg = cfg or _config()
    return SheetsClient(config=cfg, oauth=OAuthClient(config=cfg), transport=httpx.MockTransport(api))


@pytest.mark.asyncio
async def test_read_all_builds_rows_and_sends_bearer_token():
    api = FakeSheetsApi(
        {("GET", "/values/'Users'"): {"values": [["id", "name"], ["1", "Alice"], [], ["3"]]}}
    )
    rows = await _client(api).read_all("Users")

    assert rows == [Row({"id": "1", "name": "Alice"}, 2), Row({"id": "3", "name": ""}, 4)]
    request = api.requests[0]
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.url.path == "/v4/spreadsheets/SPREAD/values/'Users'"


@pytest.mark.asyncio
async def test_read_header_of_empty_tab():
    api = FakeSheetsApi({("GET", "/values/'Users'!1:1"): {}})
    assert await _client(api).read_header("Users") == []


@pytest.mark.asyncio
async def test_write_range_puts_user_entered_row():
    api = FakeSheetsApi({("PUT", "/values/'Users'!A3:C3"): {"updatedRange": "Users!A3:C3"}})
    out = await _client(api).write_range("Users", 3, ["2", "Bob", ""])

    assert out == "Users!A3:C3"
    request = api.requests[0]
    assert request.url.params["valueInputOption"] == "USER_ENTERED"
    assert api.bodies("PUT") == [
        {"range": "'Users'!A3:C3", "majorDimension": "ROWS", "values": [["2", "Bob", ""]]}
    ]


@pytest.mark.asyncio
async def test_append_rows_returns_updated_range():
    api = FakeSheetsApi(
        {("POST", "/values/'Users':append"): {"updates": {"updatedRange": "Users!A6:B7"}}}
    )
    out = await _client(api).append_rows("Users", [["5", "Eve"], ["6", "Finn"]])

    assert out == "Users!A6:B7"
    assert api.bodies("POST") == [{"majorDimension": "ROWS", "values": [["5", "Eve"], ["6", "Finn"]]}]


@pytest.mark.asyncio
async def test_clear_range_reads_header_width_when_not_given():
    api = FakeSheetsApi({("GET", "/values/'Users'!1:1"): {"values": [["id", "name", "age", "signup_date"]]}})
    await _client(api).clear_range("Users", 3)

    assert [r.method for r in api.requests] == ["GET", "POST"]
    assert api.requests[1].url.path.endswith("/values/'Users'!A3:D3:clear")


@pytest.mark.asyncio
async def test_clear_below_header_keeps_row_one():
    api = FakeSheetsApi()
    await _client(api).clear_below_header("Users", width=2)

    assert len(api.requests) == 1
    assert api.requests[0].url.path.endswith("/values/'Users'!A2:B:clear")


@pytest.mark.asyncio
async def test_tab_lifecycle_uses_batch_update():
    api = FakeSheetsApi({("GET", "/spreadsheets/SPREAD"): SHEETS})
    client = _client(api)

    assert await client.list_tabs() == ["Users", "Orders"]
    assert await client.create_tab("Users") is False
    assert await client.create_tab("Archive") is True
    assert await client.delete_tab("Missing") is False
    assert await client.delete_tab("Orders") is True
    await client.insert_row_at("Users", 3)

    batch = [r for r in api.requests if r.url.path.endswith(":batchUpdate")]
    assert [json.loads(r.content) for r in batch] == [
        {"requests": [{"addSheet": {"properties": {"title": "Archive"}}}]},
        {"requests": [{"deleteSheet": {"sheetId": 7}}]},
        {
            "requests": [
                {
                    "insertDimension": {
                        "range": {"sheetId": 0, "dimension": "ROWS", "startIndex": 2, "endIndex": 3},
                        "inheritFromBefore": True,
                    }
                }
            ]
        },
    ]


@pytest.mark.asyncio
async def test_insert_row_in_missing_tab_fails():
    api = FakeSheetsApi({("GET", "/spreadsheets/SPREAD"): SHEETS})
    with pytest.raises(StoreError):
        await _client(api).insert_row_at("Missing", 2)


@pytest.mark.asyncio
async def test_http_error_becomes_store_error_with_status():
    api = FakeSheetsApi(
        {("GET", "/values/'Users'"): httpx.Response(403, text="The caller does not have permission")}
    )
    with pytest.raises(StoreError) as excinfo:
        await _client(api).read_all("Users")

    assert excinfo.value.details == {"status": 403}
    assert "does not have permission" in str(excinfo.value)


@pytest.mark.asyncio
async def test_transport_error_becomes_store_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    cfg = _config()
    client = SheetsClient(config=cfg, oauth=OAuthClient(config=cfg), transport=httpx.MockTransport(handler))
    with pytest.raises(StoreError) as excinfo:
        await client.list_tabs()
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_missing_spreadsheet_id():
    api = FakeSheetsApi()
    client = _client(api, _config(spreadsheet_id=None))

    assert await client.ping() is False
    with pytest.raises(StoreError):
        await client.read_all("Users")
    assert api.requests == []


def test_a1_helpers():
    assert [column_letter(i) for i in (1, 26, 27, 52, 53, 702, 703)] == [
        "A", "Z", "AA", "AZ", "BA", "ZZ", "AAA",
    ]
    assert quote_tab("Bob's tab") == "'Bob''s tab'"
    assert a1_row_range("Users", 4, 0) == "'Users'!A4:A4"
    with pytest.raises(ValueError):
        column_letter(0)


def test_rows_from_values_skips_blank_lines_but_keeps_positions():
    rows = rows_from_values([["a", "b"], ["", ""], ["1"], ["2", "x", "extra"]])
    assert [(r.position, dict(r)) for r in rows] == [
        (3, {"a": "1", "b": ""}),
        (4, {"a": "2", "b": "x"}),
    ]
    assert rows_from_values([]) == []
