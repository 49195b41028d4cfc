# Google SheetDB MCP Server
# File: tests/conftest.py
# Version: v1

from __future__ import annotations

import os

import pytest

from sheetdb_mcp.mock_store import MockSheetsStore
from sheetdb_mcp.sheetdb import SheetDB
from sheetdb_mcp.tools import tasks


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Each test starts without SHEETDB_* settings, cache or mock data."""
    for name in list(os.environ):
        if name.startswith("SHEETDB_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(tasks, "_CACHE", None)
    monkeypatch.setattr(tasks, "_CACHE_SIGNATURE", None)
    tasks.reset_mock_store()
    yield
    tasks.reset_mock_store()


@pytest.fixture
def store() -> MockSheetsStore:
    return MockSheetsStore(seed_demo=True)


@pytest.fixture
def db(store) -> SheetDB:
    return SheetDB(store, "Users")
