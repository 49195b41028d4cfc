# Google SheetDB MCP Server
# File: tests/test_config.py
# Version: v1

from __future__ import annotations

import logging

from sheetdb_mcp.config import SheetDBConfig


def test_env_values_are_read(monkeypatch):
    monkeypatch.setenv("SHEETDB_SPREADSHEET_ID", "abc123")
    monkeypatch.setenv("SHEETDB_SHEET_NAME", "Orders")
    monkeypatch.setenv("SHEETDB_MOCK_MODE", "yes")
    monkeypatch.setenv("SHEETDB_VERIFY_TLS", "off")
    monkeypatch.setenv("SHEETDB_LOG_LEVEL", "debug")

    cfg = SheetDBConfig.from_env()
    assert cfg.spreadsheet_id == "abc123"
    assert cfg.sheet_name == "Orders"
    assert cfg.mock_mode is True
    assert cfg.verify_tls is False
    assert cfg.log_level == logging.DEBUG


def test_int_settings_are_clamped_and_fall_back(monkeypatch):
    monkeypatch.setenv("SHEETDB_MAX_ROWS_SELECT", "0")
    monkeypatch.setenv("SHEETDB_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.setenv("SHEETDB_CACHE_MAX_ENTRIES", "999999")

    cfg = SheetDBConfig.from_env()
    assert cfg.max_rows_select == 1
    assert cfg.timeout_seconds == 30
    assert cfg.cache_max_entries == 10000


def test_refresh_credentials_need_all_three(monkeypatch):
    monkeypatch.setenv("SHEETDB_CLIENT_ID", "id")
    monkeypatch.setenv("SHEETDB_CLIENT_SECRET", "secret")
    assert SheetDBConfig.from_env().has_refresh_credentials is False

    monkeypatch.setenv("SHEETDB_REFRESH_TOKEN", "refresh")
    assert SheetDBConfig.from_env().has_refresh_credentials is True


def test_unknown_log_level_defaults_to_warning(monkeypatch):
    monkeypatch.setenv("SHEETDB_LOG_LEVEL", "chatty")
    assert SheetDBConfig.from_env().log_level == logging.WARNING
