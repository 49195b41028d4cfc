# Google SheetDB MCP Server
# File: config.py
# Version: v1

"""Configuration loading for the Google SheetDB MCP Server."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os

DEFAULT_API_BASE_URL = "https://sheets.googleapis.com"
DEFAULT_OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_env(
    name: str,
    default: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Parse an int environment variable with clamping and safe fallback."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        value = int(default)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            value = int(default)

    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value

    return value


def _parse_log_level_env(name: str, default: str = "WARNING") -> int:
    raw = (os.getenv(name) or default).strip().upper()
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.WARNING


@dataclass
class SheetDBConfig:
    """Settings needed to reach one spreadsheet through the Sheets API.

    Credentials are either a pre-issued bearer token or a refresh-token
    triple (client id, client secret, refresh token).
    """

    spreadsheet_id: str | None
    sheet_name: str
    access_token: str | None
    client_id: str | None
    client_secret: str | None
    refresh_token: str | None
    mock_mode: bool

    api_base_url: str = DEFAULT_API_BASE_URL
    oauth_token_url: str = DEFAULT_OAUTH_TOKEN_URL
    verify_tls: bool = True
    timeout_seconds: int = 30

    # Tool guardrails
    max_rows_select: int = 500

    # Metadata cache (tab list, headers)
    cache_ttl_seconds: int = 60
    cache_max_entries: int = 128

    log_level: int = logging.WARNING

    @property
    def has_refresh_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    @classmethod
    def from_env(cls) -> "SheetDBConfig":
        """Create configuration from environment variables."""
        return cls(
            spreadsheet_id=os.getenv("SHEETDB_SPREADSHEET_ID"),
            sheet_name=os.getenv("SHEETDB_SHEET_NAME") or "Sheet1",
            access_token=os.getenv("SHEETDB_ACCESS_TOKEN"),
            client_id=os.getenv("SHEETDB_CLIENT_ID"),
            client_secret=os.getenv("SHEETDB_CLIENT_SECRET"),
            refresh_token=os.getenv("SHEETDB_REFRESH_TOKEN"),
            mock_mode=_parse_bool_env("SHEETDB_MOCK_MODE", default=False),
            api_base_url=os.getenv("SHEETDB_API_BASE_URL") or DEFAULT_API_BASE_URL,
            oauth_token_url=os.getenv("SHEETDB_OAUTH_TOKEN_URL") or DEFAULT_OAUTH_TOKEN_URL,
            verify_tls=_parse_bool_env("SHEETDB_VERIFY_TLS", default=True),
            timeout_seconds=_parse_int_env(
                "SHEETDB_TIMEOUT_SECONDS", default=30, min_value=1, max_value=600
            ),
            max_rows_select=_parse_int_env(
                "SHEETDB_MAX_ROWS_SELECT", default=500, min_value=1, max_value=100000
            ),
            cache_ttl_seconds=_parse_int_env(
                "SHEETDB_CACHE_TTL_SECONDS", default=60, min_value=0, max_value=86400
            ),
            cache_max_entries=_parse_int_env(
                "SHEETDB_CACHE_MAX_ENTRIES", default=128, min_value=0, max_value=10000
            ),
            log_level=_parse_log_level_env("SHEETDB_LOG_LEVEL"),
        )
