# Google SheetDB MCP Server
# File: tools/tasks.py
# Version: v1
#
# NOTE: This module is the single place where table operations are exposed
# as MCP tools. The transports (stdio / http) simply call
# `register_tools(server)` to wire these up.

from __future__ import annotations

import dataclasses
import functools
import logging
import os
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..auth import OAuthClient
from ..cache import MetadataCache
from ..client import SheetsClient
from ..commands import CreateTable, DropTable, GetTables, Select, ShowTableDetail, TruncateTable
from ..config import SheetDBConfig
from ..errors import SheetDBError
from ..mock_store import MockSheetsStore
from ..models import make_select_options
from ..query import translate
from ..sheetdb import SheetDB
from ..store import RowStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers (env flags, store factory, caps, error envelope)
# ---------------------------------------------------------------------------


def _env_flag(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _make_error(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Small, LLM-friendly error shape."""
    err: Dict[str, Any] = {"code": code, "message": message}
    if details:
        err["details"] = details
    return err


def _rejects_errors(fn: Callable[..., Awaitable[Dict[str, Any]]]):
    """Turn SheetDB and argument errors into ``{"ok": False, "error": ...}``."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Dict[str, Any]:
        try:
            return await fn(*args, **kwargs)
        except SheetDBError as exc:
            logger.warning("%s rejected: %s", fn.__name__, exc.message)
            return {"ok": False, "error": _make_error(exc.code, exc.message, exc.details)}
        except ValueError as exc:
            logger.warning("%s rejected: %s", fn.__name__, exc)
            return {"ok": False, "error": _make_error("INVALID_ARGUMENT", str(exc))}

    return wrapper


def _cap_limit(value: Optional[int], cap: int) -> tuple[int, bool]:
    """Clamp a requested row limit to [0, cap]. Returns (effective, cap_applied)."""
    if value is None:
        return cap, False
    try:
        v = int(value)
    except (TypeError, ValueError):
        return cap, True

    if v < 0:
        return 0, True
    if cap > 0 and v > cap:
        return cap, True
    return v, False


_CACHE: MetadataCache | None = None
_CACHE_SIGNATURE: tuple[int, int] | None = None

_MOCK_STORE: MockSheetsStore | None = None


def _get_cache(cfg: SheetDBConfig) -> MetadataCache:
    """Lazily create (or re-create) the global metadata cache based on config."""
    global _CACHE, _CACHE_SIGNATURE

    signature = (int(cfg.cache_ttl_seconds), int(cfg.cache_max_entries))
    if _CACHE is None or _CACHE_SIGNATURE != signature:
        _CACHE = MetadataCache(ttl_seconds=signature[0], max_entries=signature[1])
        _CACHE_SIGNATURE = signature
    return _CACHE


def reset_mock_store() -> None:
    """Forget the in-memory mock spreadsheet (next call re-seeds the demo tab)."""
    global _MOCK_STORE
    _MOCK_STORE = None


def _make_store(cfg: Optional[SheetDBConfig] = None) -> RowStore:
    """Create a row store from environment variables.

    If SHEETDB_MOCK_MODE is truthy, a process-wide in-memory store is
    returned instead of the Google Sheets client, so writes stay visible
    across tool calls.

    Note: Callers should invoke this with *no arguments* to keep unit tests
    monkeypatch-friendly (tests replace _make_store with a no-arg lambda).
    """
    global _MOCK_STORE
    cfg = cfg or SheetDBConfig.from_env()

    if cfg.mock_mode or _env_flag("SHEETDB_MOCK_MODE", False):
        if _MOCK_STORE is None:
            _MOCK_STORE = MockSheetsStore(seed_demo=True)
        return _MOCK_STORE

    oauth = OAuthClient(config=cfg)
    return SheetsClient(config=cfg, oauth=oauth)


def _make_db(table: Optional[str], cfg: SheetDBConfig) -> SheetDB:
    return SheetDB(_make_store(), table or cfg.sheet_name)


def _cache_key(namespace: str, cfg: SheetDBConfig, *parts: Any) -> tuple:
    return (namespace, id(_make_store), cfg.spreadsheet_id, cfg.mock_mode, *parts)


def _invalidate_metadata(cfg: SheetDBConfig, table: str, tabs_changed: bool) -> None:
    cache = _get_cache(cfg)
    cache.invalidate("header", table=table)
    if tabs_changed:
        cache.invalidate("tabs")


# ---------------------------------------------------------------------------
# Core async tasks (library-style)
# ---------------------------------------------------------------------------


async def ping() -> Dict[str, Any]:
    store = _make_store()
    ok = await store.ping()
    return {"ok": bool(ok)}


@_rejects_errors
async def get_tables() -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    cache = _get_cache(cfg)
    cache_key = _cache_key("tabs", cfg)

    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    db = _make_db(None, cfg)
    result = await db.get_tables()
    out = {"ok": True, "tables": result["tables"]}
    cache.set(cache_key, out)
    return out


@_rejects_errors
async def show_table_detail(table: Optional[str] = None) -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    db = _make_db(table, cfg)
    cache = _get_cache(cfg)
    cache_key = _cache_key("header", cfg, db.table)

    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    result = await db.show_table_detail()
    out = {"ok": True, "sheet_name": result["sheet_name"], "columns": result["columns"]}
    cache.set(cache_key, out)
    return out


@_rejects_errors
async def select_rows(
    table: Optional[str] = None,
    where: Optional[Dict[str, Any]] = None,
    order_by: Optional[Any] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    select_fields: Optional[List[str]] = None,
) -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    effective_limit, cap_applied = _cap_limit(limit, cfg.max_rows_select)
    options = make_select_options(
        order_by=order_by,
        limit=effective_limit,
        offset=offset,
        select_fields=select_fields,
    )

    db = _make_db(table, cfg)
    rows = await db.select(where, options)

    return {
        "ok": True,
        "rows": rows,
        "meta": {
            "table": db.table,
            "row_count": len(rows),
            "requested_limit": limit,
            "effective_limit": effective_limit,
            "cap_limit": cfg.max_rows_select,
            "cap_applied": bool(cap_applied),
            "offset": offset,
        },
    }


@_rejects_errors
async def insert_rows(
    rows: List[Dict[str, Any]],
    table: Optional[str] = None,
    required: Optional[List[str]] = None,
) -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    db = _make_db(table, cfg)
    result = await db.insert_many(rows, required=required)
    return {"ok": True, **result}


@_rejects_errors
async def update_rows(
    where: Dict[str, Any],
    new_data: Dict[str, Any],
    table: Optional[str] = None,
    required: Optional[List[str]] = None,
) -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    db = _make_db(table, cfg)
    result = await db.update(where, new_data, required=required)
    return {"ok": True, **result}


@_rejects_errors
async def delete_rows(where: Dict[str, Any], table: Optional[str] = None) -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    db = _make_db(table, cfg)
    result = await db.delete(where)
    return {"ok": True, **result}


@_rejects_errors
async def create_table(columns: List[str], table: Optional[str] = None) -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    db = _make_db(table, cfg)
    result = await db.create_table(columns)
    _invalidate_metadata(cfg, db.table, tabs_changed=True)
    return {"ok": True, **result}


@_rejects_errors
async def drop_table(table: Optional[str] = None) -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    db = _make_db(table, cfg)
    result = await db.drop_table()
    _invalidate_metadata(cfg, db.table, tabs_changed=True)
    return {"ok": bool(result["success"]), **result}


@_rejects_errors
async def truncate_table(table: Optional[str] = None) -> Dict[str, Any]:
    cfg = SheetDBConfig.from_env()
    db = _make_db(table, cfg)
    result = await db.truncate_table()
    _invalidate_metadata(cfg, db.table, tabs_changed=False)
    return {"ok": True, **result}


@_rejects_errors
async def run_query(sql: str, table: Optional[str] = None) -> Dict[str, Any]:
    """Translate one SQL-like statement and execute it against ``table``."""
    cfg = SheetDBConfig.from_env()
    command = translate(sql)
    meta: Dict[str, Any] = {"command": command.kind}

    if isinstance(command, GetTables):
        return {**await get_tables(), "meta": meta}
    if isinstance(command, ShowTableDetail):
        return {**await show_table_detail(table), "meta": meta}

    db = _make_db(table, cfg)
    meta["table"] = db.table

    if isinstance(command, Select):
        requested = command.options.limit
        effective_limit, cap_applied = _cap_limit(requested, cfg.max_rows_select)
        options = dataclasses.replace(command.options, limit=effective_limit)
        command = dataclasses.replace(command, options=options)
        meta.update(
            {
                "requested_limit": requested,
                "effective_limit": effective_limit,
                "cap_applied": bool(cap_applied),
            }
        )

    result = await db.execute(command)

    if isinstance(command, (CreateTable, DropTable)):
        _invalidate_metadata(cfg, db.table, tabs_changed=True)
    elif isinstance(command, TruncateTable):
        _invalidate_metadata(cfg, db.table, tabs_changed=False)

    if isinstance(result, list):
        meta["row_count"] = len(result)
        return {"ok": True, "rows": result, "meta": meta}

    ok = bool(result.get("success", True)) if isinstance(result, dict) else True
    return {"ok": ok, "result": result, "meta": meta}


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def _collect_config_info() -> Dict[str, Any]:
    """Redacted snapshot of the spreadsheet / OAuth configuration."""
    cfg = SheetDBConfig.from_env()
    return {
        "spreadsheet_id": cfg.spreadsheet_id,
        "default_table": cfg.sheet_name,
        "api_base_url": cfg.api_base_url,
        "mock_mode": bool(cfg.mock_mode),
        "verify_tls": bool(cfg.verify_tls),
        "timeout_seconds": cfg.timeout_seconds,
        "oauth": {
            "access_token_configured": bool(cfg.access_token),
            "refresh_credentials_configured": cfg.has_refresh_credentials,
            "token_url": cfg.oauth_token_url,
        },
        "limits": {"max_rows_select": cfg.max_rows_select},
        "cache_config": {
            "ttl_seconds": cfg.cache_ttl_seconds,
            "max_entries": cfg.cache_max_entries,
        },
    }


async def get_config_info() -> Dict[str, Any]:
    return _collect_config_info()


def _elapsed_ms(t0: float) -> int:
    return int((time.time() - t0) * 1000)


async def diagnostics() -> Dict[str, Any]:
    started = time.time()
    cfg = SheetDBConfig.from_env()
    config_info = _collect_config_info()

    cache = _get_cache(cfg)
    cache.purge_expired()

    checks: List[Dict[str, Any]] = []
    overall_ok = True

    t0 = time.time()
    try:
        store = _make_store()
        checks.append({"name": "client_init", "ok": True, "error": None, "elapsed_ms": _elapsed_ms(t0)})
    except Exception as exc:  # pragma: no cover
        checks.append(
            {
                "name": "client_init",
                "ok": False,
                "error": _make_error("CONFIG_ERROR", str(exc)),
                "elapsed_ms": _elapsed_ms(t0),
            }
        )
        return {
            "ok": False,
            "mock_mode": config_info["mock_mode"],
            "config": config_info,
            "checks": checks,
            "meta": {"elapsed_ms": _elapsed_ms(started), "cache": cache.stats()},
        }

    t0 = time.time()
    try:
        if await store.ping():
            checks.append({"name": "ping", "ok": True, "error": None, "elapsed_ms": _elapsed_ms(t0)})
        else:
            overall_ok = False
            checks.append(
                {
                    "name": "ping",
                    "ok": False,
                    "error": _make_error("CONFIG_ERROR", "SHEETDB_SPREADSHEET_ID is not set."),
                    "elapsed_ms": _elapsed_ms(t0),
                }
            )
    except Exception as exc:
        overall_ok = False
        checks.append(
            {
                "name": "ping",
                "ok": False,
                "error": _make_error("BACKEND_ERROR", str(exc)),
                "elapsed_ms": _elapsed_ms(t0),
            }
        )

    t0 = time.time()
    try:
        tabs = await store.list_tabs()
        checks.append(
            {
                "name": "list_tabs",
                "ok": True,
                "count": len(tabs),
                "error": None,
                "elapsed_ms": _elapsed_ms(t0),
            }
        )
    except Exception as exc:
        overall_ok = False
        code = exc.code if isinstance(exc, SheetDBError) else "BACKEND_ERROR"
        checks.append(
            {
                "name": "list_tabs",
                "ok": False,
                "error": _make_error(code, str(exc)),
                "elapsed_ms": _elapsed_ms(t0),
            }
        )

    return {
        "ok": overall_ok,
        "mock_mode": config_info["mock_mode"],
        "config": config_info,
        "checks": checks,
        "meta": {"elapsed_ms": _elapsed_ms(started), "cache": cache.stats()},
    }


# ---------------------------------------------------------------------------
# MCP tool registration
# ---------------------------------------------------------------------------


def register_tools(server: Any) -> None:
    """Register MCP tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(name="sheetdb_ping", description="Basic health check for the SheetDB MCP server.")
    async def mcp_ping() -> Dict[str, Any]:
        return await ping()

    @server.tool(
        name="sheetdb_query",
        description=(
            "Run one SQL-like statement (CREATE/DROP/TRUNCATE TABLE, INSERT, SELECT, UPDATE, "
            "DELETE, GET TABLES, SHOW TABLE DETAIL) against a spreadsheet tab. "
            "WHERE supports col = 'value' joined with AND."
        ),
    )
    async def mcp_query(sql: str, table: Optional[str] = None) -> Dict[str, Any]:
        return await run_query(sql=sql, table=table)

    @server.tool(
        name="sheetdb_select",
        description=(
            "Select rows with a structured filter ({col: value} or {col: {op, value}}, "
            "op in =, !=, >, <, >=, <=, contains), ordering, paging and projection."
        ),
    )
    async def mcp_select(
        table: Optional[str] = None,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[List[Dict[str, str]]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        select_fields: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        return await select_rows(
            table=table,
            where=where,
            order_by=order_by,
            limit=limit,
            offset=offset,
            select_fields=select_fields,
        )

    @server.tool(name="sheetdb_insert", description="Append one or more rows (header-keyed objects) to a tab.")
    async def mcp_insert(
        rows: List[Dict[str, Any]],
        table: Optional[str] = None,
        required: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        return await insert_rows(rows=rows, table=table, required=required)

    @server.tool(name="sheetdb_update", description="Overwrite columns of every row matching a structured filter.")
    async def mcp_update(
        where: Dict[str, Any],
        new_data: Dict[str, Any],
        table: Optional[str] = None,
        required: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        return await update_rows(where=where, new_data=new_data, table=table, required=required)

    @server.tool(name="sheetdb_delete", description="Clear every row matching a structured filter.")
    async def mcp_delete(where: Dict[str, Any], table: Optional[str] = None) -> Dict[str, Any]:
        return await delete_rows(where=where, table=table)

    @server.tool(name="sheetdb_create_table", description="Create a tab (if missing) and write its header row.")
    async def mcp_create_table(columns: List[str], table: Optional[str] = None) -> Dict[str, Any]:
        return await create_table(columns=columns, table=table)

    @server.tool(name="sheetdb_drop_table", description="Delete a tab from the spreadsheet.")
    async def mcp_drop_table(table: Optional[str] = None) -> Dict[str, Any]:
        return await drop_table(table=table)

    @server.tool(name="sheetdb_truncate_table", description="Clear all data rows of a tab, keeping the header.")
    async def mcp_truncate_table(table: Optional[str] = None) -> Dict[str, Any]:
        return await truncate_table(table=table)

    @server.tool(name="sheetdb_get_tables", description="List the tabs of the configured spreadsheet.")
    async def mcp_get_tables() -> Dict[str, Any]:
        return await get_tables()

    @server.tool(name="sheetdb_show_table_detail", description="Show the header columns of a tab.")
    async def mcp_show_table_detail(table: Optional[str] = None) -> Dict[str, Any]:
        return await show_table_detail(table=table)

    @server.tool(
        name="sheetdb_get_config_info",
        description="Return redacted spreadsheet / OAuth configuration (no secrets).",
    )
    async def mcp_get_config_info() -> Dict[str, Any]:
        return await get_config_info()

    @server.tool(
        name="sheetdb_diagnostics",
        description="Run health checks against the MCP server and the configured spreadsheet.",
    )
    async def mcp_diagnostics() -> Dict[str, Any]:
        return await diagnostics()
