# Google SheetDB MCP Server
# File: transports/__init__.py
# Version: v1

"""Entry points that run the MCP server over a concrete transport."""

from __future__ import annotations

import logging
import sys

from mcp.server.fastmcp import FastMCP

from ..config import SheetDBConfig
from ..tools import register_all_tools

SERVER_NAME = "google-sheetdb-mcp"


def configure_logging(cfg: SheetDBConfig) -> None:
    """Log to stderr; stdout carries the MCP stdio protocol."""
    logging.basicConfig(
        level=cfg.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_server(cfg: SheetDBConfig | None = None) -> FastMCP:
    cfg = cfg or SheetDBConfig.from_env()
    configure_logging(cfg)
    mcp = FastMCP(SERVER_NAME)
    register_all_tools(mcp)
    return mcp
