# Google SheetDB MCP Server
# File: transports/http_server.py
# Version: v1

"""Streamable-HTTP entrypoint for the Google SheetDB MCP server.

Host and port come from FastMCP's own settings (``FASTMCP_HOST``,
``FASTMCP_PORT``).
"""

from __future__ import annotations

from . import build_server


def main() -> None:
    """Entry point for the ``sheetdb-mcp-http`` console command."""
    mcp = build_server()
    mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
