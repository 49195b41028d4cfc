# Google SheetDB MCP Server
# File: transports/stdio_server.py
# Version: v1

"""STDIO entrypoint for the Google SheetDB MCP server.

This is the script behind the ``sheetdb-mcp`` console command.
"""

from __future__ import annotations

from . import build_server


def main() -> None:
    """Synchronous entrypoint for console_scripts."""
    mcp = build_server()

    # Let FastMCP handle stdio + event loop setup.
    mcp.run()


if __name__ == "__main__":
    main()
