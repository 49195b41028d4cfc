# Google SheetDB MCP Server
# File: __init__.py
# Version: v1

"""Top-level package for the Google SheetDB MCP Server."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]


def _resolve_version() -> str:
    """Resolve the installed distribution version.

    Falls back to the source-tree version when the package is imported
    without installed metadata.
    """
    try:
        return version("mcp-google-sheetdb-server")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _resolve_version()
