# Google SheetDB MCP Server
# File: errors.py
# Version: v1

"""Exception hierarchy shared by the translator, the table facade and the
Sheets client.

Every error carries a stable ``code`` so the MCP tool layer can turn it
into a small machine-readable error envelope.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SheetDBError(Exception):
    """Base class for all SheetDB failures."""

    code = "SHEETDB_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class QuerySyntaxError(SheetDBError):
    """A textual query could not be translated into a command."""

    code = "SYNTAX_ERROR"

    def __init__(
        self,
        message: str,
        statement: str = "",
        position: Optional[int] = None,
    ) -> None:
        details: Dict[str, Any] = {"statement": statement}
        if position is not None:
            details["position"] = position
        super().__init__(message, details)
        self.statement = statement
        self.position = position


class UnsupportedSyntax(QuerySyntaxError):
    """No recognised leading keyword."""

    code = "UNSUPPORTED_SYNTAX"


class MalformedStatement(QuerySyntaxError):
    """Leading keyword recognised but a required clause is missing or wrong."""

    code = "MALFORMED_STATEMENT"


class MissingRequiredArgument(SheetDBError):
    code = "MISSING_ARGUMENT"


class StoreError(SheetDBError, RuntimeError):
    """Transport or HTTP failure talking to the backing row store."""

    code = "BACKEND_ERROR"


class AuthError(StoreError):
    code = "AUTH_ERROR"
