# Google SheetDB MCP Server
# File: client.py
# Version: v1
"""Google Sheets API v4 row store.

Implements the ``RowStore`` port on top of:

- spreadsheets.values.get / update / append / clear for cell data
- spreadsheets.get for tab titles and numeric sheet ids
- spreadsheets.batchUpdate for addSheet / deleteSheet / insertDimension
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote
import logging

import httpx
from httpx import HTTPStatusError, RequestError

from .auth import OAuthClient
from .config import SheetDBConfig
from .errors import StoreError
from .models import Row
from .store import a1_row_range, column_letter, quote_tab, rows_from_values

logger = logging.getLogger(__name__)

USER_ENTERED = "USER_ENTERED"


@dataclass
class SheetsClient:
    """Row store backed by one Google spreadsheet."""

    config: SheetDBConfig
    oauth: OAuthClient
    transport: Optional[httpx.AsyncBaseTransport] = None

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _spreadsheet_url(self, suffix: str = "") -> str:
        if not self.config.spreadsheet_id:
            raise StoreError(
                "SHEETDB_SPREADSHEET_ID is not set. "
                "Please configure it before talking to Google Sheets."
            )
        base_url = self.config.api_base_url.rstrip("/")
        return f"{base_url}/v4/spreadsheets/{quote(self.config.spreadsheet_id, safe='')}{suffix}"

    def _values_url(self, a1_range: str, action: str = "") -> str:
        return self._spreadsheet_url(f"/values/{quote(a1_range, safe='')}{action}")

    async def _request(
        self,
        method: str,
        url: str,
        what: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        token = await self.oauth.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

        logger.debug("%s %s (%s)", method, url, what)
        async with httpx.AsyncClient(
            timeout=float(self.config.timeout_seconds),
            verify=self.config.verify_tls,
            transport=self.transport,
        ) as http_client:
            try:
                response = await http_client.request(
                    method, url, headers=headers, params=params, json=json
                )
            except RequestError as exc:
                raise StoreError(
                    f"Error calling Google Sheets API to {what} at '{url}': {exc}"
                ) from exc

            try:
                response.raise_for_status()
            except HTTPStatusError as exc:
                status = response.status_code
                body_preview = response.text[:500]
                raise StoreError(
                    f"Failed to {what} via '{url}' (HTTP {status}). "
                    f"Response snippet: {body_preview}",
                    details={"status": status},
                ) from exc

        if not response.content:
            return {}
        data = response.json()
        return data if isinstance(data, dict) else {}

    async def _get_values(self, a1_range: str, what: str) -> List[List[Any]]:
        data = await self._request("GET", self._values_url(a1_range), what)
        values = data.get("values")
        return values if isinstance(values, list) else []

    async def _sheet_properties(self) -> List[Dict[str, Any]]:
        data = await self._request(
            "GET",
            self._spreadsheet_url(),
            "read spreadsheet metadata",
            params={"fields": "sheets.properties(sheetId,title)"},
        )
        sheets = data.get("sheets") or []
        return [s.get("properties", {}) for s in sheets if isinstance(s, dict)]

    async def _sheet_id(self, table: str) -> Optional[int]:
        for props in await self._sheet_properties():
            if props.get("title") == table:
                return props.get("sheetId")
        return None

    async def _batch_update(self, requests: List[Dict[str, Any]], what: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            self._spreadsheet_url(":batchUpdate"),
            what,
            json={"requests": requests},
        )

    async def _width(self, table: str, width: Optional[int]) -> int:
        if width:
            return width
        return max(len(await self.read_header(table)), 1)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def ping(self) -> bool:
        """Cheap configuration check; no network call."""
        return bool(self.config.spreadsheet_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_all(self, table: str) -> List[Row]:
        values = await self._get_values(quote_tab(table), f"read tab '{table}'")
        return rows_from_values(values)

    async def read_header(self, table: str) -> List[str]:
        values = await self._get_values(f"{quote_tab(table)}!1:1", f"read header of '{table}'")
        if not values:
            return []
        return [str(h) for h in values[0]]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def write_range(self, table: str, position: int, values: Sequence[Any]) -> Optional[str]:
        a1_range = a1_row_range(table, position, len(values))
        data = await self._request(
            "PUT",
            self._values_url(a1_range),
            f"write row {position} of '{table}'",
            params={"valueInputOption": USER_ENTERED},
            json={"range": a1_range, "majorDimension": "ROWS", "values": [list(values)]},
        )
        return data.get("updatedRange")

    async def append_rows(self, table: str, rows: Sequence[Sequence[Any]]) -> Optional[str]:
        data = await self._request(
            "POST",
            self._values_url(quote_tab(table), ":append"),
            f"append {len(rows)} row(s) to '{table}'",
            params={"valueInputOption": USER_ENTERED},
            json={"majorDimension": "ROWS", "values": [list(r) for r in rows]},
        )
        updates = data.get("updates") or {}
        return updates.get("updatedRange")

    async def clear_range(self, table: str, position: int, width: Optional[int] = None) -> None:
        a1_range = a1_row_range(table, position, await self._width(table, width))
        await self._request(
            "POST",
            self._values_url(a1_range, ":clear"),
            f"clear row {position} of '{table}'",
            json={},
        )

    async def clear_below_header(self, table: str, width: Optional[int] = None) -> None:
        last = column_letter(await self._width(table, width))
        a1_range = f"{quote_tab(table)}!A2:{last}"
        await self._request(
            "POST",
            self._values_url(a1_range, ":clear"),
            f"clear data rows of '{table}'",
            json={},
        )

    async def insert_row_at(self, table: str, position: int) -> None:
        sheet_id = await self._sheet_id(table)
        if sheet_id is None:
            raise StoreError(f"Cannot insert a row: tab '{table}' does not exist.")
        await self._batch_update(
            [
                {
                    "insertDimension": {
                        "range": {
                            "sheetId": sheet_id,
                            "dimension": "ROWS",
                            "startIndex": position - 1,
                            "endIndex": position,
                        },
                        "inheritFromBefore": position > 1,
                    }
                }
            ],
            f"insert a row at {position} in '{table}'",
        )

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    async def list_tabs(self) -> List[str]:
        return [str(p.get("title")) for p in await self._sheet_properties() if p.get("title")]

    async def create_tab(self, table: str) -> bool:
        """Create the tab if missing; return True when it was created."""
        if await self._sheet_id(table) is not None:
            return False
        await self._batch_update(
            [{"addSheet": {"properties": {"title": table}}}],
            f"create tab '{table}'",
        )
        return True

    async def delete_tab(self, table: str) -> bool:
        """Delete the tab; return False when it does not exist."""
        sheet_id = await self._sheet_id(table)
        if sheet_id is None:
            return False
        await self._batch_update(
            [{"deleteSheet": {"sheetId": sheet_id}}],
            f"delete tab '{table}'",
        )
        return True
