# Google SheetDB MCP Server
# File: auth.py
# Version: v1

"""OAuth2 access tokens for the Google Sheets API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
import logging
import time

import httpx

from .config import SheetDBConfig
from .errors import AuthError

logger = logging.getLogger(__name__)

# Refresh this many seconds before the token actually expires.
_EXPIRY_MARGIN_SECONDS = 60


@dataclass
class OAuthClient:
    """Token provider for the Sheets client.

    A static ``SHEETDB_ACCESS_TOKEN`` wins when set. Otherwise the
    refresh-token grant is used and the token is cached in memory until
    shortly before ``expires_in`` runs out.
    """

    config: SheetDBConfig
    transport: Optional[httpx.AsyncBaseTransport] = None
    _cached_token: Optional[str] = None
    _expires_at: float = 0.0

    async def get_access_token(self) -> str:
        if self.config.access_token:
            return self.config.access_token

        if self._cached_token and time.time() < self._expires_at:
            return self._cached_token

        if not self.config.has_refresh_credentials:
            raise AuthError(
                "OAuth configuration is incomplete. Set SHEETDB_ACCESS_TOKEN, or "
                "SHEETDB_CLIENT_ID, SHEETDB_CLIENT_SECRET and SHEETDB_REFRESH_TOKEN."
            )

        form = {
            "grant_type": "refresh_token",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "refresh_token": self.config.refresh_token,
        }

        async with httpx.AsyncClient(
            timeout=float(self.config.timeout_seconds),
            verify=self.config.verify_tls,
            transport=self.transport,
        ) as client:
            try:
                response = await client.post(
                    self.config.oauth_token_url,
                    data=form,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            except httpx.RequestError as exc:
                raise AuthError(
                    f"Error calling OAuth token endpoint '{self.config.oauth_token_url}': {exc}"
                ) from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            body_preview = exc.response.text[:500]
            raise AuthError(
                f"Failed to obtain access token from '{self.config.oauth_token_url}' "
                f"(HTTP {status}). Check SHEETDB_CLIENT_ID, SHEETDB_CLIENT_SECRET "
                f"and SHEETDB_REFRESH_TOKEN. Response snippet: {body_preview}",
                details={"status": status},
            ) from exc

        data: dict[str, Any] = response.json()
        token = data.get("access_token")
        if not token:
            raise AuthError("OAuth token response did not contain 'access_token'")

        expires_in = int(data.get("expires_in") or 3600)
        self._cached_token = token
        self._expires_at = time.time() + max(expires_in - _EXPIRY_MARGIN_SECONDS, 0)
        logger.debug("Obtained access token valid for %ss.", expires_in)
        return token
