"""Zoho OAuth device-code and refresh-token management.

This module provides OAuth 2.0 authentication for the Zoho Sheet API with:
- Device authorization (user approves the client on another device)
- Automatic access-token refresh from a retained refresh token
- Single-flight exchanges so concurrent callers share one refresh

Token state is held in memory. The refresh token obtained from the device
exchange is also written back to ``config.refresh_token`` so the caller
can persist it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import httpx
from authlib.oauth2.rfc6749 import OAuth2Token

from zoho_sheet.config import ZohoConfig
from zoho_sheet.exceptions import AuthConfigurationError, AuthExchangeError

logger = logging.getLogger(__name__)

SCOPE = "ZohoSheet.dataAPI.READ,ZohoSheet.dataAPI.UPDATE"

# Seconds subtracted from the server-reported lifetime
EXPIRY_MARGIN = 60


@dataclass
class DeviceAuthorization:
    """Response from a Zoho device code request."""

    device_code: str
    user_code: str
    verification_url: str
    expires_in: int
    interval: int


class ZohoOAuth:
    """Zoho OAuth token authority.

    Produces a valid access token on demand. A cached token is returned
    without any network call until it is within ``EXPIRY_MARGIN`` seconds
    of expiry; after that exactly one exchange is made:

    - refresh token known: refresh exchange
    - no refresh token, device code set: device-code exchange
    - neither: ``AuthConfigurationError``

    Example:
        >>> auth = ZohoOAuth(load_config())
        >>> if not auth.get_refresh_token():
        ...     device = await auth.begin_device_authorization()
        ...     print(f"Enter {device.user_code} at {device.verification_url}")
        ...     input("Press Enter once approved")
        ...     auth.config.device_code = device.device_code
        >>> token = await auth.get_access_token()
    """

    def __init__(self, config: ZohoConfig, http_client: httpx.AsyncClient | None = None):
        """Initialize Zoho OAuth.

        Args:
            config: Client credentials and data center.
            http_client: Client used for token exchanges. A new one is
                created when omitted.
        """
        self.config = config
        self._http = http_client or httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None
        self._refresh_token = config.refresh_token
        self._token: OAuth2Token | None = None
        self._lock = asyncio.Lock()

        if config.access_token and config.expires_at:
            self._token = OAuth2Token(
                {"access_token": config.access_token, "expires_at": config.expires_at}
            )

        self.last_refresh: datetime | None = None
        self.refresh_count = 0

    def _has_valid_token(self) -> bool:
        if not self._token or not self._token.get("access_token"):
            return False
        if not self._token.get("expires_at"):
            return False
        return not self._token.is_expired(leeway=EXPIRY_MARGIN)

    async def get_access_token(self) -> str:
        """Return an access token that is valid at the time of return.

        Returns:
            Access token string.

        Raises:
            AuthConfigurationError: If neither a refresh token nor a device
                code is available.
            AuthExchangeError: If the token endpoint rejects the exchange.
        """
        if self._has_valid_token():
            logger.debug("Using cached access token")
            return self._token["access_token"]

        async with self._lock:
            # Another caller may have finished an exchange while we waited
            if not self._has_valid_token():
                if self._refresh_token:
                    await self._refresh()
                elif self.config.device_code:
                    await self._exchange_device_code()
                else:
                    raise AuthConfigurationError(
                        "No device code or refresh token found. "
                        "Call begin_device_authorization() first."
                    )

        return self._token["access_token"]

    def get_refresh_token(self) -> str | None:
        """Return the refresh token, if one is known."""
        return self._refresh_token

    def is_authorized(self) -> bool:
        """Check if a token can be produced without user interaction."""
        return bool(self._refresh_token) or self._has_valid_token()

    async def begin_device_authorization(self) -> DeviceAuthorization:
        """Request a device code from Zoho (step 1 of the device flow).

        The caller shows ``user_code`` and ``verification_url`` to the user,
        sets ``config.device_code`` once the user has approved, and then
        calls ``get_access_token()``.

        Returns:
            DeviceAuthorization details.

        Raises:
            AuthExchangeError: If the request fails or the payload is malformed.
        """
        response = await self._http.post(
            self.config.device_code_url,
            data={
                "client_id": self.config.client_id,
                "scope": SCOPE,
                "grant_type": "device_request",
                "access_type": "offline",
            },
        )
        payload = self._parse_token_response(response, "Error getting device code")

        try:
            return DeviceAuthorization(
                device_code=str(payload["device_code"]),
                user_code=str(payload["user_code"]),
                verification_url=str(payload["verification_url"]),
                expires_in=int(payload["expires_in"]),
                interval=int(payload["interval"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AuthExchangeError(
                f"Malformed device code response ({e})",
                status_code=response.status_code,
                body=response.text,
            ) from e

    async def _exchange_device_code(self) -> None:
        """Exchange the device code for access + refresh token (step 2)."""
        logger.info("Exchanging device code for tokens")
        response = await self._http.post(
            self.config.device_token_url,
            data={
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "grant_type": "device_token",
                "code": self.config.device_code,
            },
        )
        payload = self._parse_token_response(response, "Zoho Device Token Error")
        if not payload.get("refresh_token"):
            raise AuthExchangeError(
                "Zoho Device Token Error: no refresh_token in response",
                status_code=response.status_code,
                body=response.text,
            )

        self._store_token(payload, response)
        self._refresh_token = payload["refresh_token"]
        # Persist on the config so the caller can save it
        self.config.refresh_token = self._refresh_token

    async def _refresh(self) -> None:
        """Refresh the access token using the stored refresh token."""
        logger.info("Access token missing or expired, refreshing...")
        response = await self._http.post(
            self.config.token_url,
            data={
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": self._refresh_token,
            },
        )
        payload = self._parse_token_response(response, "Zoho Refresh Token Error")
        self._store_token(payload, response)

    def _parse_token_response(self, response: httpx.Response, message: str) -> dict[str, Any]:
        if not response.is_success:
            raise AuthExchangeError(message, status_code=response.status_code, body=response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise AuthExchangeError(
                f"{message} (invalid JSON)", status_code=response.status_code, body=response.text
            ) from e

        if not isinstance(payload, dict):
            raise AuthExchangeError(
                f"{message} (unexpected payload)",
                status_code=response.status_code,
                body=response.text,
            )

        # Zoho reports e.g. authorization_pending with a 200 status
        if payload.get("error"):
            raise AuthExchangeError(
                f"{message} ({payload['error']})",
                status_code=response.status_code,
                body=response.text,
            )

        return payload

    def _store_token(self, payload: dict[str, Any], response: httpx.Response) -> None:
        access_token = payload.get("access_token")
        try:
            expires_in = int(payload["expires_in"])
        except (KeyError, TypeError, ValueError):
            expires_in = None

        if not access_token or expires_in is None:
            raise AuthExchangeError(
                "Malformed token response",
                status_code=response.status_code,
                body=response.text,
            )

        self._token = OAuth2Token(
            {"access_token": access_token, "expires_at": time.time() + expires_in}
        )
        self.config.access_token = access_token
        self.config.expires_at = self._token["expires_at"]

        self.last_refresh = datetime.now()
        self.refresh_count += 1
        logger.info(f"Access token issued, expires in {expires_in}s")

    def get_token_info(self) -> dict[str, Any]:
        """Get information about the current token.

        Returns:
            Dictionary with token status, expiry, etc.
        """
        if not self._token:
            return {
                "status": "no_token",
                "has_refresh_token": bool(self._refresh_token),
            }

        expires_at = self._token.get("expires_at", 0)
        expires_in = expires_at - EXPIRY_MARGIN - time.time()

        return {
            "status": "valid" if self._has_valid_token() else "expired",
            "expires_in": str(timedelta(seconds=int(max(0, expires_in)))),
            "has_refresh_token": bool(self._refresh_token),
            "refresh_count": self.refresh_count,
            "last_refresh": self.last_refresh.isoformat() if self.last_refresh else None,
        }

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()
