"""Centralized credential configuration.

Credentials are read from environment variables. A ``.env`` file in the
repo root is auto-loaded on import, so a local checkout only needs:

    ZOHO_CLIENT_ID=1000.XXXX
    ZOHO_CLIENT_SECRET=...
    ZOHO_REFRESH_TOKEN=...        # printed by 'zoho-sheet login'
    ZOHO_DATA_CENTER=com          # com, eu, in, com.au, jp, ...

A cached access token is only used together with its expiry:

    ZOHO_ACCESS_TOKEN=...
    ZOHO_TOKEN_EXPIRES_AT=1767225600   # epoch seconds

Variables already present in the environment take precedence over the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from zoho_sheet.exceptions import AuthConfigurationError

# Repository root (where this package is installed from)
# __file__ is src/zoho_sheet/config.py, so 3 levels up
REPO_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = REPO_ROOT / ".env"

DEFAULT_DATA_CENTER = "com"

ENV_VARS = {
    "client_id": "ZOHO_CLIENT_ID",
    "client_secret": "ZOHO_CLIENT_SECRET",
    "device_code": "ZOHO_DEVICE_CODE",
    "access_token": "ZOHO_ACCESS_TOKEN",
    "expires_at": "ZOHO_TOKEN_EXPIRES_AT",
    "refresh_token": "ZOHO_REFRESH_TOKEN",
    "data_center": "ZOHO_DATA_CENTER",
}


@dataclass
class ZohoConfig:
    """Client identity, token material and data-center endpoints.

    Attributes:
        client_id: Zoho API console client ID.
        client_secret: Zoho API console client secret.
        device_code: Device code from a device authorization request.
        access_token: Previously issued access token (optional).
        expires_at: Epoch seconds at which ``access_token`` expires.
        refresh_token: Refresh token, populated after the first device login.
        data_center: Zoho data center suffix (default: "com").
    """

    client_id: str
    client_secret: str
    device_code: str | None = None
    access_token: str | None = None
    expires_at: float | None = None
    refresh_token: str | None = None
    data_center: str = DEFAULT_DATA_CENTER

    def __post_init__(self) -> None:
        self.data_center = (self.data_center or "").strip().lstrip(".")
        if not self.data_center:
            raise AuthConfigurationError("Zoho data center must not be empty")

    @property
    def base_api_url(self) -> str:
        """Base API URL for Zoho Sheet."""
        return f"https://sheet.zoho.{self.data_center}/api/v2/"

    @property
    def accounts_url(self) -> str:
        return f"https://accounts.zoho.{self.data_center}"

    @property
    def token_url(self) -> str:
        """Token URL for refresh token calls."""
        return f"{self.accounts_url}/oauth/v2/token"

    @property
    def device_token_url(self) -> str:
        """Device token URL for exchanging a device code."""
        return f"{self.accounts_url}/oauth/v3/device/token"

    @property
    def device_code_url(self) -> str:
        return f"{self.accounts_url}/oauth/v3/device/code"


def _parse_env_line(line: str) -> tuple[str, str] | None:
    """Split a ``KEY=value`` line, or return None for blanks and comments.

    Accepts an optional ``export`` prefix and strips one layer of
    matching quotes from the value.
    """
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export ") :]

    key, _, value = line.partition("=")
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        value = value[1:-1]
    key = key.strip()
    return (key, value) if key else None


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Copy settings from a .env file into ``os.environ``.

    Variables already set in the environment are left alone.

    Returns:
        The variables that were actually set.
    """
    if not env_path.is_file():
        return {}

    loaded = {}
    for line in env_path.read_text().splitlines():
        pair = _parse_env_line(line)
        if pair is None:
            continue
        key, value = pair
        if key not in os.environ:
            os.environ[key] = value
            loaded[key] = value
    return loaded


def _env(name: str) -> str | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    return value


def _parse_expiry(value: str | float | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as e:
        raise AuthConfigurationError(
            f"{ENV_VARS['expires_at']} must be epoch seconds, got: {value!r}"
        ) from e


def load_config(**overrides: str | float | None) -> ZohoConfig:
    """Build a ZohoConfig from environment variables.

    Args:
        **overrides: Explicit values (e.g. ``client_id="..."``) that take
            precedence over the environment. ``None`` values are ignored.

    Returns:
        Populated ZohoConfig.

    Raises:
        AuthConfigurationError: If the client ID or secret is missing.
    """
    values = {field: _env(env_name) for field, env_name in ENV_VARS.items()}
    values.update({k: v for k, v in overrides.items() if v is not None})

    missing = [ENV_VARS[k] for k in ("client_id", "client_secret") if not values.get(k)]
    if missing:
        raise AuthConfigurationError(
            f"Missing Zoho client credentials: {', '.join(missing)}. "
            "Set them in the environment or in .env."
        )

    return ZohoConfig(
        client_id=values["client_id"],
        client_secret=values["client_secret"],
        device_code=values.get("device_code"),
        access_token=values.get("access_token"),
        expires_at=_parse_expiry(values.get("expires_at")),
        refresh_token=values.get("refresh_token"),
        data_center=values.get("data_center") or DEFAULT_DATA_CENTER,
    )


def get_credential_status() -> dict:
    """Get status of the configured credentials.

    Returns:
        Dictionary with credential status.
    """
    return {
        "repo_root": str(REPO_ROOT),
        "env_file": ENV_FILE.exists(),
        "zoho": {
            "client_id": bool(_env("ZOHO_CLIENT_ID")),
            "client_secret": bool(_env("ZOHO_CLIENT_SECRET")),
            "refresh_token": bool(_env("ZOHO_REFRESH_TOKEN")),
            "device_code": bool(_env("ZOHO_DEVICE_CODE")),
            "data_center": _env("ZOHO_DATA_CENTER") or DEFAULT_DATA_CENTER,
        },
    }


# Auto-load .env from repo root on import
_loaded = _load_env_file(ENV_FILE)
