"""Request construction for the Zoho Sheet API.

The API mixes two addressing styles:

- REST paths, e.g. ``workbooks/{id}/sheets/{id}/rows/{n}``, with JSON bodies
- RPC calls, ``{resource_id}?method=table.records.fetch``, with form bodies

Both are described by an :class:`ApiRequest` and turned into an
authenticated ``httpx.Request`` by :func:`build_request`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from zoho_sheet.auth import ZohoOAuth

FORM = "application/x-www-form-urlencoded"
JSON = "application/json"


@dataclass
class ApiRequest:
    """Logical description of one API call.

    Attributes:
        http_method: HTTP verb.
        path: Path relative to the API root (REST path or resource ID).
        params: Form parameters (RPC) or JSON body (REST), in wire order.
        api_method: RPC method name sent as the ``method`` query parameter.
        encoding: Content type of the body.
    """

    http_method: str
    path: str
    params: dict[str, Any] | None = field(default_factory=dict)
    api_method: str | None = None
    encoding: str = FORM

    @classmethod
    def rest(cls, http_method: str, path: str, body: dict[str, Any] | None = None) -> ApiRequest:
        """Describe a REST-style call with an optional JSON body."""
        return cls(http_method=http_method, path=path, params=body, encoding=JSON)

    @classmethod
    def rpc(
        cls, resource_id: str, api_method: str, params: dict[str, Any] | None = None
    ) -> ApiRequest:
        """Describe an RPC-style ``{resource_id}?method=...`` form POST."""
        return cls(
            http_method="POST",
            path=resource_id,
            params=params or {},
            api_method=api_method,
            encoding=FORM,
        )


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def encode_json(value: Any) -> str:
    """Serialize a structured value as compact JSON, keeping order."""
    return json.dumps(_jsonable(value), separators=(",", ":"))


def encode_form_value(value: Any) -> str:
    """Encode a single form parameter value.

    Booleans become ``"true"``/``"false"``, integers are decimal, strings
    pass through and anything structured is embedded as JSON.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return encode_json(value)


def encode_form(params: Mapping[str, Any]) -> dict[str, str]:
    """Encode form parameters, dropping ``None`` values."""
    return {k: encode_form_value(v) for k, v in params.items() if v is not None}


async def build_request(
    http: httpx.AsyncClient, auth: ZohoOAuth, op: ApiRequest
) -> httpx.Request:
    """Build an authenticated request for an API call.

    The access token is fetched before anything else, so a request is
    never built with an unchecked token.

    Args:
        http: Client whose ``base_url`` is the API root.
        auth: Token authority.
        op: Call description.

    Returns:
        Request ready to be sent with ``http.send()``.
    """
    token = await auth.get_access_token()

    headers = {
        "Authorization": f"Zoho-oauthtoken {token}",
        "Content-Type": op.encoding,
    }
    query = {"method": op.api_method} if op.api_method else None

    if op.encoding == FORM:
        return http.build_request(
            op.http_method,
            op.path,
            params=query,
            headers=headers,
            data=encode_form(op.params or {}),
        )

    if op.params is None:
        return http.build_request(op.http_method, op.path, params=query, headers=headers)

    return http.build_request(
        op.http_method,
        op.path,
        params=query,
        headers=headers,
        content=encode_json(op.params).encode("utf-8"),
    )
