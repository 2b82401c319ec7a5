"""Shared fixtures: a recording mock transport for httpx."""

import json
import time
from urllib.parse import parse_qsl

import httpx
import pytest

from zoho_sheet.auth import ZohoOAuth
from zoho_sheet.config import ZohoConfig
from zoho_sheet.sheets import SheetClient


class Recorder:
    """httpx.MockTransport handler that records requests.

    Responses are returned in order. Each may be an ``httpx.Response`` or
    a dict, which is sent as a 200 JSON response.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = self.responses.pop(0)
        if isinstance(response, dict):
            return httpx.Response(200, json=response)
        return response

    def add(self, *responses):
        self.responses.extend(responses)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def form(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body."""
    return dict(parse_qsl(request.content.decode(), keep_blank_values=True))


def form_keys(request: httpx.Request) -> list[str]:
    return [k for k, _ in parse_qsl(request.content.decode(), keep_blank_values=True)]


def json_body(request: httpx.Request):
    return json.loads(request.content)


@pytest.fixture
def recorder():
    """Recorder with no queued responses."""
    return Recorder()


@pytest.fixture
def http_client(recorder):
    """AsyncClient for the accounts server backed by the recorder."""
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder))


@pytest.fixture
def authorized_config():
    """Config holding an access token valid for another hour."""
    return ZohoConfig(
        client_id="X",
        client_secret="Y",
        access_token="cached-token",
        expires_at=time.time() + 3600,
        refresh_token="R",
    )


@pytest.fixture
def sheet_client(authorized_config, recorder):
    """SheetClient whose API calls go to the recorder."""
    auth = ZohoOAuth(
        authorized_config,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(Recorder())),
    )
    api = httpx.AsyncClient(
        base_url=authorized_config.base_api_url,
        transport=httpx.MockTransport(recorder),
    )
    return SheetClient(auth, http_client=api)
