from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from app.economy.subscriptions import ProvisioningError, ProvisioningPanelClient


def _client(handler) -> ProvisioningPanelClient:
    return ProvisioningPanelClient(
        base_url="https://panel.example/api/",
        token="panel-token",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_ensure_client_posts_identity_and_parses_state() -> None:
    captured: dict[str, object] = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers.get("Authorization")
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"enabled": True, "expires_at": "2026-03-01T00:00:00Z"})

    state = await _client(_handler).ensure_client("1001")

    assert captured == {
        "url": "https://panel.example/api/clients/ensure",
        "auth": "Bearer panel-token",
        "body": {"identity": "1001"},
    }
    assert state.identity == "1001"
    assert state.enabled is True
    assert state.expires_at == datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_push_expiry_sends_isoformat() -> None:
    captured: dict[str, object] = {}
    expires_at = datetime(2026, 4, 1, 8, 30, tzinfo=timezone.utc)

    def _handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"enabled": True, "expires_at": expires_at.isoformat()})

    state = await _client(_handler).push_expiry("1001", expires_at)

    assert captured == {
        "path": "/api/clients/1001/expiry",
        "body": {"expires_at": "2026-04-01T08:30:00+00:00"},
    }
    assert state.expires_at == expires_at


@pytest.mark.asyncio
async def test_http_error_becomes_provisioning_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json={"error": "bad gateway"})

    with pytest.raises(ProvisioningError):
        await _client(_handler).ensure_client("1001")


@pytest.mark.asyncio
async def test_invalid_payload_becomes_provisioning_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"not json")

    with pytest.raises(ProvisioningError):
        await _client(_handler).ensure_client("1001")


@pytest.mark.asyncio
async def test_unexpected_payload_shape_becomes_provisioning_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["not", "a", "dict"])

    with pytest.raises(ProvisioningError):
        await _client(_handler).ensure_client("1001")
