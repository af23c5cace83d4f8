from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx
import structlog

from .errors import ProvisioningError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PanelClientState:
    identity: str
    enabled: bool
    expires_at: datetime | None


def _parse_state(identity: str, payload: Any) -> PanelClientState:
    if not isinstance(payload, dict):
        raise ProvisioningError(f"unexpected panel payload for {identity}")
    raw_expires_at = payload.get("expires_at")
    expires_at: datetime | None = None
    if raw_expires_at:
        try:
            expires_at = datetime.fromisoformat(str(raw_expires_at).replace("Z", "+00:00"))
        except ValueError as exc:
            raise ProvisioningError(f"invalid expires_at from panel: {raw_expires_at!r}") from exc
    return PanelClientState(
        identity=identity,
        enabled=bool(payload.get("enabled", True)),
        expires_at=expires_at,
    )


class ProvisioningPanelClient:
    """Thin async client for the VPN provisioning panel."""

    def __init__(
        self,
        *,
        base_url: str,
        token: str = "",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._timeout = timeout_seconds
        self._transport = transport

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(path, json=body)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as exc:
            logger.warning("provisioning_panel_request_failed", path=path, error=str(exc))
            raise ProvisioningError(f"panel request failed: {path}") from exc
        except ValueError as exc:
            raise ProvisioningError(f"panel returned invalid JSON: {path}") from exc

    async def ensure_client(self, identity: str) -> PanelClientState:
        payload = await self._post("/clients/ensure", {"identity": identity})
        return _parse_state(identity, payload)

    async def push_expiry(self, identity: str, expires_at: datetime) -> PanelClientState:
        payload = await self._post(
            f"/clients/{identity}/expiry",
            {"expires_at": expires_at.isoformat()},
        )
        return _parse_state(identity, payload)
