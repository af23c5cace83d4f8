from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.api.routes import internal_access, internal_referrals
from app.economy.referrals.service import InvitedFriend, RewardApplied, RewardSkipped, SkipReason
from app.main import app

AUTH_HEADERS = {"X-Internal-Token": "internal-secret"}
NOW_UTC = datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)


class _FakeSession:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


@pytest.fixture(autouse=True)
def _internal_access(monkeypatch) -> None:
    monkeypatch.setattr(
        internal_referrals,
        "get_settings",
        lambda: SimpleNamespace(
            internal_api_token="internal-secret",
            internal_api_allowlist="127.0.0.1/32",
            internal_api_trusted_proxies="",
            referral_reward_days=5,
            referral_friends_page_size=20,
        ),
    )
    monkeypatch.setattr(internal_access, "extract_client_ip", lambda request, **kwargs: "127.0.0.1")
    monkeypatch.setattr(internal_referrals, "build_subscription_provider", lambda: object())
    monkeypatch.setattr(internal_referrals, "SessionLocal", lambda: _FakeSession())


def test_reward_endpoint_returns_applied_outcome(monkeypatch) -> None:
    captured: dict[str, object] = {}

    async def _fake_grant(**kwargs):
        captured.update(kwargs)
        return RewardApplied(inviter_identity="1001")

    monkeypatch.setattr(internal_referrals.ReferralService, "grant_registration_reward", _fake_grant)

    client = TestClient(app)
    response = client.post("/internal/referrals/users/42/reward", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"status": "applied", "reason": None, "inviter_identity": "1001"}
    assert captured["invited_user_id"] == 42
    assert captured["reward_days"] == 5


def test_reward_endpoint_returns_skip_reason(monkeypatch) -> None:
    async def _fake_grant(**kwargs):
        return RewardSkipped(reason=SkipReason.ANTI_ABUSE)

    monkeypatch.setattr(internal_referrals.ReferralService, "grant_registration_reward", _fake_grant)

    client = TestClient(app)
    response = client.post("/internal/referrals/users/42/reward", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"status": "skipped", "reason": "anti_abuse", "inviter_identity": None}


def test_friends_endpoint_returns_404_for_unknown_inviter(monkeypatch) -> None:
    async def _fake_get_by_id(session, user_id: int):
        return None

    monkeypatch.setattr(internal_referrals.UsersRepo, "get_by_id", _fake_get_by_id)

    client = TestClient(app)
    response = client.get("/internal/referrals/users/77/friends", headers=AUTH_HEADERS)

    assert response.status_code == 404
    assert response.json() == {"detail": {"code": "E_USER_NOT_FOUND"}}


def test_friends_endpoint_uses_default_page_size(monkeypatch) -> None:
    captured: dict[str, object] = {}

    async def _fake_get_by_id(session, user_id: int):
        return SimpleNamespace(id=user_id)

    async def _fake_list(**kwargs):
        captured.update(kwargs)
        return [
            InvitedFriend(
                invited_identity="2002",
                invited_created_at=NOW_UTC,
                reward_given=True,
                referred_at=NOW_UTC,
            )
        ]

    monkeypatch.setattr(internal_referrals.UsersRepo, "get_by_id", _fake_get_by_id)
    monkeypatch.setattr(internal_referrals.ReferralService, "list_invited_friends", _fake_list)

    client = TestClient(app)
    response = client.get("/internal/referrals/users/7/friends?offset=3", headers=AUTH_HEADERS)

    assert response.status_code == 200
    payload = response.json()
    assert payload["page_size"] == 20
    assert payload["offset"] == 3
    assert payload["friends"][0]["invited_identity"] == "2002"
    assert payload["friends"][0]["reward_given"] is True
    assert captured == {"inviter_user_id": 7, "page_size": 20, "offset": 3}


def test_friends_endpoint_rejects_page_size_over_limit() -> None:
    client = TestClient(app)
    response = client.get("/internal/referrals/users/7/friends?page_size=201", headers=AUTH_HEADERS)

    assert response.status_code == 422
