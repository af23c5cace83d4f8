from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from app.db.models.users import User
from app.db.session import SessionLocal
from app.economy.referrals.service import RewardApplied, RewardSkipped, SkipReason
from app.services.user_onboarding import UserOnboardingService
from tests.integration.referrals_fixtures import _create_user, _get_subscription, _local_subscriptions

UTC = timezone.utc
NOW_UTC = datetime(2026, 2, 10, 12, 0, tzinfo=UTC)


async def _register(identity: str, start_payload: str | None):
    return await UserOnboardingService.register_user(
        telegram_user_id=identity,
        start_payload=start_payload,
        subscriptions=_local_subscriptions(),
        now_utc=NOW_UTC,
    )


@pytest.mark.asyncio
async def test_registration_with_referral_link_rewards_both_users() -> None:
    inviter = await _create_user("1001")

    result = await _register("2002", "ref_1001")

    assert result.created_now is True
    assert result.referral_outcome == RewardApplied(inviter_identity="1001")
    invited_subscription = await _get_subscription(result.user_id)
    inviter_subscription = await _get_subscription(inviter.id)
    assert invited_subscription is not None and inviter_subscription is not None
    assert invited_subscription.paid_until is not None
    assert inviter_subscription.paid_until is not None


@pytest.mark.asyncio
async def test_repeat_registration_does_not_reward_again() -> None:
    await _create_user("1001")
    first = await _register("2002", "ref_1001")

    second = await _register("2002", "ref_1001")

    assert first.created_now is True
    assert second.created_now is False
    assert second.user_id == first.user_id
    assert second.referral_outcome is None


@pytest.mark.asyncio
async def test_registration_without_referral_link_skips_reward() -> None:
    result = await _register("3003", None)

    assert result.created_now is True
    assert result.referral_outcome == RewardSkipped(reason=SkipReason.NO_REFERRER)


@pytest.mark.asyncio
async def test_parallel_registration_creates_single_user() -> None:
    await _create_user("1001")
    barrier = asyncio.Event()

    async def _attempt():
        await barrier.wait()
        return await _register("4004", "ref_1001")

    tasks = [asyncio.create_task(_attempt()) for _ in range(4)]
    barrier.set()
    results = await asyncio.gather(*tasks)

    assert sum(1 for result in results if result.created_now) == 1
    assert len({result.user_id for result in results}) == 1

    async with SessionLocal() as session:
        user_count = await session.scalar(
            select(func.count()).select_from(User).where(User.telegram_user_id == "4004")
        )
    assert user_count == 1
