from __future__ import annotations

import asyncio

import pytest

from app.economy.anti_abuse import AntiAbuseFlags, AntiAbuseRegistry


@pytest.mark.asyncio
async def test_flags_default_to_false_and_are_created_once() -> None:
    first = await AntiAbuseRegistry.get_or_create_flags("777")
    second = await AntiAbuseRegistry.get_or_create_flags("0777")

    assert first == AntiAbuseFlags(had_trial=False, had_referral_bonus=False)
    assert second == first


@pytest.mark.asyncio
async def test_marking_flags_is_monotonic_and_independent() -> None:
    await AntiAbuseRegistry.mark_trial_granted("888")
    assert await AntiAbuseRegistry.get_or_create_flags("888") == AntiAbuseFlags(
        had_trial=True,
        had_referral_bonus=False,
    )

    await AntiAbuseRegistry.mark_referral_bonus_granted("888")
    await AntiAbuseRegistry.mark_referral_bonus_granted("888")
    assert await AntiAbuseRegistry.get_or_create_flags("888") == AntiAbuseFlags(
        had_trial=True,
        had_referral_bonus=True,
    )


@pytest.mark.asyncio
async def test_parallel_get_or_create_is_race_safe() -> None:
    barrier = asyncio.Event()

    async def _attempt() -> AntiAbuseFlags:
        await barrier.wait()
        return await AntiAbuseRegistry.get_or_create_flags("999")

    tasks = [asyncio.create_task(_attempt()) for _ in range(5)]
    barrier.set()
    results = await asyncio.gather(*tasks)

    assert all(result == AntiAbuseFlags(had_trial=False, had_referral_bonus=False) for result in results)
