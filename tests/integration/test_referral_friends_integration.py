from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.db.models.referrals import Referral
from app.db.repo.referrals_repo import ReferralsRepo
from app.db.session import SessionLocal
from app.economy.referrals.service import ReferralService
from tests.integration.referrals_fixtures import _create_user

UTC = timezone.utc
NOW_UTC = datetime(2026, 2, 10, 12, 0, tzinfo=UTC)


async def _create_referral_row(*, inviter_user_id: int, invited_user_id: int, created_at: datetime, reward_given: bool) -> None:
    async with SessionLocal.begin() as session:
        await ReferralsRepo.create(
            session,
            referral=Referral(
                inviter_user_id=inviter_user_id,
                invited_user_id=invited_user_id,
                reward_given=reward_given,
                created_at=created_at,
            ),
        )


@pytest.mark.asyncio
async def test_friends_are_listed_newest_first() -> None:
    inviter = await _create_user("1001")
    for index, identity in enumerate(("2001", "2002", "2003")):
        friend = await _create_user(identity, referred_by_user_id=inviter.id)
        await _create_referral_row(
            inviter_user_id=inviter.id,
            invited_user_id=friend.id,
            created_at=NOW_UTC + timedelta(minutes=index),
            reward_given=index == 0,
        )
    other_inviter = await _create_user("9009")
    stranger = await _create_user("3001", referred_by_user_id=other_inviter.id)
    await _create_referral_row(
        inviter_user_id=other_inviter.id,
        invited_user_id=stranger.id,
        created_at=NOW_UTC,
        reward_given=False,
    )

    friends = await ReferralService.list_invited_friends(inviter_user_id=inviter.id)

    assert [friend.invited_identity for friend in friends] == ["2003", "2002", "2001"]
    assert [friend.reward_given for friend in friends] == [False, False, True]
    assert friends[0].referred_at == NOW_UTC + timedelta(minutes=2)


@pytest.mark.asyncio
async def test_friends_page_is_bounded_by_page_size_and_offset() -> None:
    inviter = await _create_user("1001")
    for index in range(5):
        friend = await _create_user(f"20{index}", referred_by_user_id=inviter.id)
        await _create_referral_row(
            inviter_user_id=inviter.id,
            invited_user_id=friend.id,
            created_at=NOW_UTC + timedelta(minutes=index),
            reward_given=False,
        )

    page = await ReferralService.list_invited_friends(inviter_user_id=inviter.id, page_size=2, offset=1)

    assert [friend.invited_identity for friend in page] == ["203", "202"]


@pytest.mark.asyncio
async def test_friends_page_size_is_validated() -> None:
    with pytest.raises(ValueError):
        await ReferralService.list_invited_friends(inviter_user_id=1, page_size=201)
    with pytest.raises(ValueError):
        await ReferralService.list_invited_friends(inviter_user_id=1, offset=-1)
