from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.repo.referrals_repo import ReferralsRepo
from app.db.session import SessionLocal
from app.economy.referrals.constants import FRIENDS_PAGE_SIZE_DEFAULT, FRIENDS_PAGE_SIZE_MAX

from .models import InvitedFriend


async def list_invited_friends(
    *,
    inviter_user_id: int,
    page_size: int = FRIENDS_PAGE_SIZE_DEFAULT,
    offset: int = 0,
    session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
) -> list[InvitedFriend]:
    if page_size < 1 or page_size > FRIENDS_PAGE_SIZE_MAX:
        raise ValueError(f"page_size must be between 1 and {FRIENDS_PAGE_SIZE_MAX}")
    if offset < 0:
        raise ValueError("offset must be non-negative")

    async with session_factory() as session:
        rows = await ReferralsRepo.list_invited_for_inviter(
            session,
            inviter_user_id=inviter_user_id,
            limit=page_size,
            offset=offset,
        )

    return [
        InvitedFriend(
            invited_identity=invited.telegram_user_id,
            invited_created_at=invited.created_at,
            reward_given=bool(referral.reward_given),
            referred_at=referral.created_at,
        )
        for referral, invited in rows
    ]
