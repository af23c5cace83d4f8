from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.referrals import Referral
from app.db.models.users import User


class ReferralsRepo:
    @staticmethod
    async def get_by_invited_user_id(
        session: AsyncSession,
        *,
        invited_user_id: int,
    ) -> Referral | None:
        stmt = select(Referral).where(Referral.invited_user_id == invited_user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, referral: Referral) -> Referral:
        session.add(referral)
        await session.flush()
        return referral

    @staticmethod
    async def mark_reward_given(session: AsyncSession, *, referral_id: int) -> int:
        stmt = (
            update(Referral)
            .where(
                Referral.id == referral_id,
                Referral.reward_given.is_(False),
            )
            .values(reward_given=True)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def list_invited_for_inviter(
        session: AsyncSession,
        *,
        inviter_user_id: int,
        limit: int,
        offset: int = 0,
    ) -> list[tuple[Referral, User]]:
        stmt = (
            select(Referral, User)
            .join(User, User.id == Referral.invited_user_id)
            .where(Referral.inviter_user_id == inviter_user_id)
            .order_by(Referral.created_at.desc(), Referral.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(referral, user) for referral, user in result.all()]
