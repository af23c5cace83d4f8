from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_telegram_user_id(session: AsyncSession, telegram_user_id: str) -> User | None:
        stmt = select(User).where(User.telegram_user_id == telegram_user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        telegram_user_id: str,
        referral_code: str,
        referred_by_user_id: int | None,
    ) -> User:
        user = User(
            telegram_user_id=telegram_user_id,
            referral_code=referral_code,
            referred_by_user_id=referred_by_user_id,
        )
        session.add(user)
        await session.flush()
        return user
