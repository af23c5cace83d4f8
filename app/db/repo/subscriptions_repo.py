from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.subscriptions import Subscription


class SubscriptionsRepo:
    @staticmethod
    async def get_by_user_id(session: AsyncSession, *, user_id: int) -> Subscription | None:
        stmt = select(Subscription).where(Subscription.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_user_ids_for_update(
        session: AsyncSession,
        *,
        user_ids: Sequence[int],
    ) -> dict[int, Subscription]:
        ids = tuple(sorted({int(user_id) for user_id in user_ids}))
        if not ids:
            return {}
        # Lock in id order so concurrent rewards touching the same inviter cannot deadlock.
        stmt = (
            select(Subscription)
            .where(Subscription.user_id.in_(ids))
            .order_by(Subscription.id.asc())
            .with_for_update()
        )
        result = await session.execute(stmt)
        return {subscription.user_id: subscription for subscription in result.scalars().all()}

    @staticmethod
    async def create(session: AsyncSession, *, subscription: Subscription) -> Subscription:
        session.add(subscription)
        await session.flush()
        return subscription

    @staticmethod
    async def update_paid_until(
        session: AsyncSession,
        *,
        subscription_id: int,
        paid_until: datetime,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(Subscription)
            .where(Subscription.id == subscription_id)
            .values(paid_until=paid_until, updated_at=now_utc)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def mark_synced(
        session: AsyncSession,
        *,
        user_id: int,
        synced_at: datetime,
        expires_at: datetime | None = None,
    ) -> int:
        values: dict[str, object] = {"last_synced_at": synced_at, "updated_at": synced_at}
        if expires_at is not None:
            values["expires_at"] = expires_at
        stmt = (
            update(Subscription)
            .where(Subscription.user_id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
