from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.blocked_identities import BlockedIdentity


class BlockedIdentitiesRepo:
    @staticmethod
    async def get_by_identity(session: AsyncSession, *, identity: int) -> BlockedIdentity | None:
        stmt = select(BlockedIdentity).where(BlockedIdentity.identity == identity)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def exists(session: AsyncSession, *, identity: int) -> bool:
        stmt = select(BlockedIdentity.id).where(BlockedIdentity.identity == identity).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        identity: int,
        reason: str | None,
    ) -> BlockedIdentity:
        blocked = BlockedIdentity(identity=identity, reason=reason)
        session.add(blocked)
        await session.flush()
        return blocked

    @staticmethod
    async def delete_by_identity(session: AsyncSession, *, identity: int) -> int:
        stmt = delete(BlockedIdentity).where(BlockedIdentity.identity == identity)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
