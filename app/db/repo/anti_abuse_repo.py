from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.anti_abuse_registry import AntiAbuseRegistryEntry


class AntiAbuseRepo:
    @staticmethod
    async def ensure_entry(session: AsyncSession, *, identity: int) -> None:
        stmt = (
            pg_insert(AntiAbuseRegistryEntry)
            .values(identity=identity, had_trial=False, had_referral_bonus=False)
            .on_conflict_do_nothing(index_elements=[AntiAbuseRegistryEntry.identity])
        )
        await session.execute(stmt)

    @staticmethod
    async def get_flags(session: AsyncSession, *, identity: int) -> tuple[bool, bool] | None:
        stmt = select(
            AntiAbuseRegistryEntry.had_trial,
            AntiAbuseRegistryEntry.had_referral_bonus,
        ).where(AntiAbuseRegistryEntry.identity == identity)
        result = await session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        return bool(row.had_trial), bool(row.had_referral_bonus)

    @staticmethod
    async def set_flag(session: AsyncSession, *, identity: int, flag: str) -> None:
        if flag not in {"had_trial", "had_referral_bonus"}:
            raise ValueError(f"unknown anti-abuse flag: {flag}")
        values = {"identity": identity, "had_trial": False, "had_referral_bonus": False}
        values[flag] = True
        # Upsert only ever writes ``true``; flags are never cleared.
        stmt = (
            pg_insert(AntiAbuseRegistryEntry)
            .values(**values)
            .on_conflict_do_update(
                index_elements=[AntiAbuseRegistryEntry.identity],
                set_={flag: True},
            )
        )
        await session.execute(stmt)
