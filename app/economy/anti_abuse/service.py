from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.identity import normalize_identity
from app.db.repo.anti_abuse_repo import AntiAbuseRepo
from app.db.session import SessionLocal

from .types import AntiAbuseFlags

FLAG_HAD_TRIAL = "had_trial"
FLAG_HAD_REFERRAL_BONUS = "had_referral_bonus"


class AntiAbuseRegistry:
    """One-time bonus history keyed by identity.

    Every operation exists twice: the ``*_tx`` form runs inside a session the
    caller already opened, the plain form opens and commits its own unit of
    work through ``session_factory``.
    """

    @staticmethod
    async def get_or_create_flags_tx(session: AsyncSession, identity: str) -> AntiAbuseFlags:
        identity_key = normalize_identity(identity)
        await AntiAbuseRepo.ensure_entry(session, identity=identity_key)
        flags = await AntiAbuseRepo.get_flags(session, identity=identity_key)
        if flags is None:
            raise RuntimeError(f"anti-abuse entry missing after upsert: {identity_key}")
        had_trial, had_referral_bonus = flags
        return AntiAbuseFlags(had_trial=had_trial, had_referral_bonus=had_referral_bonus)

    @staticmethod
    async def get_or_create_flags(
        identity: str,
        *,
        session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
    ) -> AntiAbuseFlags:
        async with session_factory.begin() as session:
            return await AntiAbuseRegistry.get_or_create_flags_tx(session, identity)

    @staticmethod
    async def mark_trial_granted_tx(session: AsyncSession, identity: str) -> None:
        identity_key = normalize_identity(identity)
        await AntiAbuseRepo.set_flag(session, identity=identity_key, flag=FLAG_HAD_TRIAL)

    @staticmethod
    async def mark_trial_granted(
        identity: str,
        *,
        session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
    ) -> None:
        async with session_factory.begin() as session:
            await AntiAbuseRegistry.mark_trial_granted_tx(session, identity)

    @staticmethod
    async def mark_referral_bonus_granted_tx(session: AsyncSession, identity: str) -> None:
        identity_key = normalize_identity(identity)
        await AntiAbuseRepo.set_flag(session, identity=identity_key, flag=FLAG_HAD_REFERRAL_BONUS)

    @staticmethod
    async def mark_referral_bonus_granted(
        identity: str,
        *,
        session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
    ) -> None:
        async with session_factory.begin() as session:
            await AntiAbuseRegistry.mark_referral_bonus_granted_tx(session, identity)
