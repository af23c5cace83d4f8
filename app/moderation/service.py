from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.identity import normalize_identity
from app.db.repo.blocked_identities_repo import BlockedIdentitiesRepo

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class BlockResult:
    identity: int
    blocked_already: bool
    reason: str | None


def _clean_reason(reason: str | None) -> str | None:
    if reason is None:
        return None
    cleaned = reason.strip()
    return cleaned or None


class ModerationService:
    @staticmethod
    async def block_identity(
        session: AsyncSession,
        *,
        identity: str,
        reason: str | None = None,
    ) -> BlockResult:
        identity_key = normalize_identity(identity)
        cleaned_reason = _clean_reason(reason)

        existing = await BlockedIdentitiesRepo.get_by_identity(session, identity=identity_key)
        if existing is not None:
            if cleaned_reason is not None and existing.reason != cleaned_reason:
                existing.reason = cleaned_reason
                await session.flush()
            logger.info(
                "moderation_identity_block_replayed",
                identity=str(identity_key),
                reason=existing.reason,
            )
            return BlockResult(identity=identity_key, blocked_already=True, reason=existing.reason)

        try:
            async with session.begin_nested():
                await BlockedIdentitiesRepo.create(
                    session,
                    identity=identity_key,
                    reason=cleaned_reason,
                )
        except IntegrityError:
            existing = await BlockedIdentitiesRepo.get_by_identity(session, identity=identity_key)
            if existing is None:
                raise
            return BlockResult(identity=identity_key, blocked_already=True, reason=existing.reason)

        logger.info("moderation_identity_blocked", identity=str(identity_key), reason=cleaned_reason)
        return BlockResult(identity=identity_key, blocked_already=False, reason=cleaned_reason)

    @staticmethod
    async def unblock_identity(session: AsyncSession, *, identity: str) -> bool:
        identity_key = normalize_identity(identity)
        removed = await BlockedIdentitiesRepo.delete_by_identity(session, identity=identity_key)
        logger.info("moderation_identity_unblocked", identity=str(identity_key), removed=removed)
        return removed > 0
