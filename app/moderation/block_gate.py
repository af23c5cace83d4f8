from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.identity import normalize_identity
from app.db.repo.blocked_identities_repo import BlockedIdentitiesRepo

from .errors import IdentityBlockedError


@dataclass(frozen=True, slots=True)
class BlockedIdentitySnapshot:
    identity: int
    reason: str | None
    created_at: datetime


class BlockGate:
    """Read-only ban checks keyed by normalized identity.

    Raw identity strings are normalized first, so a malformed identity fails
    with ``InvalidIdentityError`` before any query runs.
    """

    @staticmethod
    async def get_blocked(session: AsyncSession, identity: str) -> BlockedIdentitySnapshot | None:
        identity_key = normalize_identity(identity)
        blocked = await BlockedIdentitiesRepo.get_by_identity(session, identity=identity_key)
        if blocked is None:
            return None
        return BlockedIdentitySnapshot(
            identity=identity_key,
            reason=blocked.reason,
            created_at=blocked.created_at,
        )

    @staticmethod
    async def is_blocked(session: AsyncSession, identity: str) -> bool:
        identity_key = normalize_identity(identity)
        return await BlockedIdentitiesRepo.exists(session, identity=identity_key)

    @staticmethod
    async def assert_not_blocked(session: AsyncSession, identity: str) -> None:
        blocked = await BlockGate.get_blocked(session, identity)
        if blocked is None:
            return
        raise IdentityBlockedError(blocked.identity, blocked.reason)
