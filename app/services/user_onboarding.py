from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.identity import normalize_identity
from app.db.models.users import User
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.economy.referrals.constants import REFERRAL_REWARD_DAYS
from app.economy.referrals.service import ReferralRewardOutcome, ReferralService
from app.economy.subscriptions.provider import SubscriptionProvider

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RegistrationResult:
    user_id: int
    created_now: bool
    referral_outcome: ReferralRewardOutcome | None = None


class UserOnboardingService:
    @staticmethod
    async def _resolve_inviter(
        session: AsyncSession,
        *,
        identity: str,
        start_payload: str | None,
    ) -> User | None:
        inviter_identity = ReferralService.extract_inviter_identity_from_start_payload(start_payload)
        if inviter_identity is None:
            return None
        inviter_identity = str(normalize_identity(inviter_identity))
        # Self-links are dropped here; the reward engine still rejects them if one slips through.
        if inviter_identity == identity:
            return None
        return await UsersRepo.get_by_telegram_user_id(session, inviter_identity)

    @staticmethod
    async def _create_or_load_user(
        session: AsyncSession,
        *,
        identity: str,
        start_payload: str | None,
    ) -> tuple[User, bool]:
        existing = await UsersRepo.get_by_telegram_user_id(session, identity)
        if existing is not None:
            return existing, False

        inviter = await UserOnboardingService._resolve_inviter(
            session,
            identity=identity,
            start_payload=start_payload,
        )
        try:
            async with session.begin_nested():
                user = await UsersRepo.create(
                    session,
                    telegram_user_id=identity,
                    referral_code=identity,
                    referred_by_user_id=inviter.id if inviter is not None else None,
                )
        except IntegrityError:
            loaded = await UsersRepo.get_by_telegram_user_id(session, identity)
            if loaded is None:
                raise
            return loaded, False
        return user, True

    @staticmethod
    async def register_user(
        *,
        telegram_user_id: str,
        start_payload: str | None,
        subscriptions: SubscriptionProvider,
        now_utc: datetime,
        session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
        reward_days: int = REFERRAL_REWARD_DAYS,
    ) -> RegistrationResult:
        identity = str(normalize_identity(telegram_user_id))

        async with session_factory.begin() as session:
            user, created_now = await UserOnboardingService._create_or_load_user(
                session,
                identity=identity,
                start_payload=start_payload,
            )
            user_id = user.id
            referred_by_user_id = user.referred_by_user_id

        if not created_now:
            return RegistrationResult(user_id=user_id, created_now=False)

        logger.info(
            "user_registered",
            user_id=user_id,
            referred_by_user_id=referred_by_user_id,
        )
        # Referral rewards run only for a first-ever registration.
        outcome = await ReferralService.grant_registration_reward(
            invited_user_id=user_id,
            subscriptions=subscriptions,
            now_utc=now_utc,
            session_factory=session_factory,
            reward_days=reward_days,
        )
        return RegistrationResult(user_id=user_id, created_now=True, referral_outcome=outcome)
