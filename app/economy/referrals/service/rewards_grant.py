from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.models.referrals import Referral
from app.db.models.users import User
from app.db.repo.referrals_repo import ReferralsRepo
from app.db.repo.subscriptions_repo import SubscriptionsRepo
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.economy.anti_abuse.service import AntiAbuseRegistry
from app.economy.referrals.constants import REFERRAL_REWARD_DAYS
from app.economy.referrals.errors import ReferralRowVanishedError
from app.economy.subscriptions.extension import compute_new_paid_until
from app.economy.subscriptions.provider import SubscriptionProvider
from app.moderation.block_gate import BlockGate

from .models import ReferralRewardOutcome, RewardApplied, RewardSkipped, SkipReason

logger = structlog.get_logger(__name__)

REFERRAL_REREAD_ATTEMPTS = 2


class _RewardAborted(Exception):
    """Raised inside the reward transaction to roll it back with a skip reason."""

    def __init__(self, reason: SkipReason) -> None:
        super().__init__(reason.value)
        self.reason = reason


def _skipped(reason: SkipReason, *, invited_user_id: int) -> RewardSkipped:
    logger.info(
        "referral_reward_skipped",
        invited_user_id=invited_user_id,
        reason=reason.value,
    )
    return RewardSkipped(reason=reason)


async def _load_parties(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    invited_user_id: int,
) -> tuple[User, User] | SkipReason:
    async with session_factory() as session:
        invited = await UsersRepo.get_by_id(session, invited_user_id)
        if invited is None or invited.referred_by_user_id is None:
            return SkipReason.NO_REFERRER
        if invited.referred_by_user_id == invited.id:
            return SkipReason.SELF_REFERRAL

        inviter = await UsersRepo.get_by_id(session, invited.referred_by_user_id)
        if inviter is None:
            return SkipReason.INVITER_NOT_FOUND

        if await BlockGate.is_blocked(session, invited.telegram_user_id):
            return SkipReason.BLOCKED
        if await BlockGate.is_blocked(session, inviter.telegram_user_id):
            return SkipReason.BLOCKED

    return inviter, invited


async def _get_or_create_referral(
    session: AsyncSession,
    *,
    inviter_user_id: int,
    invited_user_id: int,
    now_utc: datetime,
) -> Referral | None:
    referral = await ReferralsRepo.get_by_invited_user_id(session, invited_user_id=invited_user_id)
    if referral is not None:
        return referral

    try:
        async with session.begin_nested():
            return await ReferralsRepo.create(
                session,
                referral=Referral(
                    inviter_user_id=inviter_user_id,
                    invited_user_id=invited_user_id,
                    reward_given=False,
                    created_at=now_utc,
                ),
            )
    except IntegrityError:
        logger.info("referral_create_conflict", invited_user_id=invited_user_id)

    for _ in range(REFERRAL_REREAD_ATTEMPTS):
        referral = await ReferralsRepo.get_by_invited_user_id(
            session,
            invited_user_id=invited_user_id,
        )
        if referral is not None:
            return referral
    return None


async def _apply_reward_tx(
    session: AsyncSession,
    *,
    inviter: User,
    invited: User,
    now_utc: datetime,
    reward_days: int,
) -> tuple[datetime, datetime]:
    flags = await AntiAbuseRegistry.get_or_create_flags_tx(session, invited.telegram_user_id)
    if flags.had_referral_bonus:
        raise _RewardAborted(SkipReason.ANTI_ABUSE)

    referral = await _get_or_create_referral(
        session,
        inviter_user_id=inviter.id,
        invited_user_id=invited.id,
        now_utc=now_utc,
    )
    if referral is None or referral.reward_given:
        raise _RewardAborted(SkipReason.ALREADY_REWARDED)

    subscriptions = await SubscriptionsRepo.list_by_user_ids_for_update(
        session,
        user_ids=(inviter.id, invited.id),
    )
    inviter_subscription = subscriptions.get(inviter.id)
    invited_subscription = subscriptions.get(invited.id)
    if inviter_subscription is None or invited_subscription is None:
        raise _RewardAborted(SkipReason.MISSING_SUBSCRIPTION)

    inviter_paid_until = compute_new_paid_until(
        inviter_subscription,
        now_utc=now_utc,
        extension_days=reward_days,
    )
    invited_paid_until = compute_new_paid_until(
        invited_subscription,
        now_utc=now_utc,
        extension_days=reward_days,
    )
    await SubscriptionsRepo.update_paid_until(
        session,
        subscription_id=inviter_subscription.id,
        paid_until=inviter_paid_until,
        now_utc=now_utc,
    )
    await SubscriptionsRepo.update_paid_until(
        session,
        subscription_id=invited_subscription.id,
        paid_until=invited_paid_until,
        now_utc=now_utc,
    )

    finalized = await ReferralsRepo.mark_reward_given(session, referral_id=referral.id)
    if finalized != 1:
        current = await ReferralsRepo.get_by_invited_user_id(session, invited_user_id=invited.id)
        if current is None:
            raise ReferralRowVanishedError(invited.id)
        raise _RewardAborted(SkipReason.ALREADY_REWARDED)

    await AntiAbuseRegistry.mark_referral_bonus_granted_tx(session, invited.telegram_user_id)
    return inviter_paid_until, invited_paid_until


async def _sync_best_effort(subscriptions: SubscriptionProvider, user: User) -> None:
    try:
        await subscriptions.sync_state(user)
    except Exception:
        logger.exception("referral_reward_sync_failed", user_id=user.id)


async def grant_registration_reward(
    *,
    invited_user_id: int,
    subscriptions: SubscriptionProvider,
    now_utc: datetime,
    session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
    reward_days: int = REFERRAL_REWARD_DAYS,
) -> ReferralRewardOutcome:
    parties = await _load_parties(session_factory, invited_user_id=invited_user_id)
    if isinstance(parties, SkipReason):
        return _skipped(parties, invited_user_id=invited_user_id)
    inviter, invited = parties

    # Provisioning may hit the network, so it never runs inside the reward transaction.
    try:
        await subscriptions.ensure_provisioned(inviter)
        await subscriptions.ensure_provisioned(invited)
    except Exception:
        logger.warning(
            "referral_reward_provisioning_failed",
            invited_user_id=invited.id,
            inviter_user_id=inviter.id,
            exc_info=True,
        )
        return _skipped(SkipReason.MISSING_SUBSCRIPTION, invited_user_id=invited.id)

    try:
        async with session_factory.begin() as session:
            inviter_paid_until, invited_paid_until = await _apply_reward_tx(
                session,
                inviter=inviter,
                invited=invited,
                now_utc=now_utc,
                reward_days=reward_days,
            )
    except _RewardAborted as aborted:
        return _skipped(aborted.reason, invited_user_id=invited.id)

    logger.info(
        "referral_reward_applied",
        invited_user_id=invited.id,
        inviter_user_id=inviter.id,
        reward_days=reward_days,
        inviter_paid_until=inviter_paid_until.isoformat(),
        invited_paid_until=invited_paid_until.isoformat(),
    )

    await _sync_best_effort(subscriptions, inviter)
    await _sync_best_effort(subscriptions, invited)

    return RewardApplied(inviter_identity=inviter.telegram_user_id)
