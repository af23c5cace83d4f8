from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from app.core.config import get_settings
from app.core.identity import InvalidIdentityError
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.economy.referrals.constants import FRIENDS_PAGE_SIZE_MAX
from app.economy.referrals.service import ReferralService, RewardApplied
from app.economy.subscriptions.provider import build_subscription_provider

from .internal_access import assert_internal_access

router = APIRouter(tags=["internal", "referrals"])


class ReferralRewardResponse(BaseModel):
    status: str
    reason: str | None = None
    inviter_identity: str | None = None


class InvitedFriendResponse(BaseModel):
    invited_identity: str
    invited_created_at: datetime
    reward_given: bool
    referred_at: datetime


class InvitedFriendsPageResponse(BaseModel):
    inviter_user_id: int = Field(gt=0)
    page_size: int = Field(ge=1, le=FRIENDS_PAGE_SIZE_MAX)
    offset: int = Field(ge=0)
    friends: list[InvitedFriendResponse]


@router.post(
    "/internal/referrals/users/{user_id}/reward",
    response_model=ReferralRewardResponse,
)
async def grant_referral_reward(request: Request, user_id: int) -> ReferralRewardResponse:
    settings = get_settings()
    assert_internal_access(request, settings=settings, scope="referrals")

    try:
        outcome = await ReferralService.grant_registration_reward(
            invited_user_id=user_id,
            subscriptions=build_subscription_provider(),
            now_utc=datetime.now(timezone.utc),
            reward_days=settings.referral_reward_days,
        )
    except InvalidIdentityError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_IDENTITY"}) from exc

    if isinstance(outcome, RewardApplied):
        return ReferralRewardResponse(
            status=outcome.status,
            inviter_identity=outcome.inviter_identity,
        )
    return ReferralRewardResponse(status=outcome.status, reason=outcome.reason.value)


@router.get(
    "/internal/referrals/users/{user_id}/friends",
    response_model=InvitedFriendsPageResponse,
)
async def get_invited_friends(
    request: Request,
    user_id: int,
    page_size: int | None = Query(default=None, ge=1, le=FRIENDS_PAGE_SIZE_MAX),
    offset: int = Query(default=0, ge=0),
) -> InvitedFriendsPageResponse:
    settings = get_settings()
    assert_internal_access(request, settings=settings, scope="referrals")

    async with SessionLocal() as session:
        inviter = await UsersRepo.get_by_id(session, user_id)
    if inviter is None:
        raise HTTPException(status_code=404, detail={"code": "E_USER_NOT_FOUND"})

    resolved_page_size = page_size or settings.referral_friends_page_size
    friends = await ReferralService.list_invited_friends(
        inviter_user_id=user_id,
        page_size=resolved_page_size,
        offset=offset,
    )
    return InvitedFriendsPageResponse(
        inviter_user_id=user_id,
        page_size=resolved_page_size,
        offset=offset,
        friends=[
            InvitedFriendResponse(
                invited_identity=friend.invited_identity,
                invited_created_at=friend.invited_created_at,
                reward_given=friend.reward_given,
                referred_at=friend.referred_at,
            )
            for friend in friends
        ],
    )
