from __future__ import annotations

from .models import (
    InvitedFriend,
    ReferralRewardOutcome,
    RewardApplied,
    RewardSkipped,
    SkipReason,
)
from .queries import list_invited_friends
from .registration import extract_inviter_identity_from_start_payload
from .rewards_grant import grant_registration_reward


class ReferralService:
    extract_inviter_identity_from_start_payload = staticmethod(
        extract_inviter_identity_from_start_payload
    )
    grant_registration_reward = staticmethod(grant_registration_reward)
    list_invited_friends = staticmethod(list_invited_friends)


__all__ = [
    "InvitedFriend",
    "ReferralRewardOutcome",
    "ReferralService",
    "RewardApplied",
    "RewardSkipped",
    "SkipReason",
]
