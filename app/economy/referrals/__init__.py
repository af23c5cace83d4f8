from .service import (
    InvitedFriend,
    ReferralRewardOutcome,
    ReferralService,
    RewardApplied,
    RewardSkipped,
    SkipReason,
)

__all__ = [
    "InvitedFriend",
    "ReferralRewardOutcome",
    "ReferralService",
    "RewardApplied",
    "RewardSkipped",
    "SkipReason",
]
