from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal, TypeAlias


class SkipReason(str, Enum):
    NO_REFERRER = "no_referrer"
    INVITER_NOT_FOUND = "inviter_not_found"
    SELF_REFERRAL = "self_referral"
    ALREADY_REWARDED = "already_rewarded"
    MISSING_SUBSCRIPTION = "missing_subscription"
    BLOCKED = "blocked"
    ANTI_ABUSE = "anti_abuse"


@dataclass(frozen=True, slots=True)
class RewardApplied:
    inviter_identity: str
    status: Literal["applied"] = "applied"


@dataclass(frozen=True, slots=True)
class RewardSkipped:
    reason: SkipReason
    status: Literal["skipped"] = "skipped"


ReferralRewardOutcome: TypeAlias = RewardApplied | RewardSkipped


@dataclass(frozen=True, slots=True)
class InvitedFriend:
    invited_identity: str
    invited_created_at: datetime
    reward_given: bool
    referred_at: datetime
