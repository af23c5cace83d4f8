from app.db.models.anti_abuse_registry import AntiAbuseRegistryEntry
from app.db.models.blocked_identities import BlockedIdentity
from app.db.models.referrals import Referral
from app.db.models.subscriptions import Subscription
from app.db.models.users import User

__all__ = [
    "AntiAbuseRegistryEntry",
    "BlockedIdentity",
    "Referral",
    "Subscription",
    "User",
]
