from app.db.repo.anti_abuse_repo import AntiAbuseRepo
from app.db.repo.blocked_identities_repo import BlockedIdentitiesRepo
from app.db.repo.referrals_repo import ReferralsRepo
from app.db.repo.subscriptions_repo import SubscriptionsRepo
from app.db.repo.users_repo import UsersRepo

__all__ = [
    "AntiAbuseRepo",
    "BlockedIdentitiesRepo",
    "ReferralsRepo",
    "SubscriptionsRepo",
    "UsersRepo",
]
