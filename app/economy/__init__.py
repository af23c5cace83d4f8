from app.economy.anti_abuse import AntiAbuseRegistry
from app.economy.referrals import ReferralService

__all__ = [
    "AntiAbuseRegistry",
    "ReferralService",
]
