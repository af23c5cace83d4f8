from .service import AntiAbuseRegistry
from .types import AntiAbuseFlags

__all__ = ["AntiAbuseFlags", "AntiAbuseRegistry"]
