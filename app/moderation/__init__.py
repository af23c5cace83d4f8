from .block_gate import BlockedIdentitySnapshot, BlockGate
from .errors import IdentityBlockedError, ModerationError
from .service import BlockResult, ModerationService

__all__ = [
    "BlockGate",
    "BlockResult",
    "BlockedIdentitySnapshot",
    "IdentityBlockedError",
    "ModerationError",
    "ModerationService",
]
