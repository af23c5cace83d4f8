class ModerationError(Exception):
    pass


class IdentityBlockedError(ModerationError):
    def __init__(self, identity: int, reason: str | None = None) -> None:
        super().__init__(f"identity {identity} is blocked")
        self.identity = identity
        self.reason = reason
