from __future__ import annotations

import re

IDENTITY_RE = re.compile(r"\d{1,20}", re.ASCII)


class InvalidIdentityError(ValueError):
    def __init__(self, raw_identity: object) -> None:
        super().__init__(f"invalid identity: {raw_identity!r}")
        self.raw_identity = raw_identity


def normalize_identity(raw_identity: str) -> int:
    if not isinstance(raw_identity, str):
        raise InvalidIdentityError(raw_identity)
    candidate = raw_identity.strip()
    if IDENTITY_RE.fullmatch(candidate) is None:
        raise InvalidIdentityError(raw_identity)
    return int(candidate)


def is_valid_identity(raw_identity: str | None) -> bool:
    if raw_identity is None:
        return False
    try:
        normalize_identity(raw_identity)
    except InvalidIdentityError:
        return False
    return True
