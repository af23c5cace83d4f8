from __future__ import annotations

from app.economy.referrals.constants import START_PAYLOAD_REFERRAL_RE


def extract_inviter_identity_from_start_payload(start_payload: str | None) -> str | None:
    if not start_payload:
        return None
    matched = START_PAYLOAD_REFERRAL_RE.fullmatch(start_payload.strip())
    if matched is None:
        return None
    return matched.group(1)
