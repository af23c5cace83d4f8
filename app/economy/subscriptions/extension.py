from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol

UTC = timezone.utc


class SubscriptionDates(Protocol):
    paid_until: datetime | None
    expires_at: datetime | None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def compute_new_paid_until(
    subscription: SubscriptionDates,
    *,
    now_utc: datetime,
    extension_days: int,
) -> datetime:
    """Stack ``extension_days`` on top of the later of paid time and hard expiry.

    Dates in the past are ignored, so the result is never earlier than
    ``now_utc + extension_days`` and never shortens an existing subscription.
    """
    now = _as_utc(now_utc)
    base = now
    if subscription.paid_until is not None:
        paid_until = _as_utc(subscription.paid_until)
        if paid_until > now:
            base = paid_until
    if subscription.expires_at is not None:
        expires_at = _as_utc(subscription.expires_at)
        if expires_at > now and expires_at > base:
            base = expires_at
    return base + timedelta(days=extension_days)
