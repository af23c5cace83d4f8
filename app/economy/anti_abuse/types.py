from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AntiAbuseFlags:
    had_trial: bool
    had_referral_bonus: bool
