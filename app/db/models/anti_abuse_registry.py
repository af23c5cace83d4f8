from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base
from app.db.models.types import IdentityKey


class AntiAbuseRegistryEntry(Base):
    __tablename__ = "anti_abuse_registry"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    identity: Mapped[int] = mapped_column(IdentityKey(), unique=True, nullable=False)
    had_trial: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    had_referral_bonus: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
