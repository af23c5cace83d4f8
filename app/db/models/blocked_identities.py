from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base
from app.db.models.types import IdentityKey


class BlockedIdentity(Base):
    __tablename__ = "blocked_identities"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    identity: Mapped[int] = mapped_column(IdentityKey(), unique=True, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
