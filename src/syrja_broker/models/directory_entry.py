"""SQLAlchemy model for human-readable id directory records."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from syrja_broker.db.session import Base
from syrja_broker.db.time import ensure_aware


class DirectoryEntry(Base):
    """Short id mapped to an invite code and the public key that claimed it.

    Temporary entries carry ``expires_at``; permanent ones never expire.
    """

    __tablename__ = "directory_entry"

    # Literal id as claimed, namespace prefix included (e.g. "syrja/alice").
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    invite_code: Mapped[str] = mapped_column(Text, nullable=False)
    owner_pubkey: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    permanent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def is_expired(self, now: datetime) -> bool:
        """Return True if this is a temporary entry whose TTL has elapsed."""
        if self.permanent or self.expires_at is None:
            return False
        return ensure_aware(self.expires_at) <= now
