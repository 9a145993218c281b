"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from oncoshare.db.base import Base
from oncoshare.db.enums import DEFAULT_FEED_STATUS
from oncoshare.db.models._defaults import utcnow


class FeedPost(Base):
    """Announcement post. ``clinic_id`` NULL means a global post."""

    __tablename__ = "feed_posts"
    __table_args__ = (
        Index("feed_posts_status_idx", "status"),
        Index("feed_posts_clinic_idx", "clinic_id"),
        Index("feed_posts_created_idx", "created_at", "id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)  # markdown
    status: Mapped[str] = mapped_column(
        String(16), default=DEFAULT_FEED_STATUS, nullable=False
    )
    clinic_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clinics.id", ondelete="CASCADE"), nullable=True
    )
    author_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(nullable=True)
    # Cursor pagination key
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
