"""Favorite storage model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from zeitgeist.db.base_class import Base
from zeitgeist.models.vibe import JSON_COMPATIBLE


class FavoriteRecord(Base):
    """Bookmarked vibe or advice entry, unique per user/type/reference."""
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "type", "reference_id", name="uq_favorite_per_user_reference"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    reference_id: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    note: Mapped[str | None] = mapped_column(Text())
    metadata_payload: Mapped[dict | None] = mapped_column("metadata", JSON_COMPATIBLE)
