"""Vibe storage model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from zeitgeist.db.base_class import Base

JSON_COMPATIBLE = JSON().with_variant(JSONB, "postgresql")


class VibeRecord(Base):
    """Persisted cultural signal; ``current_relevance`` is a cache only."""
    __tablename__ = "vibes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    keywords: Mapped[list] = mapped_column(JSON_COMPATIBLE, default=list)
    strength: Mapped[float] = mapped_column(Float, nullable=False)
    sentiment: Mapped[str] = mapped_column(String(16), nullable=False, default="neutral")
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    first_seen: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_seen: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    half_life: Mapped[float | None] = mapped_column(Float)
    current_relevance: Mapped[float | None] = mapped_column(Float)
    sources: Mapped[list] = mapped_column(JSON_COMPATIBLE, default=list)
    related_vibes: Mapped[list] = mapped_column(JSON_COMPATIBLE, default=list)
    domains: Mapped[list] = mapped_column(JSON_COMPATIBLE, default=list)
    geography: Mapped[dict | None] = mapped_column(JSON_COMPATIBLE)
