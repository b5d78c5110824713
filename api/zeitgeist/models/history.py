"""Advice history and monthly metric storage models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from zeitgeist.db.base_class import Base
from zeitgeist.models.vibe import JSON_COMPATIBLE


class AdviceHistoryRecord(Base):
    """One advice request; ``pk`` preserves insertion order for tie-breaking."""
    __tablename__ = "advice_history"
    __table_args__ = (Index("ix_advice_history_user_timestamp", "user_id", "timestamp"),)

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    scenario: Mapped[dict] = mapped_column(JSON_COMPATIBLE, nullable=False)
    matched_vibes: Mapped[list] = mapped_column(JSON_COMPATIBLE, default=list)
    advice: Mapped[dict] = mapped_column(JSON_COMPATIBLE, nullable=False)
    region_filter_applied: Mapped[str | None] = mapped_column(String(32))
    interest_boosts_applied: Mapped[list] = mapped_column(JSON_COMPATIBLE, default=list)
    rating: Mapped[int | None] = mapped_column(Integer)
    feedback: Mapped[str | None] = mapped_column(Text())
    was_helpful: Mapped[bool | None] = mapped_column(Boolean)


class MonthlyMetricRecord(Base):
    """Derived per-user monthly aggregate; rewritten wholesale on each run."""
    __tablename__ = "monthly_metrics"
    __table_args__ = (UniqueConstraint("user_id", "month", name="uq_monthly_metric_user_month"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    month: Mapped[str] = mapped_column(String(7), nullable=False)
    queries_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    top_regions_queried: Mapped[dict] = mapped_column(JSON_COMPATIBLE, default=dict)
    top_interest_matches: Mapped[dict] = mapped_column(JSON_COMPATIBLE, default=dict)
    average_rating: Mapped[float | None] = mapped_column(Float)
