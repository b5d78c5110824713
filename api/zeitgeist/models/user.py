"""User profile storage model with quota counters."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from zeitgeist.db.base_class import Base
from zeitgeist.models.vibe import JSON_COMPATIBLE


class UserProfileRecord(Base):
    """Profile row keyed by the auth provider's opaque user id.

    ``query_limit`` is stored alongside ``tier`` so the quota check can be a
    single conditional UPDATE; it is NULL for the unlimited tier.
    """
    __tablename__ = "user_profiles"
    __table_args__ = (
        CheckConstraint(
            "query_limit IS NULL OR queries_this_month <= query_limit",
            name="ck_user_profiles_quota",
        ),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    display_name: Mapped[str | None] = mapped_column(String(100))
    tier: Mapped[str] = mapped_column(String(16), nullable=False, default="free")
    queries_this_month: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    query_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    region: Mapped[str | None] = mapped_column(String(32))
    interests: Mapped[list] = mapped_column(JSON_COMPATIBLE, default=list)
    avoid_topics: Mapped[list] = mapped_column(JSON_COMPATIBLE, default=list)
    conversation_style: Mapped[str] = mapped_column(String(16), nullable=False, default="casual")
    email_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    share_data_for_research: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    onboarding_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    last_active: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
