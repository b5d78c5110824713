"""Advice history schemas."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zeitgeist.schema.advice import Advice
from zeitgeist.schema.base import CountItem, ORMModel
from zeitgeist.schema.scenario import Scenario
from zeitgeist.utils.datetime import ensure_utc


class AdviceHistory(ORMModel):
    """One persisted advice request owned by ``user_id``."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    scenario: Scenario
    matched_vibes: list[str] = Field(default_factory=list)
    advice: Advice
    region_filter_applied: str | None = None
    interest_boosts_applied: list[str] = Field(default_factory=list)
    rating: int | None = Field(default=None, ge=1, le=5)
    feedback: str | None = None
    was_helpful: bool | None = None

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class HistoryFeedback(BaseModel):
    """Owner-supplied rating/feedback for a history entry."""

    model_config = ConfigDict(extra="forbid")

    rating: int | None = Field(default=None, ge=1, le=5, strict=True)
    feedback: str | None = Field(default=None, max_length=2000)
    was_helpful: bool | None = None


class HistoryStats(BaseModel):
    total: int = 0
    rated: int = 0
    average_rating: float | None = None
    helpful: int = 0
    top_scenarios: list[CountItem] = Field(default_factory=list)
    top_vibes: list[CountItem] = Field(default_factory=list)
