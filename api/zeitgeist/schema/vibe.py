"""Vibe records: cultural signals ranked by the matcher."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from zeitgeist.schema.base import ORMModel
from zeitgeist.utils.datetime import ensure_utc


class VibeCategory(str, Enum):
    TREND = "trend"
    TOPIC = "topic"
    AESTHETIC = "aesthetic"
    SENTIMENT = "sentiment"
    EVENT = "event"
    MOVEMENT = "movement"
    MEME = "meme"
    CUSTOM = "custom"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


class Geography(BaseModel):
    """Where a vibe was observed and how relevant it is per region."""
    primary: str = "Global"
    relevance: dict[str, float] = Field(default_factory=dict)
    detected_from: list[str] = Field(default_factory=list)


class Vibe(ORMModel):
    """A cultural signal with an immutable strength and a derived relevance."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    category: VibeCategory = VibeCategory.CUSTOM
    keywords: list[str] = Field(default_factory=list)
    strength: float = Field(ge=0.0, le=1.0)
    sentiment: Sentiment = Sentiment.NEUTRAL
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    first_seen: datetime | None = None
    last_seen: datetime | None = None
    half_life: float | None = None
    current_relevance: float | None = None
    sources: list[str] = Field(default_factory=list)
    related_vibes: list[str] = Field(default_factory=list)
    domains: list[str] = Field(default_factory=list)
    geography: Geography | None = None

    @field_validator("timestamp", "first_seen", "last_seen")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value else value

    @property
    def observed_at(self) -> datetime:
        """Instant decay is measured from."""
        return self.first_seen or self.timestamp


class VibeMatch(BaseModel):
    """A ranked vibe with its final score and a short explanation."""
    vibe: Vibe
    relevance_score: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""


class TemporalStats(BaseModel):
    """Relevance bands and averages for a batch of vibes."""
    total: int = 0
    high_relevance: int = 0
    moderate_relevance: int = 0
    low_relevance: int = 0
    decayed: int = 0
    average_age_days: float = 0.0
    average_relevance: float = 0.0
