"""Advice request/response schemas."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from zeitgeist.schema.quota import RateLimitInfo
from zeitgeist.schema.scenario import Scenario
from zeitgeist.schema.vibe import VibeMatch


class Recommendations(BaseModel):
    topics: list[str] = Field(default_factory=list)
    behavior: list[str] = Field(default_factory=list)
    style: list[str] = Field(default_factory=list)


class Advice(BaseModel):
    """Ranked vibes plus recommendations for one scenario."""
    scenario: Scenario
    matched_vibes: list[VibeMatch] = Field(default_factory=list)
    recommendations: Recommendations = Field(default_factory=Recommendations)
    reasoning: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AdviceRequest(BaseModel):
    scenario: Scenario


class Personalization(BaseModel):
    """Which personalization steps shaped the result."""
    region_filter_applied: str | None = None
    interest_boosts_applied: list[str] = Field(default_factory=list)
    avoided_topics: int = 0


class AdviceResponse(BaseModel):
    advice: Advice
    history_id: str | None = None
    personalization: Personalization | None = None
    usage: RateLimitInfo | None = None
