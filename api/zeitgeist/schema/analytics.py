"""Monthly metric and insight schemas."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from zeitgeist.schema.base import CountItem


class MonthlyMetric(BaseModel):
    """Per-user, per-month aggregate derived from advice history."""
    user_id: str
    month: str = Field(pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    queries_count: int = 0
    top_regions_queried: dict[str, int] = Field(default_factory=dict)
    top_interest_matches: dict[str, int] = Field(default_factory=dict)
    average_rating: float | None = None


class VibeCount(BaseModel):
    id: str
    name: str
    count: int


class HourCount(BaseModel):
    hour: int
    count: int


class DayCount(BaseModel):
    date: date
    count: int


class UsagePatterns(BaseModel):
    busiest_days: list[CountItem] = Field(default_factory=list)
    busiest_hours: list[HourCount] = Field(default_factory=list)
    timeline: list[DayCount] = Field(default_factory=list)


class Satisfaction(BaseModel):
    average_rating: float | None = None
    total_ratings: int = 0
    rating_distribution: dict[int, int] = Field(default_factory=lambda: {score: 0 for score in range(1, 6)})
    helpful_percentage: float = 0.0


class Trends(BaseModel):
    query_growth: float = 0.0
    satisfaction_trend: Literal["up", "down", "stable"] = "stable"
    emerging_interests: list[str] = Field(default_factory=list)


class UserInsights(BaseModel):
    """Cross-month summary of a user's advice history."""
    total_queries: int = 0
    queries_this_month: int = 0
    queries_last_month: int = 0
    top_interests: list[CountItem] = Field(default_factory=list)
    top_regions: list[CountItem] = Field(default_factory=list)
    top_matched_vibes: list[VibeCount] = Field(default_factory=list)
    top_scenarios: list[CountItem] = Field(default_factory=list)
    usage: UsagePatterns = Field(default_factory=UsagePatterns)
    satisfaction: Satisfaction = Field(default_factory=Satisfaction)
    trends: Trends = Field(default_factory=Trends)


class InsightsSummary(BaseModel):
    summary: str
    patterns: list[str] = Field(default_factory=list)


class AggregationReport(BaseModel):
    users_processed: int = 0
    metrics_written: int = 0
    failures: int = 0
