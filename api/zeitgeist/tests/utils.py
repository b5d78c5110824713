"""Shared builders for store, service, and API tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from zeitgeist.core.config import settings
from zeitgeist.core.security import create_access_token
from zeitgeist.schema.advice import Advice
from zeitgeist.schema.history import AdviceHistory
from zeitgeist.schema.scenario import Scenario
from zeitgeist.schema.user import Tier, UserProfile
from zeitgeist.schema.vibe import Geography, Vibe, VibeCategory, VibeMatch
from zeitgeist.store.base import Store

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def cron_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {settings.cron_secret}"}


def make_vibe(
    vibe_id: str,
    name: str,
    *,
    keywords: list[str] | None = None,
    category: VibeCategory = VibeCategory.TREND,
    strength: float = 0.8,
    age_days: float = 0.0,
    now: datetime = NOW,
    geography: Geography | None = None,
    description: str = "",
    **extra,
) -> Vibe:
    seen = now - timedelta(days=age_days)
    return Vibe(
        id=vibe_id,
        name=name,
        description=description,
        category=category,
        keywords=keywords or [],
        strength=strength,
        timestamp=seen,
        first_seen=seen,
        geography=geography,
        **extra,
    )


async def make_user(store: Store, user_id: str = "user-1", tier: Tier = Tier.FREE, **fields) -> UserProfile:
    return await store.save_user(UserProfile(id=user_id, tier=tier, **fields))


def make_history(
    user_id: str,
    *,
    timestamp: datetime = NOW,
    description: str = "Dinner with coworkers",
    vibes: list[Vibe] | None = None,
    region: str | None = None,
    interests: list[str] | None = None,
    rating: int | None = None,
    was_helpful: bool | None = None,
) -> AdviceHistory:
    scenario = Scenario(description=description)
    matches = [VibeMatch(vibe=vibe, relevance_score=0.5) for vibe in vibes or []]
    advice = Advice(scenario=scenario, matched_vibes=matches, timestamp=timestamp)
    return AdviceHistory(
        user_id=user_id,
        timestamp=timestamp,
        scenario=scenario,
        matched_vibes=[vibe.id for vibe in vibes or []],
        advice=advice,
        region_filter_applied=region,
        interest_boosts_applied=interests or [],
        rating=rating,
        was_helpful=was_helpful,
    )
