"""Temporal decay of vibe relevance.

Invariants:
- Relevance is recomputed from ``strength`` and ``first_seen`` (or ``timestamp``);
  a previously cached ``current_relevance`` is never an input.
- ``0 <= relevance <= strength`` and relevance is non-increasing with age.
- Batch helpers return copies in input order; shared vibes are never mutated.
"""

from __future__ import annotations

from datetime import datetime, timezone

from zeitgeist.schema.vibe import Sentiment, TemporalStats, Vibe, VibeCategory
from zeitgeist.utils.datetime import ensure_utc

DEFAULT_HALF_LIVES: dict[VibeCategory, float] = {
    VibeCategory.MEME: 3,
    VibeCategory.EVENT: 7,
    VibeCategory.TREND: 14,
    VibeCategory.TOPIC: 21,
    VibeCategory.SENTIMENT: 30,
    VibeCategory.AESTHETIC: 60,
    VibeCategory.MOVEMENT: 90,
    VibeCategory.CUSTOM: 14,
}
FALLBACK_HALF_LIFE = 14.0
FRESH_WINDOW_DAYS = 1 / 24
INVALID_HALF_LIFE_FACTOR = 0.01
DECAYED_THRESHOLD = 0.05
SECONDS_PER_DAY = 86400


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def age_in_days(vibe: Vibe, now: datetime | None = None) -> float:
    """Days elapsed since the vibe was first observed."""
    reference = ensure_utc(now or _utcnow())
    return (reference - ensure_utc(vibe.observed_at)).total_seconds() / SECONDS_PER_DAY


def half_life_for(vibe: Vibe) -> float:
    """Explicit half-life if set, otherwise the category default."""
    if vibe.half_life is not None:
        return vibe.half_life
    return DEFAULT_HALF_LIVES.get(vibe.category, FALLBACK_HALF_LIFE)


def calculate_decay(vibe: Vibe, now: datetime | None = None) -> float:
    """Return ``strength * 0.5 ** (age / half_life)`` clamped to ``[0, strength]``."""
    strength = max(0.0, min(1.0, vibe.strength))
    age = age_in_days(vibe, now)
    if age < FRESH_WINDOW_DAYS:
        return strength
    half_life = half_life_for(vibe)
    if half_life <= 0:
        return strength * INVALID_HALF_LIFE_FACTOR
    relevance = strength * (0.5 ** (age / half_life))
    return max(0.0, min(strength, relevance))


def decay(vibe: Vibe, now: datetime | None = None) -> Vibe:
    """Return a copy of ``vibe`` with ``current_relevance`` recomputed."""
    return vibe.model_copy(update={"current_relevance": calculate_decay(vibe, now)})


def apply_decay_to_vibes(vibes: list[Vibe], now: datetime | None = None) -> list[Vibe]:
    """Decay a batch against one instant, preserving order and cardinality."""
    reference = now or _utcnow()
    return [decay(vibe, reference) for vibe in vibes]


def filter_decayed_vibes(
    vibes: list[Vibe], threshold: float = DECAYED_THRESHOLD, now: datetime | None = None
) -> list[Vibe]:
    """Decay a batch and drop vibes whose relevance fell below ``threshold``."""
    return [vibe for vibe in apply_decay_to_vibes(vibes, now) if (vibe.current_relevance or 0.0) >= threshold]


def sort_by_relevance(vibes: list[Vibe], now: datetime | None = None) -> list[Vibe]:
    """Decay a batch and order it by relevance, then id for stable output."""
    decayed = apply_decay_to_vibes(vibes, now)
    return sorted(decayed, key=lambda vibe: (-(vibe.current_relevance or 0.0), vibe.id))


def temporal_stats(vibes: list[Vibe], now: datetime | None = None) -> TemporalStats:
    """Summarize a batch into relevance bands and averages."""
    if not vibes:
        return TemporalStats()
    reference = now or _utcnow()
    relevances = [calculate_decay(vibe, reference) for vibe in vibes]
    ages = [max(0.0, age_in_days(vibe, reference)) for vibe in vibes]
    return TemporalStats(
        total=len(vibes),
        high_relevance=sum(1 for value in relevances if value > 0.7),
        moderate_relevance=sum(1 for value in relevances if 0.3 < value <= 0.7),
        low_relevance=sum(1 for value in relevances if DECAYED_THRESHOLD < value <= 0.3),
        decayed=sum(1 for value in relevances if value <= DECAYED_THRESHOLD),
        average_age_days=round(sum(ages) / len(ages), 3),
        average_relevance=round(sum(relevances) / len(relevances), 4),
    )


def suggest_half_life(vibe: Vibe) -> float:
    """Estimate a half-life from category, strength, sentiment, and source breadth."""
    base = DEFAULT_HALF_LIVES.get(vibe.category, FALLBACK_HALF_LIFE)
    strength = max(0.0, min(1.0, vibe.strength))
    strength_multiplier = 0.7 + strength * 0.6
    sentiment_multiplier = 0.8 if vibe.sentiment == Sentiment.MIXED else 1.0
    source_multiplier = min(1.5, 1.0 + len(vibe.sources) * 0.05)
    return max(1.0, base * strength_multiplier * sentiment_multiplier * source_multiplier)


def _union(first: list[str], second: list[str]) -> list[str]:
    merged = list(first)
    for value in second:
        if value not in merged:
            merged.append(value)
    return merged


def merge_vibe_occurrence(existing: Vibe, observed: Vibe, now: datetime | None = None) -> Vibe:
    """Fold a re-observation into an existing vibe.

    Strength is fixed at creation and is left alone; the repeat only moves
    ``last_seen`` and widens the keyword, source, and domain sets.
    ``first_seen`` is kept so age keeps counting from the original sighting.
    """
    reference = ensure_utc(now or _utcnow())
    merged = existing.model_copy(
        update={
            "last_seen": reference,
            "first_seen": existing.first_seen or existing.timestamp,
            "keywords": _union(existing.keywords, observed.keywords),
            "sources": _union(existing.sources, observed.sources),
            "related_vibes": _union(existing.related_vibes, observed.related_vibes),
            "domains": _union(existing.domains, observed.domains),
        }
    )
    return decay(merged, reference)
