"""Matcher primitives shared by every ranking strategy."""

from __future__ import annotations

from dataclasses import dataclass, field

from zeitgeist.schema.scenario import Scenario
from zeitgeist.schema.user import UserProfile
from zeitgeist.schema.vibe import Vibe, VibeMatch

CONFIDENCE_TOP_K = 5


@dataclass(slots=True)
class MatchResult:
    """Ranked matches plus the personalization steps that shaped them."""
    matches: list[VibeMatch] = field(default_factory=list)
    confidence: float = 0.0
    region_filter_applied: str | None = None
    interest_boosts_applied: list[str] = field(default_factory=list)
    excluded_by_region: int = 0
    excluded_by_avoid: int = 0


def rank_matches(matches: list[VibeMatch]) -> list[VibeMatch]:
    """Sort by score, then current relevance, then id, all deterministic."""
    return sorted(
        matches,
        key=lambda match: (
            -match.relevance_score,
            -(match.vibe.current_relevance or 0.0),
            match.vibe.id,
        ),
    )


def confidence_for(matches: list[VibeMatch], top_k: int = CONFIDENCE_TOP_K) -> float:
    """Mean of the top-K scores scaled by how many of the K slots are filled."""
    if not matches or top_k <= 0:
        return 0.0
    top = [match.relevance_score for match in matches[:top_k]]
    mean = sum(top) / len(top)
    coverage = len(top) / top_k
    return round(max(0.0, min(1.0, mean * coverage)), 4)


class BaseMatcher:
    """Abstract matcher interface; implementations never touch the store."""
    name: str = "base"
    description: str = ""

    def match(
        self,
        scenario: Scenario,
        candidates: list[Vibe],
        profile: UserProfile | None = None,
    ) -> MatchResult:
        """Rank ``candidates`` for ``scenario``; empty output is a valid result."""
        raise NotImplementedError
