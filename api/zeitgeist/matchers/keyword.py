"""Unpersonalized keyword matcher."""

from __future__ import annotations

from zeitgeist.matchers.base import BaseMatcher, MatchResult, confidence_for, rank_matches
from zeitgeist.matchers.scoring import KeywordOverlapScorer, Scorer
from zeitgeist.schema.scenario import Scenario
from zeitgeist.schema.user import UserProfile
from zeitgeist.schema.vibe import Vibe, VibeMatch


class KeywordMatcher(BaseMatcher):
    """Ranks vibes purely by scorer output; the profile is ignored."""
    name = "keyword"
    description = "Keyword overlap between scenario and vibe text"

    def __init__(self, scorer: Scorer | None = None, top_n: int = 20) -> None:
        self.scorer = scorer or KeywordOverlapScorer()
        self.top_n = top_n

    def match(
        self,
        scenario: Scenario,
        candidates: list[Vibe],
        profile: UserProfile | None = None,
    ) -> MatchResult:
        matches: list[VibeMatch] = []
        for vibe in candidates:
            score, reasoning = self.scorer.score(scenario, vibe)
            if score > 0:
                matches.append(VibeMatch(vibe=vibe, relevance_score=score, reasoning=reasoning))
        ranked = rank_matches(matches)[: self.top_n]
        return MatchResult(matches=ranked, confidence=confidence_for(ranked))
