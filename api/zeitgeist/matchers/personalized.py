"""Matcher that applies profile region, interest, and avoid-topic rules.

Invariants:
- Region and avoid-topic rules are hard filters; interests only boost.
- An interest boost is at most ``1 + interest_boost_max`` times the base score.
- Scores stay in ``[0, 1]`` and the result is ranked deterministically.
"""

from __future__ import annotations

import logging

from zeitgeist.matchers.base import BaseMatcher, MatchResult, confidence_for, rank_matches
from zeitgeist.matchers.scoring import KeywordOverlapScorer, Scorer
from zeitgeist.schema.scenario import Scenario
from zeitgeist.schema.user import Region, UserProfile
from zeitgeist.schema.vibe import Vibe, VibeMatch
from zeitgeist.services import personalization

logger = logging.getLogger("zeitgeist.matchers.personalized")


class PersonalizedMatcher(BaseMatcher):
    name = "personalized"
    description = "Keyword relevance adjusted by the user's region, interests, and avoided topics"

    def __init__(
        self,
        scorer: Scorer | None = None,
        *,
        top_n: int = 20,
        region_threshold: float = 0.2,
        interest_boost_max: float = 0.5,
    ) -> None:
        self.scorer = scorer or KeywordOverlapScorer()
        self.top_n = top_n
        self.region_threshold = region_threshold
        self.interest_boost_max = interest_boost_max

    def _avoid_topics(self, scenario: Scenario, profile: UserProfile | None) -> list[str]:
        topics = list(profile.avoid_topics) if profile else []
        if scenario.preferences:
            topics.extend(scenario.preferences.avoid)
        return topics

    def match(
        self,
        scenario: Scenario,
        candidates: list[Vibe],
        profile: UserProfile | None = None,
    ) -> MatchResult:
        region = profile.region.value if profile and profile.region and profile.region != Region.GLOBAL else None
        interests = list(profile.interests) if profile else []
        avoid_topics = self._avoid_topics(scenario, profile)

        result = MatchResult(region_filter_applied=region)
        boosted: set[str] = set()
        matches: list[VibeMatch] = []
        for vibe in candidates:
            if avoid_topics and personalization.is_topic_avoided(vibe, avoid_topics):
                result.excluded_by_avoid += 1
                continue
            if region and not personalization.meets_regional_threshold(vibe, region, self.region_threshold):
                result.excluded_by_region += 1
                continue

            score, reasoning = self.scorer.score(scenario, vibe)
            if score <= 0:
                continue

            notes = [reasoning] if reasoning else []
            if interests:
                hits = personalization.matched_interests(vibe, interests)
                if hits:
                    fraction = min(1.0, len(hits) / len(interests))
                    score *= 1.0 + fraction * self.interest_boost_max
                    boosted.update(hits)
                    notes.append(f"interest boost {fraction:.0%} ({', '.join(hits)})")
            if region:
                regional = personalization.get_regional_relevance(vibe, region)
                if regional < 1.0:
                    score *= regional
                    notes.append(f"regional relevance {regional:.0%}")

            matches.append(
                VibeMatch(vibe=vibe, relevance_score=round(min(1.0, score), 6), reasoning="; ".join(notes))
            )

        ranked = rank_matches(matches)[: self.top_n]
        result.matches = ranked
        result.confidence = confidence_for(ranked)
        result.interest_boosts_applied = [interest for interest in interests if interest in boosted]
        logger.debug(
            "Matched %d of %d candidates (region excluded %d, avoided %d)",
            len(ranked),
            len(candidates),
            result.excluded_by_region,
            result.excluded_by_avoid,
        )
        return result
