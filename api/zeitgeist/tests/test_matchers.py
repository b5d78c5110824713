"""Keyword and personalized matching, ranking, and the matcher registry."""

from __future__ import annotations

import pytest

from zeitgeist.core.config import settings
from zeitgeist.core.errors import NotFoundError
from zeitgeist.matchers.base import confidence_for
from zeitgeist.matchers.keyword import KeywordMatcher
from zeitgeist.matchers.personalized import PersonalizedMatcher
from zeitgeist.matchers.registry import MatcherRegistry, build_matcher_registry
from zeitgeist.matchers.scoring import tokenize
from zeitgeist.schema.scenario import Scenario, ScenarioPreferences
from zeitgeist.schema.user import Region, UserProfile
from zeitgeist.schema.vibe import Geography, VibeCategory
from zeitgeist.services import decay
from zeitgeist.tests.utils import NOW, make_vibe


def _candidates():
    vibes = [
        make_vibe(
            "fashion",
            "Fashion week street style",
            keywords=["fashion", "outfits", "party"],
            category=VibeCategory.AESTHETIC,
            strength=0.6,
        ),
        make_vibe("tech", "AI gadgets", keywords=["gadgets", "party", "tech"], strength=0.6),
        make_vibe("crypto", "Crypto crash", keywords=["crypto", "party"], strength=0.6),
    ]
    return decay.apply_decay_to_vibes(vibes, NOW)


def test_tokenize_drops_short_words_and_stopwords():
    assert tokenize("The AI party with friends") == {"party", "friends"}


def test_keyword_matcher_drops_zero_overlap():
    scenario = Scenario(description="Quiet evening gardening")
    result = KeywordMatcher().match(scenario, _candidates())
    assert result.matches == []
    assert result.confidence == 0.0


def test_interest_boost_puts_fashion_first():
    scenario = Scenario(description="Going to a party this weekend")
    profile = UserProfile(id="u1", interests=["fashion"])
    result = PersonalizedMatcher().match(scenario, _candidates(), profile)
    assert result.matches[0].vibe.id == "fashion"
    assert result.interest_boosts_applied == ["fashion"]
    base = KeywordMatcher().match(scenario, _candidates())
    base_score = next(m.relevance_score for m in base.matches if m.vibe.id == "fashion")
    boosted = result.matches[0].relevance_score
    assert boosted <= base_score * 1.5 + 1e-6


def test_avoided_topics_are_excluded_entirely():
    scenario = Scenario(description="Going to a party this weekend")
    profile = UserProfile(id="u1", avoid_topics=["crypto"])
    result = PersonalizedMatcher().match(scenario, _candidates(), profile)
    assert "crypto" not in {match.vibe.id for match in result.matches}
    assert result.excluded_by_avoid == 1


def test_scenario_avoid_list_is_merged_with_profile():
    scenario = Scenario(
        description="Going to a party this weekend",
        preferences=ScenarioPreferences(avoid=["gadgets"]),
    )
    result = PersonalizedMatcher().match(scenario, _candidates(), None)
    assert "tech" not in {match.vibe.id for match in result.matches}


def test_region_filter_excludes_low_relevance_vibes():
    local = make_vibe(
        "tokyo",
        "Tokyo party scene",
        keywords=["party"],
        geography=Geography(primary="Asia-Pacific", relevance={"Asia-Pacific": 1.0, "US-West": 0.1}),
    )
    global_vibe = make_vibe("global", "Global party", keywords=["party"], geography=Geography(primary="Global"))
    scenario = Scenario(description="Party tonight")
    profile = UserProfile(id="u1", region=Region.US_WEST)
    result = PersonalizedMatcher(region_threshold=0.2).match(scenario, [local, global_vibe], profile)
    assert [match.vibe.id for match in result.matches] == ["global"]
    assert result.region_filter_applied == "US-West"
    assert result.excluded_by_region == 1


def test_global_profile_region_skips_filtering():
    local = make_vibe(
        "tokyo",
        "Tokyo party scene",
        keywords=["party"],
        geography=Geography(primary="Asia-Pacific", relevance={"Asia-Pacific": 1.0}),
    )
    profile = UserProfile(id="u1", region=Region.GLOBAL)
    result = PersonalizedMatcher().match(Scenario(description="Party tonight"), [local], profile)
    assert result.region_filter_applied is None
    assert len(result.matches) == 1


def test_ranking_is_deterministic_on_ties():
    vibes = [make_vibe(vid, "Party", keywords=["party"], strength=0.5) for vid in ("b", "a", "c")]
    result = KeywordMatcher().match(Scenario(description="party"), decay.apply_decay_to_vibes(vibes, NOW))
    assert [match.vibe.id for match in result.matches] == ["a", "b", "c"]


def test_confidence_scales_with_coverage():
    vibes = [make_vibe("a", "Party", keywords=["party"], strength=1.0)]
    result = KeywordMatcher().match(Scenario(description="party"), decay.apply_decay_to_vibes(vibes, NOW))
    assert result.confidence == pytest.approx(confidence_for(result.matches))
    assert result.confidence == pytest.approx(result.matches[0].relevance_score / 5, abs=1e-4)


def test_registry_defaults_to_personalized():
    registry = build_matcher_registry(settings)
    assert registry.default.name == "personalized"
    assert registry.names() == ["keyword", "personalized"]
    with pytest.raises(NotFoundError):
        registry.get("semantic")


def test_registry_rejects_duplicate_names():
    registry = MatcherRegistry()
    registry.register(KeywordMatcher())
    with pytest.raises(ValueError):
        registry.register(KeywordMatcher())
    result = registry.match_with("keyword", Scenario(description="party"), _candidates())
    assert len(result.matches) == 3
