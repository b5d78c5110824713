from __future__ import annotations

import logging

import pytest

from zeitgeist.core.errors import QuotaExceeded
from zeitgeist.schema.scenario import Scenario, ScenarioPreferences
from zeitgeist.schema.user import ConversationStyle, Region, Tier
from zeitgeist.schema.vibe import Geography, VibeCategory
from zeitgeist.services import advice_service
from zeitgeist.tests.utils import NOW, make_history, make_user, make_vibe


async def _seed_vibes(store):
    await store.save_vibe(make_vibe("v1", "Office dinner etiquette", keywords=["dinner", "coworkers"]))
    await store.save_vibe(
        make_vibe("v2", "Quiet luxury", keywords=["dinner", "fashion"], category=VibeCategory.AESTHETIC)
    )
    await store.save_vibe(make_vibe("v3", "Election chatter", keywords=["politics", "dinner"]))
    await store.save_vibe(make_vibe("v4", "Faded meme", keywords=["dinner"], age_days=400))


@pytest.mark.asyncio
async def test_signed_in_request_consumes_quota_and_builds_history(store, matchers):
    await _seed_vibes(store)
    profile = await make_user(store, "alice", interests=["fashion"])

    outcome = await advice_service.generate_advice(
        store, matchers, Scenario(description="Dinner with coworkers"), profile, now=NOW
    )

    assert outcome.rate_limit.used == 1
    assert outcome.rate_limit.remaining == 4
    assert (await store.get_user("alice")).queries_this_month == 1
    ids = [match.vibe.id for match in outcome.response.advice.matched_vibes]
    assert "v4" not in ids
    assert set(ids) == {"v1", "v2", "v3"}
    assert outcome.response.personalization.interest_boosts_applied == ["fashion"]
    assert outcome.history_entry.id == outcome.response.history_id
    assert outcome.history_entry.matched_vibes == ids
    # History is written by the caller, not during generation.
    assert await store.get_advice_history("alice") == []


@pytest.mark.asyncio
async def test_avoided_topics_are_reported(store, matchers):
    await _seed_vibes(store)
    profile = await make_user(store, "alice", avoid_topics=["politics"])
    scenario = Scenario(
        description="Dinner with coworkers",
        preferences=ScenarioPreferences(avoid=["fashion"], conversation_style=ConversationStyle.ACADEMIC),
    )
    outcome = await advice_service.generate_advice(store, matchers, scenario, profile, now=NOW)

    ids = [match.vibe.id for match in outcome.response.advice.matched_vibes]
    assert ids == ["v1"]
    assert outcome.response.personalization.avoided_topics == 2


@pytest.mark.asyncio
async def test_region_filter_is_reported(store, matchers):
    await store.save_vibe(
        make_vibe(
            "local",
            "Tokyo cafe dinner",
            keywords=["dinner"],
            geography=Geography(primary="Asia-Pacific", relevance={"Asia-Pacific": 0.9, "US-West": 0.1}),
        )
    )
    await store.save_vibe(make_vibe("global", "Dinner party revival", keywords=["dinner"]))
    profile = await make_user(store, "alice", region=Region.US_WEST)

    outcome = await advice_service.generate_advice(
        store, matchers, Scenario(description="Dinner tonight"), profile, now=NOW
    )
    assert [match.vibe.id for match in outcome.response.advice.matched_vibes] == ["global"]
    assert outcome.response.personalization.region_filter_applied == "US-West"


@pytest.mark.asyncio
async def test_anonymous_requests_are_not_metered(store, matchers):
    await _seed_vibes(store)
    outcome = await advice_service.generate_advice(store, matchers, Scenario(description="Dinner with coworkers"), now=NOW)
    assert outcome.rate_limit is None
    assert outcome.history_entry is None
    assert outcome.response.history_id is None
    assert outcome.response.advice.matched_vibes


@pytest.mark.asyncio
async def test_exhausted_quota_stops_before_matching(store, matchers):
    await _seed_vibes(store)
    profile = await make_user(store, "alice", Tier.FREE)
    for _ in range(5):
        await store.increment_query_count("alice")
    with pytest.raises(QuotaExceeded) as excinfo:
        await advice_service.generate_advice(store, matchers, Scenario(description="Dinner"), profile, now=NOW)
    assert excinfo.value.limit == 5
    assert excinfo.value.remaining == 0


@pytest.mark.asyncio
async def test_no_matches_still_produces_advice(store, matchers):
    profile = await make_user(store, "alice", Tier.UNLIMITED)
    outcome = await advice_service.generate_advice(
        store, matchers, Scenario(description="Birdwatching alone"), profile, now=NOW
    )
    assert outcome.response.advice.matched_vibes == []
    assert outcome.response.advice.confidence == 0.0
    assert "No current vibes matched" in outcome.response.advice.reasoning
    assert outcome.rate_limit.limit is None


@pytest.mark.asyncio
async def test_persist_history_logs_failures(store, caplog, monkeypatch):
    async def broken_save(entry):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store, "save_advice_history", broken_save)
    caplog.set_level(logging.ERROR, logger="zeitgeist.services.advice_service")

    await advice_service.persist_history(store, make_history("alice"))
    assert "Failed to save advice history" in caplog.text
