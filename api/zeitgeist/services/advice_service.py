"""Advice generation: quota, candidate retrieval, matching, and recommendations.

Implementation notes:
- Quota is consumed before any matching work so an exhausted user costs nothing.
- Anonymous requests are never metered and never produce history.
- History persistence is returned to the caller as a deferred step; failures
  there are logged and never reach the response.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from zeitgeist.core.config import settings
from zeitgeist.matchers.base import MatchResult
from zeitgeist.matchers.registry import MatcherRegistry
from zeitgeist.schema.advice import Advice, AdviceResponse, Personalization, Recommendations
from zeitgeist.schema.history import AdviceHistory
from zeitgeist.schema.quota import RateLimitInfo
from zeitgeist.schema.scenario import Formality, Scenario
from zeitgeist.schema.user import UserProfile
from zeitgeist.schema.vibe import Sentiment, Vibe, VibeCategory
from zeitgeist.services import decay, history_service, quota_service
from zeitgeist.services.personalization import conversation_style_instruction
from zeitgeist.store.base import Store

logger = logging.getLogger("zeitgeist.services.advice_service")

RECOMMENDATION_DEPTH = 5

BEHAVIOR_TEMPLATES: dict[Sentiment, str] = {
    Sentiment.POSITIVE: "Bring up {name} with enthusiasm; people are excited about it.",
    Sentiment.NEUTRAL: "Mention {name} as a low-stakes conversation starter.",
    Sentiment.NEGATIVE: "Tread carefully around {name}; listen before sharing opinions.",
    Sentiment.MIXED: "Acknowledge that opinions on {name} are divided before weighing in.",
}

FORMALITY_STYLE: dict[Formality, str] = {
    Formality.CASUAL: "Relaxed, expressive outfits work well here.",
    Formality.BUSINESS_CASUAL: "Keep it polished but comfortable; one current detail is enough.",
    Formality.FORMAL: "Stay classic and let trends show only in small accents.",
}


@dataclass(slots=True)
class AdviceOutcome:
    """Everything a request produced, including the history entry still to be saved."""
    response: AdviceResponse
    history_entry: AdviceHistory | None = None
    rate_limit: RateLimitInfo | None = None


async def candidate_vibes(store: Store, now: datetime | None = None) -> list[Vibe]:
    """All vibes with decay applied, minus the ones that have faded out."""
    vibes = await store.get_all_vibes()
    return decay.filter_decayed_vibes(vibes, settings.match_min_relevance, now)


def build_recommendations(scenario: Scenario, result: MatchResult) -> Recommendations:
    top = [match.vibe for match in result.matches[:RECOMMENDATION_DEPTH]]
    topics: list[str] = []
    for vibe in top:
        if vibe.name not in topics:
            topics.append(vibe.name)
    if scenario.preferences:
        topics.extend(topic for topic in scenario.preferences.topics if topic not in topics)

    behavior = [BEHAVIOR_TEMPLATES[vibe.sentiment].format(name=vibe.name) for vibe in top[:3]]

    style = [
        f"Lean into the {vibe.name} aesthetic." for vibe in top if vibe.category == VibeCategory.AESTHETIC
    ]
    if scenario.context and scenario.context.formality:
        style.append(FORMALITY_STYLE[scenario.context.formality])
    return Recommendations(topics=topics, behavior=behavior, style=style)


def build_reasoning(scenario: Scenario, result: MatchResult, profile: UserProfile | None) -> str:
    style = None
    if scenario.preferences and scenario.preferences.conversation_style:
        style = scenario.preferences.conversation_style
    elif profile is not None:
        style = profile.conversation_style

    if not result.matches:
        parts = ["No current vibes matched this scenario closely, so the advice stays general."]
    else:
        names = ", ".join(match.vibe.name for match in result.matches[:3])
        parts = [f"Matched {len(result.matches)} current vibes; the strongest are {names}."]
    if result.region_filter_applied:
        parts.append(f"Results were filtered for {result.region_filter_applied}.")
    if result.interest_boosts_applied:
        parts.append(f"Boosted for your interests: {', '.join(result.interest_boosts_applied)}.")
    parts.append(conversation_style_instruction(style))
    return " ".join(parts)


async def generate_advice(
    store: Store,
    matchers: MatcherRegistry,
    scenario: Scenario,
    profile: UserProfile | None = None,
    *,
    now: datetime | None = None,
) -> AdviceOutcome:
    """Produce advice for ``scenario``, consuming one query when ``profile`` is given.

    Raises ``QuotaExceeded`` before any matching when the allowance is gone.
    """
    rate_limit = None
    if profile is not None:
        rate_limit = await quota_service.check_and_consume(store, profile.id)

    reference = now or datetime.now(timezone.utc)
    candidates = await candidate_vibes(store, reference)
    result = matchers.default.match(scenario, candidates, profile)

    advice = Advice(
        scenario=scenario,
        matched_vibes=result.matches,
        recommendations=build_recommendations(scenario, result),
        reasoning=build_reasoning(scenario, result, profile),
        confidence=result.confidence,
        timestamp=reference,
    )
    logger.info(
        "Generated advice with %d matches (confidence %.2f) for %s",
        len(result.matches),
        result.confidence,
        profile.id if profile else "anonymous",
    )

    if profile is None:
        return AdviceOutcome(response=AdviceResponse(advice=advice))

    entry = history_service.build_entry(
        profile.id,
        advice,
        region_filter_applied=result.region_filter_applied,
        interest_boosts_applied=result.interest_boosts_applied,
    )
    response = AdviceResponse(
        advice=advice,
        history_id=entry.id,
        personalization=Personalization(
            region_filter_applied=result.region_filter_applied,
            interest_boosts_applied=result.interest_boosts_applied,
            avoided_topics=result.excluded_by_avoid,
        ),
        usage=rate_limit,
    )
    return AdviceOutcome(response=response, history_entry=entry, rate_limit=rate_limit)


async def persist_history(store: Store, entry: AdviceHistory) -> None:
    """Background step: save a history entry, logging rather than raising on failure."""
    try:
        await history_service.save_advice(store, entry)
    except Exception:
        logger.exception("Failed to save advice history %s for user %s", entry.id, entry.user_id)
