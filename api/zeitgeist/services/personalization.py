"""Profile-driven helpers for region, interest, and avoid-topic handling."""

from __future__ import annotations

from zeitgeist.schema.user import ConversationStyle
from zeitgeist.schema.vibe import Vibe

GLOBAL_REGION = "Global"
UNLISTED_REGION_RELEVANCE = 0.3

STYLE_INSTRUCTIONS: dict[ConversationStyle, str] = {
    ConversationStyle.CASUAL: (
        "Use a casual, friendly tone. Keep it conversational and approachable, "
        "like talking to a friend."
    ),
    ConversationStyle.PROFESSIONAL: (
        "Use a professional, polished tone. Be clear and articulate while staying warm; avoid slang."
    ),
    ConversationStyle.ACADEMIC: (
        "Use a thoughtful, analytical tone. Give well-reasoned explanations with context."
    ),
    ConversationStyle.FRIENDLY: (
        "Use a warm, encouraging tone. Be supportive and make the advice feel personal."
    ),
}


def vibe_text(vibe: Vibe) -> str:
    """Lower-cased searchable text for a vibe."""
    return " ".join([vibe.name, vibe.description, " ".join(vibe.keywords), vibe.category.value]).lower()


def matched_interests(vibe: Vibe, interests: list[str]) -> list[str]:
    """Interests that appear in the vibe's text, in profile order."""
    text = vibe_text(vibe)
    return [interest for interest in interests if interest.strip() and interest.strip().lower() in text]


def calculate_interest_match(vibe: Vibe, interests: list[str]) -> float:
    """Fraction of the user's interests found in the vibe, in ``[0, 1]``."""
    cleaned = [interest for interest in interests if interest.strip()]
    if not cleaned:
        return 0.0
    return len(matched_interests(vibe, cleaned)) / len(cleaned)


def is_topic_avoided(vibe: Vibe, avoid_topics: list[str]) -> bool:
    """True when any avoided topic appears in the vibe text or matches a domain."""
    topics = [topic.strip().lower() for topic in avoid_topics if topic.strip()]
    if not topics:
        return False
    text = vibe_text(vibe)
    domains = {domain.lower() for domain in vibe.domains}
    return any(topic in text or topic in domains for topic in topics)


def get_regional_relevance(vibe: Vibe, region: str) -> float:
    """How relevant a vibe is to ``region``; vibes without geography count as global."""
    geography = vibe.geography
    if geography is None or geography.primary == GLOBAL_REGION:
        return 1.0
    if region in geography.relevance:
        return max(0.0, min(1.0, geography.relevance[region]))
    if geography.primary == region:
        return 1.0
    return UNLISTED_REGION_RELEVANCE


def is_globally_scoped(vibe: Vibe) -> bool:
    return vibe.geography is None or vibe.geography.primary == GLOBAL_REGION


def meets_regional_threshold(vibe: Vibe, region: str, threshold: float) -> bool:
    return is_globally_scoped(vibe) or get_regional_relevance(vibe, region) >= threshold


def conversation_style_instruction(style: ConversationStyle | str | None) -> str:
    """Tone guidance for the requested conversation style, defaulting to casual."""
    try:
        key = ConversationStyle(style) if style else ConversationStyle.CASUAL
    except ValueError:
        key = ConversationStyle.CASUAL
    return STYLE_INSTRUCTIONS[key]
