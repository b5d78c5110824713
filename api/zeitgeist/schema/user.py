"""User profile, tier, and preference schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zeitgeist.schema.base import ORMModel
from zeitgeist.utils.datetime import ensure_utc

MAX_PREFERENCE_ITEMS = 20
MAX_PREFERENCE_LENGTH = 100


class Tier(str, Enum):
    FREE = "free"
    LIGHT = "light"
    REGULAR = "regular"
    UNLIMITED = "unlimited"

    @property
    def query_limit(self) -> int | None:
        """Monthly query allowance; ``None`` means no limit."""
        return TIER_LIMITS[self]


TIER_LIMITS: dict[Tier, int | None] = {
    Tier.FREE: 5,
    Tier.LIGHT: 25,
    Tier.REGULAR: 100,
    Tier.UNLIMITED: None,
}


class ConversationStyle(str, Enum):
    CASUAL = "casual"
    PROFESSIONAL = "professional"
    ACADEMIC = "academic"
    FRIENDLY = "friendly"


class Region(str, Enum):
    GLOBAL = "Global"
    US_WEST = "US-West"
    US_EAST = "US-East"
    US_CENTRAL = "US-Central"
    US_SOUTH = "US-South"
    EU_UK = "EU-UK"
    EU_CENTRAL = "EU-Central"
    EU_NORTH = "EU-North"
    ASIA_PACIFIC = "Asia-Pacific"
    LATIN_AMERICA = "Latin-America"
    AFRICA = "Africa"
    MIDDLE_EAST = "Middle-East"


def _clean_terms(values: list[str] | None) -> list[str]:
    """Strip, drop blanks, and de-duplicate case-insensitively while keeping order."""
    if values is None:
        return []
    cleaned: list[str] = []
    seen: set[str] = set()
    for value in values:
        term = value.strip()
        if not term:
            continue
        if len(term) > MAX_PREFERENCE_LENGTH:
            raise ValueError(f"entries must be at most {MAX_PREFERENCE_LENGTH} characters")
        key = term.casefold()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(term)
    if len(cleaned) > MAX_PREFERENCE_ITEMS:
        raise ValueError(f"at most {MAX_PREFERENCE_ITEMS} entries are allowed")
    return cleaned


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserProfile(ORMModel):
    """Stored profile for an authenticated user.

    ``query_limit`` is always derived from ``tier`` so the two can never drift.
    """
    id: str
    email: str | None = None
    display_name: str | None = None
    tier: Tier = Tier.FREE
    queries_this_month: int = Field(default=0, ge=0)
    region: Region | None = None
    interests: list[str] = Field(default_factory=list)
    avoid_topics: list[str] = Field(default_factory=list)
    conversation_style: ConversationStyle = ConversationStyle.CASUAL
    email_notifications: bool = True
    share_data_for_research: bool = False
    onboarding_completed: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    last_active: datetime = Field(default_factory=_utcnow)

    @field_validator("created_at", "last_active")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def query_limit(self) -> int | None:
        return self.tier.query_limit

    @property
    def is_unlimited(self) -> bool:
        return self.tier.query_limit is None


class UserProfileRead(ORMModel):
    """Profile fields exposed in API responses."""
    id: str
    email: str | None = None
    display_name: str | None = None
    tier: Tier
    queries_this_month: int
    query_limit: int | None = None
    region: Region | None = None
    interests: list[str]
    avoid_topics: list[str]
    conversation_style: ConversationStyle
    email_notifications: bool
    share_data_for_research: bool
    onboarding_completed: bool
    created_at: datetime
    last_active: datetime


class UserProfileUpdate(BaseModel):
    """Allow-listed preference fields a user may change on their own profile."""

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(default=None, max_length=100)
    region: Region | None = None
    interests: list[str] | None = None
    avoid_topics: list[str] | None = None
    conversation_style: ConversationStyle | None = None
    email_notifications: bool | None = None
    share_data_for_research: bool | None = None
    onboarding_completed: bool | None = None

    @field_validator("interests", "avoid_topics")
    @classmethod
    def _normalize_terms(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return _clean_terms(value)

    @field_validator("display_name")
    @classmethod
    def _strip_display_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class AccountDeletion(BaseModel):
    """Explicit confirmation required before deleting an account."""
    confirm: bool = False


class UsageSummary(BaseModel):
    """Quota usage dashboard for the current month."""
    tier: Tier
    used: int
    limit: int | None = None
    remaining: int | None = None
    percentage: float | None = None
    reset_date: datetime
    near_limit: bool = False
    at_limit: bool = False
