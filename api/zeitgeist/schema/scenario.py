"""Scenario schemas describing the situation a user wants advice for."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zeitgeist.schema.user import ConversationStyle


class Formality(str, Enum):
    CASUAL = "casual"
    BUSINESS_CASUAL = "business-casual"
    FORMAL = "formal"


class ScenarioContext(BaseModel):
    """Optional situational details."""

    model_config = ConfigDict(frozen=True)

    location: str | None = Field(default=None, max_length=200)
    time_of_day: str | None = Field(default=None, max_length=50)
    people_types: list[str] = Field(default_factory=list, max_length=20)
    formality: Formality | None = None
    duration: str | None = Field(default=None, max_length=50)


class ScenarioPreferences(BaseModel):
    """Per-request preferences layered on top of the profile."""

    model_config = ConfigDict(frozen=True)

    conversation_style: ConversationStyle | None = None
    topics: list[str] = Field(default_factory=list, max_length=20)
    avoid: list[str] = Field(default_factory=list, max_length=20)


class Scenario(BaseModel):
    """Free-text situation description, immutable once validated."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(min_length=3, max_length=5000)
    context: ScenarioContext | None = None
    preferences: ScenarioPreferences | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    def to_text(self) -> str:
        """Flatten the scenario into one string for keyword scoring."""
        parts = [self.description]
        if self.context:
            parts.extend(
                value
                for value in (self.context.location, self.context.time_of_day, self.context.duration)
                if value
            )
            parts.extend(self.context.people_types)
            if self.context.formality:
                parts.append(self.context.formality.value)
        if self.preferences:
            parts.extend(self.preferences.topics)
        return " ".join(parts)
