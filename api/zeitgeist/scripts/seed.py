"""Seed script for demo vibes and a demo profile in local/dev environments."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from zeitgeist.schema.user import ConversationStyle, Region, UserProfileUpdate
from zeitgeist.schema.vibe import Geography, Sentiment, Vibe, VibeCategory
from zeitgeist.services import user_service, vibe_service
from zeitgeist.store import build_store
from zeitgeist.store.base import Store

DEMO_USER_ID = "demo-user"
DEMO_EMAIL = "demo@zeitgeist.local"
DEMO_DISPLAY_NAME = "Demo User"


@dataclass(frozen=True)
class SeedVibeDefinition:
    """Structured definition for a seed vibe."""
    id: str
    name: str
    description: str
    category: VibeCategory
    keywords: tuple[str, ...]
    strength: float
    sentiment: Sentiment = Sentiment.NEUTRAL
    domains: tuple[str, ...] = ()
    region_relevance: dict[str, float] = field(default_factory=dict)

    def to_vibe(self) -> Vibe:
        geography = None
        if self.region_relevance:
            primary = max(self.region_relevance, key=self.region_relevance.get)
            geography = Geography(primary=primary, relevance=dict(self.region_relevance))
        return Vibe(
            id=self.id,
            name=self.name,
            description=self.description,
            category=self.category,
            keywords=list(self.keywords),
            strength=self.strength,
            sentiment=self.sentiment,
            domains=list(self.domains),
            geography=geography,
        )


SEED_VIBES: tuple[SeedVibeDefinition, ...] = (
    SeedVibeDefinition(
        id="seed-quiet-luxury",
        name="Quiet luxury",
        description="Understated, logo-free wardrobes built on good fabric.",
        category=VibeCategory.AESTHETIC,
        keywords=("fashion", "minimalism", "tailoring"),
        strength=0.82,
        sentiment=Sentiment.POSITIVE,
        domains=("fashion",),
    ),
    SeedVibeDefinition(
        id="seed-supper-clubs",
        name="Supper clubs",
        description="Small ticketed dinners hosted in homes and pop-up spaces.",
        category=VibeCategory.TREND,
        keywords=("dinner", "food", "social", "hosting"),
        strength=0.7,
        sentiment=Sentiment.POSITIVE,
        domains=("food",),
        region_relevance={"US-West": 0.9, "US-East": 0.8, "EU-UK": 0.6},
    ),
    SeedVibeDefinition(
        id="seed-return-to-office",
        name="Return-to-office debates",
        description="Mixed feelings about mandated office days.",
        category=VibeCategory.TOPIC,
        keywords=("work", "office", "coworkers", "commute"),
        strength=0.65,
        sentiment=Sentiment.MIXED,
        domains=("work",),
    ),
    SeedVibeDefinition(
        id="seed-vinyl-revival",
        name="Vinyl revival",
        description="Record stores and listening bars are busy again.",
        category=VibeCategory.MOVEMENT,
        keywords=("music", "vinyl", "records"),
        strength=0.6,
        sentiment=Sentiment.POSITIVE,
        domains=("music",),
    ),
)


async def seed(store: Store | None = None) -> None:
    """Seed demo data into the configured store."""
    if store is None:
        managed = build_store()
        try:
            await _seed_store(managed)
        finally:
            await managed.close()
    else:
        await _seed_store(store)


async def _seed_store(store: Store) -> None:
    """Populate a store with demo vibes and the demo profile."""
    created = 0
    for definition in SEED_VIBES:
        if await store.get_vibe(definition.id) is None:
            await vibe_service.record_vibe(store, definition.to_vibe())
            created += 1

    profile = await user_service.get_or_create_profile(
        store, DEMO_USER_ID, email=DEMO_EMAIL, display_name=DEMO_DISPLAY_NAME
    )
    if not profile.onboarding_completed:
        await user_service.update_preferences(
            store,
            profile.id,
            UserProfileUpdate(
                region=Region.US_WEST,
                interests=["fashion", "music"],
                conversation_style=ConversationStyle.FRIENDLY,
                onboarding_completed=True,
            ),
        )

    print(f"Seed complete - {created} new vibes, demo user: {DEMO_USER_ID}")


def main() -> None:
    """CLI entrypoint for seeding demo data."""
    asyncio.run(seed())


if __name__ == "__main__":
    main()
