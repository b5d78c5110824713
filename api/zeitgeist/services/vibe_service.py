"""Vibe reads with decay applied, and recording of new or repeated observations."""

from __future__ import annotations

import logging
from datetime import datetime

from zeitgeist.core.errors import NotFoundError
from zeitgeist.schema.vibe import Vibe
from zeitgeist.services import decay
from zeitgeist.store.base import Store

logger = logging.getLogger("zeitgeist.services.vibe_service")


async def list_vibes(store: Store, limit: int = 50, now: datetime | None = None) -> list[Vibe]:
    """Most recently observed vibes, ordered by current relevance."""
    vibes = await store.get_recent_vibes(limit)
    return decay.sort_by_relevance(vibes, now)


async def get_vibe(store: Store, vibe_id: str, now: datetime | None = None) -> Vibe:
    vibe = await store.get_vibe(vibe_id)
    if vibe is None:
        raise NotFoundError("Vibe", vibe_id)
    return decay.decay(vibe, now)


async def record_vibe(store: Store, observed: Vibe, now: datetime | None = None) -> Vibe:
    """Store a newly observed vibe, or fold a repeat sighting into the existing record."""
    existing = await store.get_vibe(observed.id)
    if existing is not None:
        merged = decay.merge_vibe_occurrence(existing, observed, now)
        logger.info("Merged repeat observation into vibe %s (%d keywords)", merged.id, len(merged.keywords))
        return decay.decay(await store.save_vibe(merged), now)
    if observed.half_life is None:
        observed = observed.model_copy(update={"half_life": decay.suggest_half_life(observed)})
    saved = await store.save_vibe(observed)
    logger.info("Recorded new vibe %s (%s)", saved.id, saved.category.value)
    return decay.decay(saved, now)
