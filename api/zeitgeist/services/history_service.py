"""Advice history persistence, feedback, and per-user statistics.

Invariants:
- Every read or mutation of a single entry checks ownership first.
- Listing is newest-first and never returns another user's entries.
"""

from __future__ import annotations

import logging
from collections import Counter

from zeitgeist.core.config import settings
from zeitgeist.core.errors import AuthorizationError, NotFoundError, ValidationError
from zeitgeist.schema.advice import Advice
from zeitgeist.schema.base import CountItem
from zeitgeist.schema.history import AdviceHistory, HistoryFeedback, HistoryStats
from zeitgeist.store.base import Store

logger = logging.getLogger("zeitgeist.services.history_service")

DEFAULT_PAGE_SIZE = 20
TOP_N = 5


def build_entry(
    user_id: str,
    advice: Advice,
    *,
    region_filter_applied: str | None = None,
    interest_boosts_applied: list[str] | None = None,
) -> AdviceHistory:
    """Assemble a history entry from a finished advice result."""
    return AdviceHistory(
        user_id=user_id,
        timestamp=advice.timestamp,
        scenario=advice.scenario,
        matched_vibes=[match.vibe.id for match in advice.matched_vibes],
        advice=advice,
        region_filter_applied=region_filter_applied,
        interest_boosts_applied=list(interest_boosts_applied or []),
    )


async def save_advice(store: Store, entry: AdviceHistory) -> AdviceHistory:
    saved = await store.save_advice_history(entry)
    logger.debug("Saved history entry %s for user %s", entry.id, entry.user_id)
    return saved


async def list_history(
    store: Store,
    user_id: str,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[AdviceHistory]:
    """List the user's history newest-first."""
    if limit < 1 or limit > settings.history_page_max:
        raise ValidationError("limit", f"must be between 1 and {settings.history_page_max}")
    if offset < 0:
        raise ValidationError("offset", "must be zero or greater")
    entries = await store.get_advice_history(user_id, limit=limit, offset=offset)
    return [entry for entry in entries if entry.user_id == user_id]


async def load_all_history(store: Store, user_id: str) -> list[AdviceHistory]:
    """Every entry the user owns, newest first, read one page at a time."""
    page_size = settings.history_scan_page_size
    entries: list[AdviceHistory] = []
    offset = 0
    while True:
        page = await store.get_advice_history(user_id, limit=page_size, offset=offset)
        entries.extend(entry for entry in page if entry.user_id == user_id)
        if len(page) < page_size:
            return entries
        offset += len(page)


async def get_history_item(store: Store, user_id: str, entry_id: str) -> AdviceHistory:
    """Fetch one entry, refusing access to entries owned by someone else."""
    entry = await store.get_advice_history_item(entry_id)
    if entry is None:
        raise NotFoundError("History entry", entry_id)
    if entry.user_id != user_id:
        logger.warning("User %s attempted to access history entry %s", user_id, entry_id)
        raise AuthorizationError("You do not have access to this history entry")
    return entry


async def update_feedback(store: Store, user_id: str, entry_id: str, payload: HistoryFeedback) -> AdviceHistory:
    """Apply the owner's feedback fields to an entry."""
    entry = await get_history_item(store, user_id, entry_id)
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationError("feedback", "provide rating, feedback, or was_helpful")
    return await store.save_advice_history(entry.model_copy(update=updates))


async def rate_advice(
    store: Store, user_id: str, entry_id: str, rating: int, feedback: str | None = None
) -> AdviceHistory:
    """Rate an entry with an integer from 1 to 5."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("rating", "must be an integer between 1 and 5")
    fields: dict[str, object] = {"rating": rating}
    if feedback is not None:
        fields["feedback"] = feedback
    return await update_feedback(store, user_id, entry_id, HistoryFeedback(**fields))


async def mark_helpful(store: Store, user_id: str, entry_id: str, was_helpful: bool) -> AdviceHistory:
    return await update_feedback(store, user_id, entry_id, HistoryFeedback(was_helpful=was_helpful))


async def delete_history_item(store: Store, user_id: str, entry_id: str) -> None:
    await get_history_item(store, user_id, entry_id)
    await store.delete_advice_history(entry_id)


async def delete_all_history(store: Store, user_id: str) -> int:
    deleted = await store.delete_all_advice_history(user_id)
    logger.info("Deleted %d history entries for user %s", deleted, user_id)
    return deleted


async def history_stats(store: Store, user_id: str) -> HistoryStats:
    """Totals, rating summary, and the most common scenarios and vibes."""
    entries = await load_all_history(store, user_id)
    if not entries:
        return HistoryStats()
    ratings = [entry.rating for entry in entries if entry.rating is not None]
    scenarios = Counter(entry.scenario.description for entry in entries)
    vibe_names: dict[str, str] = {}
    vibes: Counter[str] = Counter()
    for entry in entries:
        for match in entry.advice.matched_vibes:
            vibe_names.setdefault(match.vibe.id, match.vibe.name)
            vibes[match.vibe.id] += 1
    return HistoryStats(
        total=len(entries),
        rated=len(ratings),
        average_rating=round(sum(ratings) / len(ratings), 2) if ratings else None,
        helpful=sum(1 for entry in entries if entry.was_helpful),
        top_scenarios=[CountItem(name=name, count=count) for name, count in scenarios.most_common(TOP_N)],
        top_vibes=[CountItem(name=vibe_names[vibe_id], count=count) for vibe_id, count in vibes.most_common(TOP_N)],
    )
