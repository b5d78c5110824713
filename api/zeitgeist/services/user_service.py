"""User profile lifecycle: creation on first sign-in, preferences, tier, deletion."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from zeitgeist.core.errors import NotFoundError, ValidationError
from zeitgeist.schema.user import Tier, UserProfile, UserProfileUpdate
from zeitgeist.store.base import Store

logger = logging.getLogger("zeitgeist.services.user_service")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def get_profile(store: Store, user_id: str) -> UserProfile:
    profile = await store.get_user(user_id)
    if profile is None:
        raise NotFoundError("User", user_id)
    return profile


async def get_or_create_profile(
    store: Store,
    user_id: str,
    *,
    email: str | None = None,
    display_name: str | None = None,
) -> UserProfile:
    """Return the stored profile, creating a free-tier default on first sight."""
    profile = await store.get_user(user_id)
    if profile is not None:
        return profile
    profile = UserProfile(
        id=user_id,
        email=email,
        display_name=(display_name or "").strip()[:100] or None,
        tier=Tier.FREE,
    )
    logger.info("Created profile for user %s", user_id)
    return await store.save_user(profile)


async def update_preferences(store: Store, user_id: str, payload: UserProfileUpdate) -> UserProfile:
    """Apply allow-listed preference changes; other fields cannot be reached."""
    profile = await get_profile(store, user_id)
    updates = payload.model_dump(exclude_unset=True)
    for field in ("interests", "avoid_topics"):
        if field in updates and updates[field] is None:
            updates[field] = []
    for field in ("conversation_style", "email_notifications", "share_data_for_research", "onboarding_completed"):
        if field in updates and updates[field] is None:
            raise ValidationError(field, "may not be null")
    if not updates:
        return profile
    updated = profile.model_copy(update={**updates, "last_active": _utcnow()})
    return await store.save_user(UserProfile.model_validate(updated.model_dump()))


async def change_tier(store: Store, user_id: str, tier: Tier) -> UserProfile:
    """Move a user to ``tier``; usage above a smaller limit is clamped to it."""
    profile = await get_profile(store, user_id)
    used = profile.queries_this_month
    if tier.query_limit is not None:
        used = min(used, tier.query_limit)
    updated = profile.model_copy(update={"tier": tier, "queries_this_month": used})
    logger.info("Changed tier for user %s from %s to %s", user_id, profile.tier.value, tier.value)
    return await store.save_user(updated)


async def delete_account(store: Store, user_id: str) -> dict[str, int]:
    """Delete a profile after removing its history and favorites."""
    await get_profile(store, user_id)
    history_deleted = await store.delete_all_advice_history(user_id)
    favorites_deleted = await store.delete_all_favorites(user_id)
    await store.delete_user(user_id)
    logger.info(
        "Deleted user %s with %d history entries and %d favorites",
        user_id,
        history_deleted,
        favorites_deleted,
    )
    return {"history_deleted": history_deleted, "favorites_deleted": favorites_deleted}
