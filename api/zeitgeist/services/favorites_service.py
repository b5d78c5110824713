"""Favorite vibes and advice entries."""

from __future__ import annotations

import logging

from zeitgeist.core.errors import AuthorizationError, DuplicateFavoriteError, NotFoundError
from zeitgeist.schema.favorite import Favorite, FavoriteCreate, FavoriteMetadata, FavoriteStatus, FavoriteType
from zeitgeist.store.base import Store

logger = logging.getLogger("zeitgeist.services.favorites_service")


async def _metadata_for(store: Store, user_id: str, payload: FavoriteCreate) -> FavoriteMetadata:
    """Resolve the referenced record and capture display fields for it."""
    if payload.type == FavoriteType.VIBE:
        vibe = await store.get_vibe(payload.reference_id)
        if vibe is None:
            raise NotFoundError("Vibe", payload.reference_id)
        return FavoriteMetadata(vibe_name=vibe.name)
    entry = await store.get_advice_history_item(payload.reference_id)
    if entry is None:
        raise NotFoundError("History entry", payload.reference_id)
    if entry.user_id != user_id:
        raise AuthorizationError("You can only favorite your own advice")
    return FavoriteMetadata(scenario_description=entry.scenario.description)


async def add_favorite(store: Store, user_id: str, payload: FavoriteCreate) -> Favorite:
    """Favorite a vibe or one of the user's advice entries; duplicates are rejected."""
    existing = await store.find_favorite(user_id, payload.type, payload.reference_id)
    if existing is not None:
        raise DuplicateFavoriteError(payload.type.value, payload.reference_id)
    metadata = await _metadata_for(store, user_id, payload)
    favorite = Favorite(
        user_id=user_id,
        type=payload.type,
        reference_id=payload.reference_id,
        note=payload.note,
        metadata=metadata,
    )
    saved = await store.save_favorite(favorite)
    logger.debug("User %s favorited %s %s", user_id, payload.type.value, payload.reference_id)
    return saved


async def remove_favorite(store: Store, user_id: str, favorite_id: str) -> None:
    favorite = await store.get_favorite(favorite_id)
    if favorite is None:
        raise NotFoundError("Favorite", favorite_id)
    if favorite.user_id != user_id:
        logger.warning("User %s attempted to remove favorite %s", user_id, favorite_id)
        raise AuthorizationError("You do not have access to this favorite")
    await store.delete_favorite(favorite_id)


async def list_favorites(store: Store, user_id: str, favorite_type: FavoriteType | None = None) -> list[Favorite]:
    favorites = await store.get_favorites(user_id, favorite_type)
    return [favorite for favorite in favorites if favorite.user_id == user_id]


async def favorite_status(
    store: Store, user_id: str, favorite_type: FavoriteType, reference_id: str
) -> FavoriteStatus:
    favorite = await store.find_favorite(user_id, favorite_type, reference_id)
    return FavoriteStatus(favorited=favorite is not None, favorite_id=favorite.id if favorite else None)


async def favorite_count(store: Store, user_id: str, favorite_type: FavoriteType | None = None) -> int:
    return len(await list_favorites(store, user_id, favorite_type))


async def is_favorited(store: Store, user_id: str, favorite_type: FavoriteType, reference_id: str) -> bool:
    return (await favorite_status(store, user_id, favorite_type, reference_id)).favorited
