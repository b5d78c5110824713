from __future__ import annotations

import pytest

from zeitgeist.core.errors import AuthorizationError, DuplicateFavoriteError, NotFoundError
from zeitgeist.schema.favorite import FavoriteCreate, FavoriteType
from zeitgeist.services import favorites_service, history_service
from zeitgeist.tests.utils import make_history, make_vibe


@pytest.mark.asyncio
async def test_duplicate_favorite_is_rejected(store):
    await store.save_vibe(make_vibe("v1", "Quiet luxury"))
    payload = FavoriteCreate(type=FavoriteType.VIBE, reference_id="v1", note="love it")

    favorite = await favorites_service.add_favorite(store, "alice", payload)
    assert favorite.metadata.vibe_name == "Quiet luxury"
    with pytest.raises(DuplicateFavoriteError):
        await favorites_service.add_favorite(store, "alice", payload)

    other = await favorites_service.add_favorite(store, "bob", payload)
    assert other.user_id == "bob"


@pytest.mark.asyncio
async def test_store_level_duplicate_check(store, sql_store):
    for backend in (store, sql_store):
        await backend.save_vibe(make_vibe("v1", "Quiet luxury"))
        first = await favorites_service.add_favorite(
            backend, "alice", FavoriteCreate(type=FavoriteType.VIBE, reference_id="v1")
        )
        clone = first.model_copy(update={"id": "another-id"})
        with pytest.raises(DuplicateFavoriteError):
            await backend.save_favorite(clone)


@pytest.mark.asyncio
async def test_advice_favorite_requires_ownership(store):
    entry = await history_service.save_advice(store, make_history("bob", description="Job interview"))
    with pytest.raises(AuthorizationError):
        await favorites_service.add_favorite(
            store, "alice", FavoriteCreate(type=FavoriteType.ADVICE, reference_id=entry.id)
        )
    favorite = await favorites_service.add_favorite(
        store, "bob", FavoriteCreate(type=FavoriteType.ADVICE, reference_id=entry.id)
    )
    assert favorite.metadata.scenario_description == "Job interview"


@pytest.mark.asyncio
async def test_missing_reference_is_not_found(store):
    with pytest.raises(NotFoundError):
        await favorites_service.add_favorite(store, "alice", FavoriteCreate(type=FavoriteType.VIBE, reference_id="x"))


@pytest.mark.asyncio
async def test_remove_checks_owner_and_status_reflects_state(store):
    await store.save_vibe(make_vibe("v1", "Quiet luxury"))
    await store.save_vibe(make_vibe("v2", "Gorpcore"))
    favorite = await favorites_service.add_favorite(
        store, "alice", FavoriteCreate(type=FavoriteType.VIBE, reference_id="v1")
    )
    await favorites_service.add_favorite(store, "alice", FavoriteCreate(type=FavoriteType.VIBE, reference_id="v2"))

    assert await favorites_service.favorite_count(store, "alice") == 2
    assert await favorites_service.is_favorited(store, "alice", FavoriteType.VIBE, "v1") is True
    status = await favorites_service.favorite_status(store, "alice", FavoriteType.VIBE, "v1")
    assert status.favorite_id == favorite.id

    with pytest.raises(AuthorizationError):
        await favorites_service.remove_favorite(store, "bob", favorite.id)
    await favorites_service.remove_favorite(store, "alice", favorite.id)
    assert await favorites_service.is_favorited(store, "alice", FavoriteType.VIBE, "v1") is False
    assert await favorites_service.list_favorites(store, "alice", FavoriteType.ADVICE) == []
