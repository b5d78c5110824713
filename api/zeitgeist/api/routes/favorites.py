from fastapi import APIRouter, Depends, Query, Response, status

from zeitgeist.api.deps import get_current_user, get_store
from zeitgeist.schema.favorite import Favorite, FavoriteCreate, FavoriteStatus, FavoriteType
from zeitgeist.schema.user import UserProfile
from zeitgeist.services import favorites_service
from zeitgeist.store.base import Store

router = APIRouter()


@router.get("", response_model=list[Favorite])
async def list_favorites(
    type: FavoriteType | None = Query(default=None),
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> list[Favorite]:
    """List the caller's favorites, optionally only vibes or only advice."""
    return await favorites_service.list_favorites(store, current_user.id, type)


@router.post("", response_model=Favorite, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    payload: FavoriteCreate,
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> Favorite:
    return await favorites_service.add_favorite(store, current_user.id, payload)


@router.get("/check", response_model=FavoriteStatus)
async def check_favorite(
    type: FavoriteType,
    reference_id: str = Query(min_length=1, max_length=255),
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> FavoriteStatus:
    return await favorites_service.favorite_status(store, current_user.id, type, reference_id)


@router.delete("/{favorite_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response, response_model=None)
async def remove_favorite(
    favorite_id: str,
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> Response:
    await favorites_service.remove_favorite(store, current_user.id, favorite_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
