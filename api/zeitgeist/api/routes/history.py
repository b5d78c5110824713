from fastapi import APIRouter, Depends, Query, Response, status

from zeitgeist.api.deps import get_current_user, get_store
from zeitgeist.core.config import settings
from zeitgeist.schema.history import AdviceHistory, HistoryFeedback, HistoryStats
from zeitgeist.schema.user import UserProfile
from zeitgeist.services import history_service
from zeitgeist.store.base import Store

router = APIRouter()


@router.get("", response_model=list[AdviceHistory])
async def list_history(
    limit: int = Query(history_service.DEFAULT_PAGE_SIZE, ge=1, le=settings.history_page_max),
    offset: int = Query(0, ge=0),
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> list[AdviceHistory]:
    """List the caller's advice history, newest first."""
    return await history_service.list_history(store, current_user.id, limit=limit, offset=offset)


@router.delete("")
async def clear_history(
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> dict:
    deleted = await history_service.delete_all_history(store, current_user.id)
    return {"deleted": deleted}


@router.get("/stats", response_model=HistoryStats)
async def read_history_stats(
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> HistoryStats:
    return await history_service.history_stats(store, current_user.id)


@router.get("/{entry_id}", response_model=AdviceHistory)
async def read_history_item(
    entry_id: str,
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> AdviceHistory:
    return await history_service.get_history_item(store, current_user.id, entry_id)


@router.put("/{entry_id}", response_model=AdviceHistory)
async def update_history_item(
    entry_id: str,
    payload: HistoryFeedback,
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> AdviceHistory:
    """Rate an entry or mark it helpful."""
    return await history_service.update_feedback(store, current_user.id, entry_id, payload)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response, response_model=None)
async def delete_history_item(
    entry_id: str,
    current_user: UserProfile = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> Response:
    await history_service.delete_history_item(store, current_user.id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
