from fastapi import APIRouter, Depends, Query, status

from zeitgeist.api.deps import get_store, require_cron_secret
from zeitgeist.schema.vibe import Vibe
from zeitgeist.services import vibe_service
from zeitgeist.store.base import Store

router = APIRouter()


@router.get("", response_model=list[Vibe])
async def list_vibes(
    limit: int = Query(50, ge=1, le=200),
    store: Store = Depends(get_store),
) -> list[Vibe]:
    """Recent vibes with relevance decayed to now."""
    return await vibe_service.list_vibes(store, limit)


@router.get("/{vibe_id}", response_model=Vibe)
async def get_vibe(vibe_id: str, store: Store = Depends(get_store)) -> Vibe:
    return await vibe_service.get_vibe(store, vibe_id)


@router.post(
    "",
    response_model=Vibe,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_cron_secret)],
)
async def record_vibe(payload: Vibe, store: Store = Depends(get_store)) -> Vibe:
    """Record a vibe from the collection pipeline; repeat ids are merged."""
    return await vibe_service.record_vibe(store, payload)
