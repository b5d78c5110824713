"""Scheduler-triggered maintenance endpoints, guarded by the shared cron secret."""

from fastapi import APIRouter, Depends

from zeitgeist.api.deps import get_store, require_cron_secret
from zeitgeist.services import analytics_service, quota_service
from zeitgeist.services.task_queue import task_queue
from zeitgeist.store.base import Store

router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.post("/reset-quotas")
async def reset_quotas(store: Store = Depends(get_store)) -> dict:
    """Zero every user's monthly counter (run on the first of the month)."""
    result = await task_queue.enqueue_quota_reset(fallback=lambda: quota_service.reset_all(store))
    if isinstance(result, dict):
        return {"success": True, **result}
    return {"success": True, "users_reset": result}


@router.post("/aggregate-analytics")
async def aggregate_analytics(store: Store = Depends(get_store)) -> dict:
    """Recompute monthly metrics for every user."""
    result = await task_queue.enqueue_analytics_aggregation(
        fallback=lambda: analytics_service.aggregate_all_users(store)
    )
    if isinstance(result, dict):
        return {"success": True, **result}
    return {"success": True, **result.model_dump()}
