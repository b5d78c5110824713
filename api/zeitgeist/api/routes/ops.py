from __future__ import annotations

from fastapi import APIRouter, Depends

from zeitgeist.api.deps import require_cron_secret
from zeitgeist.services.task_queue import task_queue

router = APIRouter()


@router.get("/queues", tags=["ops"], dependencies=[Depends(require_cron_secret)])
async def queue_health() -> dict:
    """
    Minimal operations dashboard for Redis/RQ health.

    Requires the operator secret to avoid leaking operational data to anonymous callers.
    """

    return task_queue.snapshot()
