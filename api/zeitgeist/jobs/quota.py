"""Monthly quota reset job."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from zeitgeist.core.security import server_now
from zeitgeist.services import quota_service
from zeitgeist.store import build_store

logger = logging.getLogger("zeitgeist.jobs.quota")

# Keeps a run that starts a little early from rescheduling itself at the same boundary.
RESCHEDULE_MARGIN = timedelta(hours=1)


def reset_monthly_quotas_job() -> dict[str, int]:
    """Runs at each quota month boundary; zeroes every counter and books the next run."""
    from zeitgeist.jobs.schedule_registry import schedule_next_quota_reset

    async def _run() -> int:
        store = build_store()
        try:
            return await quota_service.reset_all(store)
        finally:
            await store.close()

    reset = asyncio.run(_run())
    logger.info("Monthly quota reset finished for %d users", reset)
    schedule_next_quota_reset(now=server_now() + RESCHEDULE_MARGIN)
    return {"users_reset": reset}
