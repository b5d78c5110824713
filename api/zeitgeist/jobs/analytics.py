"""Monthly analytics aggregation job."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from zeitgeist.services import analytics_service
from zeitgeist.store import build_store

logger = logging.getLogger("zeitgeist.jobs.analytics")


def aggregate_analytics_job() -> dict[str, Any]:
    """Recompute current and previous month metrics for every user."""

    async def _run() -> dict[str, Any]:
        store = build_store()
        try:
            report = await analytics_service.aggregate_all_users(store)
        finally:
            await store.close()
        return report.model_dump()

    summary = asyncio.run(_run())
    if summary["failures"]:
        logger.warning("Analytics aggregation finished with %d failures", summary["failures"])
    return summary
