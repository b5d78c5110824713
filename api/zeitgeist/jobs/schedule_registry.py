from __future__ import annotations

import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from rq_scheduler import Scheduler

from zeitgeist.core.config import settings
from zeitgeist.core.security import next_quota_reset
from zeitgeist.jobs.analytics import aggregate_analytics_job
from zeitgeist.jobs.quota import reset_monthly_quotas_job
from zeitgeist.services.task_queue import task_queue

logger = logging.getLogger("zeitgeist.jobs.schedule_registry")

QUOTA_RESET_JOB_PREFIX = "quota:monthly_reset"
DAILY_ANALYTICS_CRON = "30 2 * * *"


def quota_reset_job_id(boundary: datetime) -> str:
    """One job id per quota month, keyed by the month that starts at ``boundary``."""
    local = boundary.astimezone(ZoneInfo(settings.quota_timezone))
    return f"{QUOTA_RESET_JOB_PREFIX}:{local.year:04d}-{local.month:02d}"


def _scheduling_enabled() -> bool:
    if settings.environment.lower() == "test":
        return False
    if settings.store_backend == "memory":
        # Workers would reset a fresh in-process store, not the API's counters.
        logger.info("Skipping scheduler bootstrap; the memory store lives in the API process")
        return False
    if not task_queue.connection:
        logger.info("Skipping scheduler bootstrap; queue connection is unavailable")
        return False
    return True


def _scheduler() -> Scheduler:
    return Scheduler(connection=task_queue.connection, queue_name=task_queue.queue_names[0])


def schedule_next_quota_reset(scheduler: Scheduler | None = None, now: datetime | None = None) -> str | None:
    """Queue a one-off reset at the next quota month boundary in ``quota_timezone``.

    Monthly boundaries in a non-UTC zone do not fit a UTC cron line, so each
    run schedules its successor instead. Returns the job id, or ``None`` when
    scheduling is disabled.
    """
    if not _scheduling_enabled():
        return None
    scheduler = scheduler or _scheduler()
    boundary = next_quota_reset(now)
    job_id = quota_reset_job_id(boundary)
    if job_id in scheduler:
        return job_id
    scheduler.schedule(
        scheduled_time=boundary,
        func=reset_monthly_quotas_job,
        interval=None,
        repeat=None,
        id=job_id,
        queue_name=task_queue.queue_for("maintenance"),
        result_ttl=int(timedelta(days=1).total_seconds()),
    )
    logger.info("Scheduled quota reset %s at %s (%s)", job_id, boundary.isoformat(), settings.quota_timezone)
    return job_id


def _cron_entries() -> list[dict]:
    return [
        {
            "id": "analytics:aggregate_all",
            "func": aggregate_analytics_job,
            "cron": DAILY_ANALYTICS_CRON,
            "queue_name": task_queue.queue_for("analytics"),
        },
    ]


def ensure_schedules() -> None:
    """Idempotently register periodic jobs with rq-scheduler."""
    if not _scheduling_enabled():
        return
    scheduler = _scheduler()
    schedule_next_quota_reset(scheduler)
    for entry in _cron_entries():
        if entry["id"] in scheduler:
            continue
        scheduler.cron(
            entry["cron"],
            func=entry["func"],
            repeat=None,
            id=entry["id"],
            queue_name=entry["queue_name"],
            result_ttl=int(timedelta(days=1).total_seconds()),
            use_local_timezone=False,
        )
        logger.info("Scheduled job %s (%s) on queue %s", entry["id"], entry["cron"], entry["queue_name"])
