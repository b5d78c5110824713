"""RQ task queue wrapper with inline fallback for local/test runs."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue, Retry
from rq.registry import DeferredJobRegistry, FailedJobRegistry, ScheduledJobRegistry, StartedJobRegistry
from rq.worker import Worker
from rq_scheduler import Scheduler

from zeitgeist.core.config import settings
from zeitgeist.utils.redaction import redact_secrets

logger = logging.getLogger("zeitgeist.services.task_queue")

# Maintenance jobs are idempotent, so a couple of retries with backoff are safe.
DEFAULT_RETRY = Retry(max=2, interval=[30, 120])


def _maybe_async(value: Any) -> Any:
    """Normalize callables/coroutines into an awaitable result."""
    if asyncio.iscoroutine(value):
        return value
    if callable(value):
        return value()
    return value


class TaskQueue:
    """Thin wrapper around RQ that can fall back to inline execution."""

    def __init__(self) -> None:
        self.queue_names: list[str] = settings.worker_queue_names or ["default"]
        self._connection: Redis | None = None
        self._enabled = False
        self._bootstrap()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def connection(self) -> Redis | None:
        return self._connection

    def _bootstrap(self) -> None:
        """Initialize Redis connectivity unless disabled for tests."""
        if settings.environment.lower() == "test":
            logger.info("Task queue disabled in test environment")
            return
        try:
            connection = Redis.from_url(settings.redis_url)
            connection.ping()
        except (RedisError, OSError) as exc:  # pragma: no cover - network/redis specific
            logger.warning("Redis unavailable; running jobs inline: %s", redact_secrets(str(exc)))
            self._connection = None
            self._enabled = False
            return
        self._connection = connection
        self._enabled = True
        logger.info("Task queue ready (queues: %s)", ", ".join(self.queue_names))

    @property
    def store_is_process_local(self) -> bool:
        """Workers cannot see an in-memory store, so its jobs must run in the API process."""
        return settings.store_backend == "memory"

    def queue_for(self, preferred: str) -> str:
        """``preferred`` when it is a configured queue, otherwise the first one."""
        if preferred in self.queue_names:
            return preferred
        return self.queue_names[0] if self.queue_names else "default"

    def get_queue(self, queue_name: str | None = None) -> Queue:
        """Return a configured queue instance for enqueuing jobs."""
        if not self._connection:
            raise RuntimeError("Queue connection not initialized")
        target = queue_name or (self.queue_names[0] if self.queue_names else "default")
        return Queue(target, connection=self._connection)

    async def enqueue_quota_reset(self, *, fallback: Callable[[], Any] | None = None) -> Any:
        """Run the monthly quota reset through the maintenance queue."""
        from zeitgeist.jobs.quota import reset_monthly_quotas_job

        return await self.enqueue_or_run(
            reset_monthly_quotas_job,
            fallback=fallback,
            queue_name=self.queue_for("maintenance"),
            timeout_seconds=120,
            description="quota:monthly_reset",
            inline_only=self.store_is_process_local,
        )

    async def enqueue_analytics_aggregation(self, *, fallback: Callable[[], Any] | None = None) -> Any:
        """Run monthly analytics aggregation for every user through the analytics queue."""
        from zeitgeist.jobs.analytics import aggregate_analytics_job

        return await self.enqueue_or_run(
            aggregate_analytics_job,
            fallback=fallback,
            queue_name=self.queue_for("analytics"),
            timeout_seconds=600,
            description="analytics:aggregate_all",
            inline_only=self.store_is_process_local,
        )

    async def enqueue_or_run(
        self,
        func: Callable[..., Any],
        *,
        fallback: Callable[[], Any] | None = None,
        queue_name: str | None = None,
        timeout_seconds: int = 60,
        retry: Retry | None = DEFAULT_RETRY,
        description: str | None = None,
        inline_only: bool = False,
        **kwargs: Any,
    ) -> Any:
        """Enqueue a job and wait for the result; fall back to inline execution if needed."""

        async def _run_fallback() -> Any:
            target = fallback or (lambda: func(**kwargs))
            result = _maybe_async(target)
            if asyncio.iscoroutine(result):
                return await result
            return result

        if inline_only or not self._enabled or not self._connection:
            return await _run_fallback()

        def _enqueue_and_wait() -> Any:
            queue = self.get_queue(queue_name)
            enqueue_kwargs: dict[str, Any] = {
                "kwargs": kwargs,
                "job_timeout": timeout_seconds,
                "description": description,
            }
            if retry:
                enqueue_kwargs["retry"] = retry
            job = queue.enqueue(func, **enqueue_kwargs)
            return job.wait(timeout=timeout_seconds)

        try:
            return await asyncio.to_thread(_enqueue_and_wait)
        except (RedisError, OSError, TimeoutError) as exc:  # pragma: no cover - network/redis specific
            logger.warning("Falling back to inline execution after queue failure: %s", redact_secrets(str(exc)))
            return await _run_fallback()

    def snapshot(self) -> dict[str, Any]:
        """Return a diagnostic snapshot of queue, worker, and scheduler state."""
        if not self._connection:
            return {
                "status": "offline",
                "queues": [],
                "workers": [],
                "error": "queue connection not initialized",
                "redis_url": redact_secrets(settings.redis_url),
            }

        queues: list[dict[str, Any]] = []
        for name in self.queue_names:
            queue = Queue(name, connection=self._connection)
            queues.append(
                {
                    "name": name,
                    "size": queue.count,
                    "deferred": len(DeferredJobRegistry(queue=queue)),
                    "scheduled": len(ScheduledJobRegistry(queue=queue)),
                    "started": len(StartedJobRegistry(queue=queue)),
                    "failed": len(FailedJobRegistry(queue=queue)),
                }
            )

        workers: list[dict[str, Any]] = []
        try:
            for worker in Worker.all(connection=self._connection):
                workers.append(
                    {
                        "name": worker.name,
                        "state": getattr(worker, "state", "unknown"),
                        "queues": list(worker.queue_names()),
                        "current_job_id": worker.get_current_job_id(),
                    }
                )
        except RedisError as exc:  # pragma: no cover - network/redis specific
            logger.warning("Unable to list workers: %s", exc)

        scheduler_summary: dict[str, Any] = {}
        try:
            scheduler = Scheduler(connection=self._connection, queue_name=self.queue_names[0])
            scheduler_summary["scheduled_jobs"] = len(list(scheduler.get_jobs()))
            scheduler_summary["healthy"] = True
        except RedisError:  # pragma: no cover - redis specific
            scheduler_summary["scheduled_jobs"] = None
            scheduler_summary["healthy"] = False

        warnings: list[str] = []
        if not workers:
            warnings.append("no_workers")
        if scheduler_summary.get("healthy") is False:
            warnings.append("scheduler_unreachable")
        status = "online" if not warnings else "degraded"
        return {
            "status": status,
            "queues": queues,
            "workers": workers,
            "redis_url": redact_secrets(settings.redis_url),
            "scheduler": scheduler_summary,
            "warnings": warnings,
            "checked_at": datetime.now(timezone.utc).isoformat(),
        }


task_queue = TaskQueue()
