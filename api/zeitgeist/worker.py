from __future__ import annotations

import logging

from redis import Redis
from rq import Connection, Queue, Worker

from zeitgeist.core.config import settings
from zeitgeist.core.logging_config import configure_logging


def _queue_objects(connection: Redis) -> list[Queue]:
    return [Queue(name, connection=connection) for name in settings.worker_queue_names]


def main() -> None:
    configure_logging()
    logger = logging.getLogger("zeitgeist.worker")
    redis_connection = Redis.from_url(settings.redis_url)
    queues = _queue_objects(redis_connection)
    if not queues:
        logger.error("No worker queues configured; set WORKER_QUEUE_NAMES or rely on the default.")
        return
    logger.info("Starting worker for queues: %s", ", ".join(settings.worker_queue_names))
    with Connection(redis_connection):
        worker = Worker(queues, connection=redis_connection, name="zeitgeist-worker")
        try:
            worker.work(with_scheduler=True)
        except KeyboardInterrupt:
            worker.request_stop()
            logger.info("Worker shutdown requested")


if __name__ == "__main__":
    main()
