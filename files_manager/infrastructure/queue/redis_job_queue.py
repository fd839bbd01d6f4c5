"""
Redis-backed thumbnail job queue.

Producers LPUSH JSON payloads onto the queue list. Consumers atomically move a
payload onto a processing list while they work on it and remove it once done,
so a consumer that dies mid-job leaves the payload behind for
``requeue_unacked`` to deliver again (at-least-once).
"""

import json
import logging
import threading
from typing import Callable, Optional, Tuple

import redis

from ...application.ports.job_queue import JobQueue, ThumbnailJob
from ...exceptions import JobError, StorageError

logger = logging.getLogger(__name__)


class RedisJobQueue(JobQueue):
    def __init__(self, url: Optional[str] = None, name: str = "fileQueue", client: Optional["redis.Redis"] = None):
        if client is None and not url:
            raise ValueError("RedisJobQueue needs a url or a client")
        self.client = client or redis.Redis.from_url(url, decode_responses=True)
        self.name = name
        self.processing = f"{name}:processing"

    def enqueue(self, job: ThumbnailJob) -> None:
        try:
            self.client.lpush(self.name, json.dumps(job.to_payload()))
        except redis.RedisError as e:
            raise StorageError(f"Could not enqueue job: {e}")

    def reserve(self, timeout: int = 5) -> Optional[Tuple[str, ThumbnailJob]]:
        raw = self.client.blmove(self.name, self.processing, timeout, "RIGHT", "LEFT")
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise ValueError("payload is not an object")
        except ValueError as e:
            # Never going to parse, drop it instead of redelivering forever
            self.ack(raw)
            raise JobError(f"Malformed job payload {raw!r}: {e}")
        return raw, ThumbnailJob.from_payload(payload)

    def ack(self, raw: str) -> None:
        self.client.lrem(self.processing, 1, raw)

    def requeue_unacked(self) -> int:
        moved = 0
        while self.client.lmove(self.processing, self.name, "RIGHT", "RIGHT") is not None:
            moved += 1
        if moved:
            logger.info(f"Requeued {moved} unacknowledged jobs")
        return moved

    def consume(
        self,
        handler: Callable[[ThumbnailJob], None],
        stop: threading.Event,
        timeout: int = 5,
        retry_delay: float = 1.0,
    ) -> None:
        while not stop.is_set():
            try:
                reserved = self.reserve(timeout=timeout)
            except JobError as e:
                logger.warning(str(e))
                continue
            except redis.RedisError as e:
                logger.error(f"Job queue unavailable, retrying in {retry_delay}s: {e}")
                stop.wait(retry_delay)
                continue
            if reserved is None:
                continue
            raw, job = reserved
            try:
                handler(job)
            except JobError as e:
                logger.warning(f"Thumbnail job {raw} failed: {e}")
            except Exception:
                # Left on the processing list; requeued on the next worker start
                logger.exception(f"Thumbnail job {raw} crashed")
                continue
            try:
                self.ack(raw)
            except redis.RedisError as e:
                # Stays on the processing list and is redelivered after requeue
                logger.error(f"Could not acknowledge job {raw}: {e}")
                stop.wait(retry_delay)

    def is_alive(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        self.client.close()
