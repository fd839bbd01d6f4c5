"""
In-process thumbnail job queue.

Jobs go into a bounded queue drained by a small thread pool, so resizing never
runs on a request thread. When the queue is full the job is refused with
JobQueueFull; the caller decides whether that matters (uploads treat it as a
dropped, regenerable thumbnail).
"""

import logging
import queue
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from ...application.ports.job_queue import JobQueue, ThumbnailJob
from ...exceptions import JobError, JobQueueFull

logger = logging.getLogger(__name__)

_STOP = object()


class ThreadedJobQueue(JobQueue):
    def __init__(
        self,
        handler: Callable[[ThumbnailJob], None],
        max_workers: int = 2,
        maxsize: int = 1000,
    ):
        self.handler = handler
        self.max_workers = max_workers
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._executor: Optional[ThreadPoolExecutor] = None

    def start(self) -> None:
        if self._executor is not None:
            logger.warning("ThreadedJobQueue already started")
            return
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="thumbnail-worker"
        )
        for _ in range(self.max_workers):
            self._executor.submit(self._run)
        logger.info(f"Job queue started with {self.max_workers} workers")

    def enqueue(self, job: ThumbnailJob) -> None:
        try:
            self._queue.put_nowait(job)
        except queue.Full:
            raise JobQueueFull(f"Job queue is full ({self._queue.maxsize} pending)")

    def join(self) -> None:
        """Block until every job enqueued so far has been processed."""
        self._queue.join()

    def close(self, wait: bool = True) -> None:
        if self._executor is None:
            return
        for _ in range(self.max_workers):
            # Blocks if the queue is full, workers keep draining meanwhile
            self._queue.put(_STOP)
        self._executor.shutdown(wait=wait)
        self._executor = None
        logger.info("Job queue shutdown complete")

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is _STOP:
                    return
                self.handler(job)
            except JobError as e:
                logger.warning(f"Thumbnail job {job} failed: {e}")
            except Exception:
                logger.exception(f"Thumbnail job {job} crashed")
            finally:
                self._queue.task_done()
