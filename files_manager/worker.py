"""
Standalone thumbnail worker.

Run with ``python -m files_manager.worker`` next to an API started with
``JOB_QUEUE_BACKEND=redis``. On start it requeues jobs a previous worker left
unacknowledged and sweeps orphaned blobs, then consumes the queue until
SIGINT/SIGTERM.
"""

import logging
import signal
import threading

from dotenv import load_dotenv
from sqlmodel import Session

from .application.services.reconcile_service import ReconcileService
from .config import get_settings
from .database import build_engine, create_db_and_tables
from .infrastructure.persistence.sqlalchemy.repositories.file_repository_sql import SqlFileRepository
from .infrastructure.queue.redis_job_queue import RedisJobQueue
from .infrastructure.storage.local_blob_store import LocalBlobStore
from .jobs import make_thumbnail_handler

logger = logging.getLogger(__name__)


def main() -> None:
    load_dotenv()
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )

    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    create_db_and_tables(engine)
    blob_store = LocalBlobStore(settings.FOLDER_PATH)
    job_queue = RedisJobQueue(settings.REDIS_URL, name=settings.JOB_QUEUE_NAME)

    stop = threading.Event()

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, finishing current job")
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    job_queue.requeue_unacked()
    with Session(engine) as session:
        ReconcileService(
            file_repo=SqlFileRepository(session),
            blob_store=blob_store,
            pending_grace_seconds=settings.PENDING_GRACE_SECONDS,
        ).sweep()

    logger.info(f"Thumbnail worker consuming '{settings.JOB_QUEUE_NAME}'")
    try:
        job_queue.consume(make_thumbnail_handler(engine, blob_store, settings.THUMBNAIL_WIDTHS), stop)
    finally:
        job_queue.close()
        engine.dispose()
        logger.info("Thumbnail worker stopped")


if __name__ == "__main__":
    main()
