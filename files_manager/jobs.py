from typing import Callable, List

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .application.ports.blob_store import BlobStore
from .application.ports.job_queue import ThumbnailJob
from .application.services.thumbnail_service import ThumbnailService
from .infrastructure.persistence.sqlalchemy.repositories.file_repository_sql import SqlFileRepository


def make_thumbnail_handler(engine: Engine, blob_store: BlobStore, widths: List[int]) -> Callable[[ThumbnailJob], None]:
    """Bind a ThumbnailService to a fresh database session per job."""

    def handle(job: ThumbnailJob) -> None:
        with Session(engine) as session:
            service = ThumbnailService(
                file_repo=SqlFileRepository(session),
                blob_store=blob_store,
                widths=list(widths),
            )
            service.process(job)

    return handle
