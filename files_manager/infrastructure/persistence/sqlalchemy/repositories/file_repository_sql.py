import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlmodel import Session, select, func
from sqlalchemy.exc import SQLAlchemyError

from .....db.models import FileNode
from .....db.models.files.file_node import STATUS_PENDING, STATUS_COMMITTED
from .....application.ports.file_repo import FileRepository, FileNodeDto
from .....exceptions import StorageError, NotFound

logger = logging.getLogger(__name__)


def _to_dto(rec: FileNode) -> FileNodeDto:
    return FileNodeDto(
        id=rec.id,
        user_id=rec.user_id,
        name=rec.name,
        type=rec.type,
        is_public=rec.is_public,
        parent_id=rec.parent_id,
        blob_key=rec.blob_key,
    )


class SqlFileRepository(FileRepository):
    def __init__(self, session: Session):
        self.session = session

    def _add(self, node: FileNodeDto, status: str) -> int:
        rec = FileNode(
            user_id=node.user_id,
            name=node.name,
            type=node.type,
            is_public=node.is_public,
            parent_id=node.parent_id,
            blob_key=node.blob_key,
            status=status,
        )
        try:
            self.session.add(rec)
            self.session.commit()
            self.session.refresh(rec)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error inserting file record: {e}")
            raise StorageError()
        return rec.id

    def _get_committed(self, file_id: int) -> Optional[FileNode]:
        return self.session.exec(
            select(FileNode).where(FileNode.id == file_id, FileNode.status == STATUS_COMMITTED)
        ).first()

    def insert(self, node: FileNodeDto) -> int:
        return self._add(node, STATUS_COMMITTED)

    def reserve(self, node: FileNodeDto) -> int:
        return self._add(node, STATUS_PENDING)

    def commit(self, file_id: int) -> None:
        try:
            rec = self.session.get(FileNode, file_id)
            if rec is None:
                raise StorageError(f"Reserved file record {file_id} disappeared")
            rec.status = STATUS_COMMITTED
            self.session.add(rec)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error committing file record {file_id}: {e}")
            raise StorageError()

    def discard(self, file_id: int) -> None:
        try:
            rec = self.session.get(FileNode, file_id)
            if rec is not None and rec.status == STATUS_PENDING:
                self.session.delete(rec)
                self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error discarding pending file record {file_id}: {e}")
            raise StorageError()

    def find_by_id(self, file_id: int) -> Optional[FileNodeDto]:
        try:
            rec = self._get_committed(file_id)
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving file {file_id}: {e}")
            raise StorageError()
        return _to_dto(rec) if rec else None

    def list_by_parent(self, user_id: int, parent_id: int, page: int, page_size: int) -> List[FileNodeDto]:
        statement = (
            select(FileNode)
            .where(
                FileNode.user_id == user_id,
                FileNode.parent_id == parent_id,
                FileNode.status == STATUS_COMMITTED,
            )
            .order_by(FileNode.id)
            .offset(page * page_size)
            .limit(page_size)
        )
        try:
            return [_to_dto(rec) for rec in self.session.exec(statement).all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing files under parent {parent_id}: {e}")
            raise StorageError()

    def set_public(self, file_id: int, is_public: bool) -> FileNodeDto:
        try:
            rec = self._get_committed(file_id)
            if rec is None:
                raise NotFound()
            rec.is_public = is_public
            self.session.add(rec)
            self.session.commit()
            self.session.refresh(rec)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error updating visibility of file {file_id}: {e}")
            raise StorageError()
        return _to_dto(rec)

    def count(self) -> int:
        try:
            return self.session.exec(
                select(func.count()).select_from(FileNode).where(FileNode.status == STATUS_COMMITTED)
            ).one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting files: {e}")
            raise StorageError()

    def referenced_blob_keys(self) -> List[str]:
        try:
            rows = self.session.exec(
                select(FileNode.blob_key).where(FileNode.blob_key.is_not(None))
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Error collecting blob keys: {e}")
            raise StorageError()
        return list(rows)

    def purge_pending(self, older_than: datetime) -> int:
        if older_than.tzinfo is None:
            # created_at is stored in UTC
            older_than = older_than.replace(tzinfo=timezone.utc)
        try:
            stale = self.session.exec(
                select(FileNode).where(
                    FileNode.status == STATUS_PENDING,
                    FileNode.created_at < older_than,
                )
            ).all()
            for rec in stale:
                self.session.delete(rec)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error purging pending file records: {e}")
            raise StorageError()
        return len(stale)
