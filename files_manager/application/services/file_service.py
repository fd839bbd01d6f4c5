import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..ports.blob_store import BlobStore
from ..ports.file_repo import FileRepository, FileNodeDto, FILE_TYPES, FOLDER, IMAGE, ROOT_PARENT_ID
from ..ports.job_queue import JobQueue, ThumbnailJob
from ...exceptions import ValidationError, NotFound, Forbidden, StorageError

logger = logging.getLogger(__name__)

PAGE_SIZE = 20
DEFAULT_MIME_TYPE = "application/octet-stream"
MAX_NAME_LENGTH = 255


def parse_identifier(value: Any) -> Optional[int]:
    """Return the integer id held by ``value``, or None if it is not a well-formed id."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def variant_key(blob_key: str, width: int) -> str:
    return f"{blob_key}_{width}"


def guess_mime_type(name: str) -> str:
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or DEFAULT_MIME_TYPE


@dataclass
class FileService:
    file_repo: FileRepository
    blob_store: Optional[BlobStore] = None
    job_queue: Optional[JobQueue] = None
    page_size: int = PAGE_SIZE

    def upload(
        self,
        user_id: int,
        name: Optional[str],
        type: Optional[str],
        parent_id: Any = ROOT_PARENT_ID,
        is_public: bool = False,
        data: Optional[str] = None,
    ) -> FileNodeDto:
        if not name:
            raise ValidationError("Missing name")
        if type not in FILE_TYPES:
            raise ValidationError("Missing type")
        if not data and type != FOLDER:
            raise ValidationError("Missing data")

        if parent_id is None:
            parent_id = ROOT_PARENT_ID
        parent_ref = parse_identifier(parent_id)
        if parent_ref is None:
            raise ValidationError("Parent not found")
        if parent_ref != ROOT_PARENT_ID:
            parent = self.file_repo.find_by_id(parent_ref)
            if not parent:
                raise ValidationError("Parent not found")
            if parent.type != FOLDER:
                raise ValidationError("Parent is not a folder")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError("Invalid name")

        node = FileNodeDto(
            id=None,
            user_id=user_id,
            name=name,
            type=type,
            is_public=bool(is_public),
            parent_id=parent_ref,
        )

        if type == FOLDER:
            node.id = self.file_repo.insert(node)
            return node

        try:
            # Whitespace is tolerated, other non-alphabet characters are not
            content = base64.b64decode("".join(data.split()), validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("Invalid data")

        # Reserve the row first so a failed blob write never leaves an orphan file
        node.blob_key = self.blob_store.new_key()
        node.id = self.file_repo.reserve(node)
        try:
            self.blob_store.write(node.blob_key, content)
        except StorageError:
            logger.error(f"Blob write failed for file {node.id}, discarding reservation")
            self.file_repo.discard(node.id)
            raise
        self.file_repo.commit(node.id)
        logger.info(f"Stored {type} {node.id} for user {user_id} ({len(content)} bytes)")

        if type == IMAGE:
            self._enqueue_thumbnails(user_id, node.id)
        return node

    def _enqueue_thumbnails(self, user_id: int, file_id: int) -> None:
        if self.job_queue is None:
            logger.warning(f"No job queue configured, thumbnails for file {file_id} skipped")
            return
        try:
            self.job_queue.enqueue(ThumbnailJob(user_id=user_id, file_id=file_id))
        except Exception as e:
            # The upload is already committed; thumbnails can be regenerated later
            logger.warning(f"Could not enqueue thumbnail job for file {file_id}: {e}")

    def get_for_owner(self, user_id: int, file_id: Any) -> FileNodeDto:
        ref = parse_identifier(file_id)
        node = self.file_repo.find_by_id(ref) if ref else None
        if not node or node.user_id != user_id:
            raise NotFound()
        return node

    def list_children(self, user_id: int, parent_id: Any = "0", page: Any = 0) -> List[FileNodeDto]:
        parent_ref = parse_identifier(parent_id if parent_id is not None else ROOT_PARENT_ID)
        if parent_ref is None:
            raise ValidationError("Invalid parentId")
        page_number = parse_identifier(page if page is not None else 0)
        if page_number is None:
            raise ValidationError("Invalid page")
        return self.file_repo.list_by_parent(user_id, parent_ref, page_number, self.page_size)

    def set_visibility(self, user_id: int, file_id: Any, is_public: bool) -> FileNodeDto:
        ref = parse_identifier(file_id)
        node = self.file_repo.find_by_id(ref) if ref else None
        if not node:
            raise NotFound()
        if node.user_id != user_id:
            raise Forbidden("User doesn't have access to file")
        return self.file_repo.set_public(node.id, is_public)

    def serve(self, requester_id: Optional[int], file_id: Any, width: Optional[int] = None) -> Tuple[bytes, str]:
        ref = parse_identifier(file_id)
        node = self.file_repo.find_by_id(ref) if ref else None
        if not node:
            raise NotFound()
        if not node.is_public and (requester_id is None or requester_id != node.user_id):
            raise NotFound()
        if node.type == FOLDER:
            raise ValidationError("A folder doesn't have content")

        key = node.blob_key if width is None else variant_key(node.blob_key, width)
        if not self.blob_store.exists(key):
            raise NotFound()
        return self.blob_store.read(key), guess_mime_type(node.name)
