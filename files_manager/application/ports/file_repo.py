from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol

FOLDER = "folder"
FILE = "file"
IMAGE = "image"
FILE_TYPES = (FOLDER, FILE, IMAGE)

ROOT_PARENT_ID = 0


@dataclass
class FileNodeDto:
    id: Optional[int]
    user_id: int
    name: str
    type: str
    is_public: bool = False
    parent_id: int = ROOT_PARENT_ID
    blob_key: Optional[str] = None

    def to_response(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "type": self.type,
            "isPublic": self.is_public,
            "parentId": self.parent_id,
        }


class FileRepository(Protocol):
    def insert(self, node: FileNodeDto) -> int:
        """Insert a committed record and return its generated id."""
        ...

    def reserve(self, node: FileNodeDto) -> int:
        """Insert a pending record, invisible to reads until committed."""
        ...

    def commit(self, file_id: int) -> None:
        ...

    def discard(self, file_id: int) -> None:
        ...

    def find_by_id(self, file_id: int) -> Optional[FileNodeDto]:
        ...

    def list_by_parent(self, user_id: int, parent_id: int, page: int, page_size: int) -> List[FileNodeDto]:
        ...

    def set_public(self, file_id: int, is_public: bool) -> FileNodeDto:
        ...

    def count(self) -> int:
        ...

    def referenced_blob_keys(self) -> List[str]:
        ...

    def purge_pending(self, older_than: datetime) -> int:
        ...
