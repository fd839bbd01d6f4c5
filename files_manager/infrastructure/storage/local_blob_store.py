import logging
import os
import tempfile
import uuid
from typing import List

from ...application.ports.blob_store import BlobStore
from ...exceptions import NotFound, StorageError

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Blobs as flat files under one folder, named by an opaque key."""

    def __init__(self, folder_path: str) -> None:
        self.folder_path = folder_path

    def _path(self, key: str) -> str:
        if not key or os.path.basename(key) != key or key.startswith("."):
            raise NotFound()
        return os.path.join(self.folder_path, key)

    def path_for(self, key: str) -> str:
        return self._path(key)

    def new_key(self) -> str:
        return str(uuid.uuid4())

    def write(self, key: str, data: bytes) -> None:
        path = self._path(key)
        try:
            os.makedirs(self.folder_path, exist_ok=True)
            # Write beside the target then rename, so readers never see a partial file
            fd, tmp_path = tempfile.mkstemp(dir=self.folder_path, prefix=".tmp-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Error storing blob {key}: {e}")
            raise StorageError()

    def read(self, key: str) -> bytes:
        path = self._path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise NotFound()
        except OSError as e:
            logger.error(f"Error reading blob {key}: {e}")
            raise StorageError()

    def exists(self, key: str) -> bool:
        try:
            return os.path.isfile(self._path(key))
        except NotFound:
            return False

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Error deleting blob {key}: {e}")
            raise StorageError()

    def list_keys(self) -> List[str]:
        if not os.path.isdir(self.folder_path):
            return []
        return [
            name for name in os.listdir(self.folder_path)
            if not name.startswith(".") and os.path.isfile(os.path.join(self.folder_path, name))
        ]
