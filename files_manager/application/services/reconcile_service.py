import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict

from ..ports.blob_store import BlobStore
from ..ports.file_repo import FileRepository

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def base_key(blob_name: str) -> str:
    # Variants are stored as "<key>_<width>"; uuid keys never contain "_"
    return blob_name.split("_", 1)[0]


@dataclass
class ReconcileService:
    file_repo: FileRepository
    blob_store: BlobStore
    pending_grace_seconds: int = 15 * 60
    clock: Callable[[], datetime] = utc_now

    def sweep(self) -> Dict[str, int]:
        """Drop abandoned upload reservations, then blobs no remaining record points at."""
        cutoff = self.clock() - timedelta(seconds=self.pending_grace_seconds)
        purged = self.file_repo.purge_pending(cutoff)

        # List blobs before keys: a row is always reserved before its blob is written,
        # so every in-flight upload seen on disk is also seen in the key set
        blob_names = self.blob_store.list_keys()
        live = set(self.file_repo.referenced_blob_keys())
        removed = 0
        for name in blob_names:
            if base_key(name) in live:
                continue
            self.blob_store.delete(name)
            removed += 1

        logger.info(f"Reconcile sweep: {purged} pending records purged, {removed} orphaned blobs removed")
        return {"pending_purged": purged, "blobs_removed": removed}
