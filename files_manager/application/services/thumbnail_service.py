import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from PIL import Image

from ..ports.blob_store import BlobStore
from ..ports.file_repo import FileRepository
from ..ports.job_queue import ThumbnailJob
from .file_service import parse_identifier, variant_key
from ...exceptions import JobError, NotFound

logger = logging.getLogger(__name__)

THUMBNAIL_WIDTHS = (500, 250, 100)


def resize_to_width(image_data: bytes, width: int) -> bytes:
    """Scale an image down to ``width`` pixels wide, keeping its format and aspect ratio.

    Images already narrower than ``width`` are re-encoded at their own size.
    """
    with Image.open(io.BytesIO(image_data)) as img:
        fmt = img.format or "PNG"
        img.load()
        if img.width > width:
            height = max(1, round(img.height * width / img.width))
            out = img.resize((width, height), Image.Resampling.LANCZOS)
        else:
            out = img.copy()
        # Convert to RGB if necessary
        if fmt == "JPEG" and out.mode not in ("RGB", "L"):
            out = out.convert("RGB")
        buf = io.BytesIO()
        out.save(buf, format=fmt)
        return buf.getvalue()


@dataclass
class ThumbnailService:
    file_repo: FileRepository
    blob_store: BlobStore
    widths: List[int] = field(default_factory=lambda: list(THUMBNAIL_WIDTHS))

    def process(self, job: ThumbnailJob) -> Dict[int, bool]:
        """Generate every width for the job's image.

        Returns which widths were written. Raises JobError when the job can
        never succeed; a single width failing is only logged.
        """
        if job.user_id is None or job.user_id == "":
            raise JobError("Missing userId")
        if job.file_id is None or job.file_id == "":
            raise JobError("Missing fileId")

        user_id = parse_identifier(job.user_id)
        file_id = parse_identifier(job.file_id)
        node = self.file_repo.find_by_id(file_id) if file_id else None
        if not node or node.user_id != user_id or not node.blob_key:
            raise JobError("File not found")

        try:
            original = self.blob_store.read(node.blob_key)
        except NotFound:
            raise JobError("File not found")

        results: Dict[int, bool] = {}
        for width in self.widths:
            results[width] = self._generate(node.id, node.blob_key, original, width)

        done = sum(results.values())
        logger.info(f"Thumbnails for file {node.id}: {done}/{len(results)} widths generated")
        return results

    def _generate(self, file_id: int, blob_key: str, original: bytes, width: int) -> bool:
        try:
            data = resize_to_width(original, width)
            self.blob_store.write(variant_key(blob_key, width), data)
        except Exception as e:
            logger.warning(f"Thumbnail {width}px for file {file_id} failed: {e}", exc_info=True)
            return False
        return True
