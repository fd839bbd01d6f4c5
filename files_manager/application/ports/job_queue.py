from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol


@dataclass
class ThumbnailJob:
    user_id: Optional[int]
    file_id: Optional[int]

    def to_payload(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "fileId": self.file_id}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ThumbnailJob":
        return cls(user_id=payload.get("userId"), file_id=payload.get("fileId"))


class JobQueue(Protocol):
    def enqueue(self, job: ThumbnailJob) -> None:
        ...
