# files_manager/db/models/files/file_node.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime, timezone


STATUS_PENDING = "pending"
STATUS_COMMITTED = "committed"

class FileNode(SQLModel, table=True):
    __tablename__ = "files"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    name: str = Field(max_length=255)
    type: str = Field(max_length=10)
    is_public: bool = Field(default=False)
    # 0 is the root sentinel, never a generated id
    parent_id: int = Field(default=0, index=True)
    blob_key: Optional[str] = Field(max_length=64, default=None)
    status: str = Field(max_length=10, default=STATUS_COMMITTED, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )
