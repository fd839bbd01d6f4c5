# files_manager/schemas/files.py
from pydantic import BaseModel
from typing import Optional, Union

__all__ = ["FileCreate", "FileResponse"]

class FileCreate(BaseModel):
    # Everything is optional here; the upload pipeline reports what is missing
    name: Optional[str] = None
    type: Optional[str] = None
    parentId: Optional[Union[int, str]] = 0
    isPublic: bool = False
    data: Optional[str] = None

class FileResponse(BaseModel):
    id: int
    userId: int
    name: str
    type: str
    isPublic: bool
    parentId: int
