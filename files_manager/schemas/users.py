# files_manager/schemas/users.py
from pydantic import BaseModel
from typing import Optional

__all__ = ["UserCreate", "UserResponse", "TokenResponse", "StatusResponse", "StatsResponse"]

class UserCreate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class UserResponse(BaseModel):
    id: int
    email: str

class TokenResponse(BaseModel):
    token: str

class StatusResponse(BaseModel):
    redis: bool
    db: bool

class StatsResponse(BaseModel):
    users: int
    files: int
