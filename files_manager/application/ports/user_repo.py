from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class UserDto:
    id: int
    email: str
    password_hash: str


class UserRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        ...

    def create(self, email: str, password_hash: str) -> UserDto:
        ...

    def count(self) -> int:
        ...
