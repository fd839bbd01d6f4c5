from dataclasses import dataclass
from typing import Optional

from ..ports.user_repo import UserRepository, UserDto
from .auth_service import hash_password
from ...exceptions import ValidationError, Unauthorized

MAX_EMAIL_LENGTH = 255


@dataclass
class UserService:
    user_repo: UserRepository

    def register(self, email: Optional[str], password: Optional[str]) -> UserDto:
        if not email:
            raise ValidationError("Missing email")
        if not password:
            raise ValidationError("Missing password")
        if len(email) > MAX_EMAIL_LENGTH:
            raise ValidationError("Invalid email")
        if self.user_repo.get_by_email(email):
            raise ValidationError("Already exist")
        return self.user_repo.create(email, hash_password(password))

    def me(self, user_id: int) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            # Session outlived its user
            raise Unauthorized()
        return user
