import logging
from typing import Optional
from sqlmodel import Session, select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .....db.models import User
from .....application.ports.user_repo import UserRepository, UserDto
from .....exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)


def _to_dto(rec: User) -> UserDto:
    return UserDto(id=rec.id, email=rec.email, password_hash=rec.password)


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_by_email(self, email: str) -> Optional[UserDto]:
        try:
            rec = self.session.exec(select(User).where(User.email == email)).first()
        except SQLAlchemyError as e:
            logger.error(f"Error looking up user by email: {e}")
            raise StorageError()
        return _to_dto(rec) if rec else None

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        try:
            rec = self.session.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Error looking up user {user_id}: {e}")
            raise StorageError()
        return _to_dto(rec) if rec else None

    def create(self, email: str, password_hash: str) -> UserDto:
        rec = User(email=email, password=password_hash)
        try:
            self.session.add(rec)
            self.session.commit()
            self.session.refresh(rec)
        except IntegrityError:
            # Lost a race against a concurrent registration of the same email
            self.session.rollback()
            raise ValidationError("Already exist")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error creating user: {e}")
            raise StorageError()
        return _to_dto(rec)

    def count(self) -> int:
        try:
            return self.session.exec(select(func.count()).select_from(User)).one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting users: {e}")
            raise StorageError()
