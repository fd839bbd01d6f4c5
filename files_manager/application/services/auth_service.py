import base64
import binascii
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

from passlib.context import CryptContext

from ..ports.session_store import SessionStore
from ..ports.user_repo import UserRepository
from ...exceptions import Unauthorized

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SESSION_KEY_PREFIX = "auth_"
SESSION_TTL_SECONDS = 24 * 60 * 60


def session_key(token: str) -> str:
    return f"{SESSION_KEY_PREFIX}{token}"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def parse_basic_credentials(authorization: Optional[str]) -> Tuple[str, str]:
    """Split an ``Authorization: Basic <b64(email:password)>`` header."""
    if not authorization:
        raise Unauthorized()
    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        raise Unauthorized()
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise Unauthorized()
    email, sep, password = decoded.partition(":")
    if not sep or not email or not password:
        raise Unauthorized()
    return email, password


@dataclass
class AuthService:
    session_store: SessionStore
    user_repo: Optional[UserRepository] = None
    session_ttl: int = SESSION_TTL_SECONDS

    def authenticate(self, token: Optional[str]) -> int:
        """Resolve a session token to the user id it was issued for."""
        if not token:
            raise Unauthorized()
        user_id = self.session_store.get(session_key(token))
        if not user_id:
            raise Unauthorized()
        try:
            return int(user_id)
        except (ValueError, TypeError):
            logger.warning("Session cache holds a non-numeric user id")
            raise Unauthorized()

    def connect(self, authorization: Optional[str]) -> str:
        email, password = parse_basic_credentials(authorization)
        user = self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise Unauthorized()
        token = str(uuid.uuid4())
        self.session_store.set(session_key(token), str(user.id), self.session_ttl)
        logger.info(f"Session opened for user {user.id}")
        return token

    def disconnect(self, token: Optional[str]) -> None:
        user_id = self.authenticate(token)
        self.session_store.delete(session_key(token))
        logger.info(f"Session closed for user {user_id}")
