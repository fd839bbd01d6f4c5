import logging
from typing import Optional

import redis

from ...application.ports.session_store import SessionStore
from ...exceptions import StorageError

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    def __init__(self, url: str, client: Optional["redis.Redis"] = None) -> None:
        self.client = client or redis.Redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            logger.error(f"Session cache read failed: {e}")
            raise StorageError()
        if isinstance(value, bytes):
            value = value.decode()
        return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            # SET with EX so the key and its expiry land atomically
            self.client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as e:
            logger.error(f"Session cache write failed: {e}")
            raise StorageError()

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Session cache delete failed: {e}")
            raise StorageError()

    def is_alive(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        self.client.close()
