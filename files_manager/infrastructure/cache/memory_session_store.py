import threading
import time
from typing import Callable, Dict, Optional, Tuple

from ...application.ports.session_store import SessionStore


class InMemorySessionStore(SessionStore):
    """Process-local session cache with per-key expiry, for tests and single-process runs."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._store: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            rec = self._store.get(key)
            if not rec:
                return None
            value, expires_at = rec
            if self._clock() >= expires_at:
                # prune
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._store[key] = (value, self._clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def is_alive(self) -> bool:
        return True

    def close(self) -> None:
        with self._lock:
            self._store.clear()
