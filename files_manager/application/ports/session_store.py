from typing import Optional, Protocol


class SessionStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def is_alive(self) -> bool:
        ...

    def close(self) -> None:
        ...
