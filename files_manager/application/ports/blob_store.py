from typing import List, Protocol


class BlobStore(Protocol):
    def new_key(self) -> str:
        ...

    def write(self, key: str, data: bytes) -> None:
        ...

    def read(self, key: str) -> bytes:
        ...

    def exists(self, key: str) -> bool:
        ...

    def delete(self, key: str) -> None:
        ...

    def list_keys(self) -> List[str]:
        ...
