"""Store interface and errors."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable


class StoreError(Exception):
    """Wraps backend-specific failures with the operation that triggered them."""

    def __init__(self, operation: str, cause: Exception | str) -> None:
        self.operation = operation
        super().__init__(f"store {operation} failed: {cause}")
        if isinstance(cause, Exception):
            self.__cause__ = cause


@runtime_checkable
class KeyspaceReader(Protocol):
    """Read access to an ordered, byte-keyed store split into named keyspaces."""

    def keyspaces(self) -> list[str]: ...

    def open_keyspace(self, name: str) -> None: ...

    def iter_keys(self, keyspace: str) -> Iterator[bytes]: ...

    def scan(self, keyspace: str, offset: int, count: int) -> list[tuple[bytes, bytes]]: ...

    def get(self, keyspace: str, key: bytes) -> bytes | None: ...

    def count(self, keyspace: str) -> int: ...


@runtime_checkable
class KeyValueStore(KeyspaceReader, Protocol):
    """Full store: reads plus the writes used by seeding and tests."""

    def create_keyspace(self, name: str) -> None: ...

    def put(self, keyspace: str, key: bytes, value: bytes) -> None: ...

    def delete(self, keyspace: str, key: bytes) -> bool: ...

    def close(self) -> None: ...
