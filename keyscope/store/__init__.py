"""Storage backends for keyscope."""

from keyscope.store.base import KeyspaceReader, KeyValueStore, StoreError
from keyscope.store.sqlite_store import DEFAULT_KEYSPACE, SQLiteStore


__all__ = [
    "DEFAULT_KEYSPACE",
    "KeyValueStore",
    "KeyspaceReader",
    "SQLiteStore",
    "StoreError",
]
