"""KeyValueStore implementation backed by a local SQLite database."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from keyscope.store.base import StoreError

logger = logging.getLogger(__name__)

DEFAULT_KEYSPACE = "default"

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS keyspaces (
    name TEXT PRIMARY KEY
);
CREATE TABLE IF NOT EXISTS entries (
    keyspace TEXT NOT NULL,
    key BLOB NOT NULL,
    value BLOB NOT NULL,
    PRIMARY KEY (keyspace, key)
) WITHOUT ROWID;
"""


class SQLiteStore:
    """Ordered byte-keyed store using SQLite with WAL mode.

    Every keyspace is a slice of the ``entries`` table. Keys are BLOBs, so
    SQLite's memcmp collation gives ascending byte order for free, and
    ``LIMIT/OFFSET`` provides bounded scans without materializing the
    preceding rows in Python.
    """

    def __init__(self, db_path: str | Path, *, create: bool = False) -> None:
        path = Path(db_path)
        if not path.exists():
            if not create:
                raise StoreError("open", f"no database at {path}")
            path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(path)
        try:
            # isolation_level=None => autocommit; put_many opens its own transaction.
            self._conn = sqlite3.connect(self.db_path, isolation_level=None, timeout=5)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
            self._conn.execute(
                "INSERT OR IGNORE INTO keyspaces (name) VALUES (?)", (DEFAULT_KEYSPACE,)
            )
        except sqlite3.Error as e:
            raise StoreError("open", e) from e
        logger.debug("Opened store %s", self.db_path)

    # -- helpers ---------------------------------------------------------------

    def _require_keyspace(self, name: str) -> None:
        row = self._conn.execute(
            "SELECT 1 FROM keyspaces WHERE name = ?", (name,)
        ).fetchone()
        if row is None:
            raise StoreError("open_keyspace", f"unknown keyspace {name!r}")

    # -- reads -----------------------------------------------------------------

    def keyspaces(self) -> list[str]:
        """Return every keyspace name (unordered; callers sort for display)."""
        try:
            rows = self._conn.execute("SELECT name FROM keyspaces").fetchall()
        except sqlite3.Error as e:
            raise StoreError("keyspaces", e) from e
        return [r[0] for r in rows]

    def open_keyspace(self, name: str) -> None:
        """Check that *name* exists; raises StoreError if it does not."""
        try:
            self._require_keyspace(name)
        except sqlite3.Error as e:
            raise StoreError("open_keyspace", e) from e

    def iter_keys(self, keyspace: str) -> Iterator[bytes]:
        """Yield every key of *keyspace* in ascending byte order."""
        try:
            cursor = self._conn.execute(
                "SELECT key FROM entries WHERE keyspace = ? ORDER BY key", (keyspace,)
            )
            for (key,) in cursor:
                yield bytes(key)
        except sqlite3.Error as e:
            raise StoreError("iter_keys", e) from e

    def scan(self, keyspace: str, offset: int, count: int) -> list[tuple[bytes, bytes]]:
        """Return up to *count* (key, value) pairs starting at the *offset*-th key."""
        if count <= 0:
            return []
        try:
            rows = self._conn.execute(
                "SELECT key, value FROM entries WHERE keyspace = ? "
                "ORDER BY key LIMIT ? OFFSET ?",
                (keyspace, count, max(offset, 0)),
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreError("scan", e) from e
        return [(bytes(k), bytes(v)) for k, v in rows]

    def get(self, keyspace: str, key: bytes) -> bytes | None:
        """Point lookup; None when nothing is bound to *key*."""
        try:
            row = self._conn.execute(
                "SELECT value FROM entries WHERE keyspace = ? AND key = ?",
                (keyspace, key),
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError("get", e) from e
        return None if row is None else bytes(row[0])

    def count(self, keyspace: str) -> int:
        """Number of keys in *keyspace*."""
        try:
            row = self._conn.execute(
                "SELECT COUNT(*) FROM entries WHERE keyspace = ?", (keyspace,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError("count", e) from e
        return row[0]

    # -- writes ----------------------------------------------------------------

    def create_keyspace(self, name: str) -> None:
        try:
            self._conn.execute("INSERT OR IGNORE INTO keyspaces (name) VALUES (?)", (name,))
        except sqlite3.Error as e:
            raise StoreError("create_keyspace", e) from e

    def put(self, keyspace: str, key: bytes, value: bytes) -> None:
        """Bind *value* to *key*, creating the keyspace if needed."""
        try:
            self._conn.execute(
                "INSERT OR IGNORE INTO keyspaces (name) VALUES (?)", (keyspace,)
            )
            self._conn.execute(
                "INSERT OR REPLACE INTO entries (keyspace, key, value) VALUES (?, ?, ?)",
                (keyspace, key, value),
            )
        except sqlite3.Error as e:
            raise StoreError("put", e) from e

    def put_many(self, keyspace: str, items: list[tuple[bytes, bytes]]) -> None:
        """Insert many pairs in a single transaction."""
        cursor = self._conn.cursor()
        try:
            cursor.execute("BEGIN IMMEDIATE")
            cursor.execute("INSERT OR IGNORE INTO keyspaces (name) VALUES (?)", (keyspace,))
            cursor.executemany(
                "INSERT OR REPLACE INTO entries (keyspace, key, value) VALUES (?, ?, ?)",
                [(keyspace, k, v) for k, v in items],
            )
            cursor.execute("COMMIT")
        except sqlite3.Error as e:
            self._conn.rollback()
            raise StoreError("put_many", e) from e

    def delete(self, keyspace: str, key: bytes) -> bool:
        """Remove *key*; returns whether anything was deleted."""
        try:
            cursor = self._conn.execute(
                "DELETE FROM entries WHERE keyspace = ? AND key = ?", (keyspace, key)
            )
        except sqlite3.Error as e:
            raise StoreError("delete", e) from e
        return cursor.rowcount > 0

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SQLiteStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
