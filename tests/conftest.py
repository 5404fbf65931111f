"""Shared test fixtures for keyscope."""

import pytest

from keyscope.config.models import KeyscopeConfig
from keyscope.store.base import StoreError
from keyscope.store.sqlite_store import SQLiteStore


def _fill(store: SQLiteStore, keyspace: str, keys: dict[str, bytes]) -> None:
    for key, value in keys.items():
        store.put(keyspace, key.encode(), value)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def store(db_path):
    s = SQLiteStore(db_path, create=True)
    yield s
    s.close()


@pytest.fixture
def scenario_store(store):
    """The a/b/c, a/b/d, a/x layout in the default keyspace."""
    _fill(
        store,
        "default",
        {
            "a/b/c": b"value-c",
            "a/b/d": b"value-d",
            "a/x": b"value-x",
        },
    )
    return store


@pytest.fixture
def flat_store(store):
    """120 keys in ascending order in keyspace 'numbers'."""
    store.put_many("numbers", [(f"k{i:03d}".encode(), f"v{i}".encode()) for i in range(120)])
    return store


@pytest.fixture
def mixed_store(store):
    """Directory-with-a-value, empty segments and a sibling that sorts oddly."""
    _fill(
        store,
        "mixed",
        {
            "a": b"a-value",
            "a/b": b"ab-value",
            "a-b/x": b"dash",
            "trailing/": b"empty-tail",
            "/leading": b"empty-head",
        },
    )
    return store


@pytest.fixture
def sample_config():
    return KeyscopeConfig()


@pytest.fixture
def break_scan(monkeypatch):
    """Return a callable that makes ``store.scan`` fail like a lost database file."""

    def _break(store):
        def scan(keyspace, offset, count):
            raise StoreError("scan", "disk I/O error")

        monkeypatch.setattr(store, "scan", scan)

    return _break
