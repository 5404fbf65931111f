"""Example database generation for trying out the inspector."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

import yaml

from keyscope.store.sqlite_store import SQLiteStore

logger = logging.getLogger(__name__)

DEFAULT_DELIMITERS = ["/", "\\", ":", "::", ",", ".", "-", "_"]

_DESCRIPTION = (
    "This is a long description that will require horizontal scrolling to view "
    "completely. It contains detailed information about the test data entry."
)


def example_record(i: int, j: int, k: int, delimiter: str) -> dict:
    """Build the sample document stored under one seeded key."""
    return {
        "key_id": f"value{i}{delimiter}{j}{k}",
        "timestamp": "2024-04-09T12:34:56Z",
        "description": _DESCRIPTION,
        "tags": ["test", "example", "generated"],
        "metrics": {
            "cpu_usage": 45.7,
            "memory_mb": 1234.5,
            "disk_io_mbps": 89.3,
            "network_mbps": 156.7,
            "latency_ms": 23.4,
        },
        "logs": [
            {
                "level": "INFO",
                "component": "TestGenerator",
                "message": "Generated test entry",
                "details": "Additional details about the test entry generation process "
                "that spans multiple lines\nto demonstrate vertical scrolling capabilities.",
            },
            {
                "level": "DEBUG",
                "component": "DataValidator",
                "message": "Validated entry structure",
                "details": "Performed structural validation of the generated test data\n"
                "with multiple validation rules applied.",
            },
        ],
        "status": {
            "state": "ACTIVE",
            "health": "HEALTHY",
            "last_update": "2024-04-09T12:34:56Z",
            "dependencies": ["system1", "system2"],
            "configuration": {"param1": "value1", "param2": "value2"},
        },
    }


def serialize_record(record: dict, position: int) -> bytes:
    """Alternate between JSON and YAML so the value pane sees both."""
    if position % 2 == 0:
        return json.dumps(record, indent=2).encode()
    return yaml.safe_dump(record, sort_keys=False).encode()


def seed_keyspace(
    store: SQLiteStore,
    keyspace: str,
    delimiter: str,
    keys_per_level: int,
    on_progress: Callable[[int], None] | None = None,
) -> int:
    """Fill *keyspace* with a three-level hierarchy split by *delimiter*.

    Returns the number of keys written.
    """
    written = 0
    for i in range(1, keys_per_level + 1):
        batch: list[tuple[bytes, bytes]] = []
        for j in range(1, keys_per_level + 1):
            for k in range(1, keys_per_level + 1):
                key = f"key{i}{delimiter}subkey{j}{delimiter}subsubkey{k}"
                value = serialize_record(example_record(i, j, k, delimiter), i + j + k)
                batch.append((key.encode(), value))
        store.put_many(keyspace, batch)
        written += len(batch)
        if on_progress is not None:
            on_progress(len(batch))
    return written


def create_example_db(
    path: str | Path,
    keys_per_level: int = 10,
    delimiters: list[str] | None = None,
    on_progress: Callable[[int], None] | None = None,
) -> int:
    """Create a new database at *path* with one keyspace per delimiter.

    Keyspaces are named ``tree1``, ``tree2``... in delimiter order. Raises
    FileExistsError rather than touching an existing database.
    """
    path = Path(path)
    if path.exists():
        raise FileExistsError(f"Path {path} already exists")
    if keys_per_level <= 0:
        raise ValueError(f"keys_per_level must be positive, got {keys_per_level}")

    delimiters = delimiters if delimiters is not None else DEFAULT_DELIMITERS
    total = 0
    with SQLiteStore(path, create=True) as store:
        for idx, delimiter in enumerate(delimiters, start=1):
            name = f"tree{idx}"
            count = seed_keyspace(store, name, delimiter, keys_per_level, on_progress)
            logger.info("Seeded %s with %d keys (delimiter %r)", name, count, delimiter)
            total += count
    return total
