"""Windowed listing of the entries at one hierarchy level."""

from __future__ import annotations

from collections.abc import Sequence

from keyscope.index.models import HierarchyNode, KeyEntry, WindowState
from keyscope.index.tree import KeyIndex
from keyscope.store.base import KeyspaceReader


class Paginator:
    """Serves (offset, count) windows from a KeyIndex.

    Delimited windows come from the in-memory tree. Flat windows use the
    store's bounded scan so preceding keys are never loaded; their total is
    the key count taken when the index was built.
    """

    def __init__(self, index: KeyIndex, store: KeyspaceReader) -> None:
        self.index = index
        self.store = store

    def resolve(self, cursor: Sequence[str]) -> HierarchyNode:
        """Node named by *cursor*; raises StaleCursorError when it has vanished."""
        return self.index.resolve(cursor)

    def total_count(self, cursor: Sequence[str] = ()) -> int:
        """Number of entries at the cursor's level."""
        if self.index.flat:
            self.index.resolve(cursor)
            return self.index.key_count
        return len(self.resolve(cursor).children)

    def get_window(self, cursor: Sequence[str], offset: int, count: int) -> WindowState:
        """Return at most *count* entries of the cursor's level starting at *offset*."""
        offset = max(offset, 0)
        count = max(count, 0)
        if self.index.flat:
            return self._flat_window(cursor, offset, count)

        node = self.resolve(cursor)
        segments = node.ordered_segments()
        entries = []
        for segment in segments[offset : offset + count]:
            child = node.children[segment]
            entries.append(
                KeyEntry(key=segment, has_children=child.has_children, has_value=child.has_value)
            )
        return WindowState(offset=offset, entries=tuple(entries), total=len(segments))

    def _flat_window(self, cursor: Sequence[str], offset: int, count: int) -> WindowState:
        self.index.resolve(cursor)
        keyspace = self.index.keyspace
        rows = self.store.scan(keyspace, offset, count)
        entries = tuple(
            KeyEntry(key=decode_flat_key(raw, self.index.encoding)) for raw, _ in rows
        )
        return WindowState(offset=offset, entries=entries, total=self.index.key_count)


def decode_flat_key(raw: bytes, encoding: str = "utf-8") -> str:
    """Decode a flat-mode key losslessly; undecodable bytes become surrogates."""
    return raw.decode(encoding, errors="surrogateescape")


def encode_key(text: str, encoding: str = "utf-8") -> bytes:
    """Inverse of decode_flat_key; also correct for cleanly decoded keys."""
    return text.encode(encoding, errors="surrogateescape")
