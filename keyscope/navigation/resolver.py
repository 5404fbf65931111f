"""Resolve a selected entry to its stored value."""

from __future__ import annotations

from collections.abc import Sequence

from keyscope.index.models import KeyEntry
from keyscope.index.paginator import encode_key
from keyscope.index.tree import KeyIndex
from keyscope.store.base import KeyspaceReader


class ValueResolver:
    def __init__(self, index: KeyIndex, store: KeyspaceReader) -> None:
        self.index = index
        self.store = store

    def full_key(self, cursor: Sequence[str], entry: KeyEntry) -> bytes:
        """Rebuild the fully-qualified store key for *entry* under *cursor*."""
        if self.index.flat:
            return encode_key(entry.key, self.index.encoding)
        text = self.index.join([*cursor, entry.key])
        return encode_key(text, self.index.encoding)

    def get_value(self, cursor: Sequence[str], entry: KeyEntry) -> bytes | None:
        """Point lookup; None for pure directories and keys deleted since indexing."""
        return self.store.get(self.index.keyspace, self.full_key(cursor, entry))
