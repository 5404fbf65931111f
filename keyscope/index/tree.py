"""Hierarchical index derived from a flat, ordered keyspace."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from keyscope.index.models import HierarchyNode, KeyDecodeError, StaleCursorError
from keyscope.store.base import KeyspaceReader

logger = logging.getLogger(__name__)


class KeyIndex:
    """Segment tree over one keyspace, or a flat pass-through without a delimiter.

    In delimited mode every stored key maps to exactly one root-to-node path
    and every node exists because at least one key passes through it. In flat
    mode nothing is materialized; windows are read straight from the store.
    """

    def __init__(
        self,
        keyspace: str,
        delimiter: str | None,
        root: HierarchyNode,
        key_count: int,
        node_count: int = 0,
        decode_failures: list[KeyDecodeError] | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self.keyspace = keyspace
        self.delimiter = delimiter
        self.root = root
        self.key_count = key_count
        self.node_count = node_count
        self.decode_failures = decode_failures or []
        self.encoding = encoding

    @property
    def flat(self) -> bool:
        return self.delimiter is None

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        store: KeyspaceReader,
        keyspace: str,
        delimiter: str | None = "/",
        encoding: str = "utf-8",
    ) -> KeyIndex:
        """Scan *keyspace* once and construct the segment tree.

        Keys that cannot be decoded are recorded in ``decode_failures`` and
        left out; the rest of the build proceeds.
        """
        if delimiter == "":
            raise ValueError("delimiter must be a non-empty string or None")

        store.open_keyspace(keyspace)
        root = HierarchyNode("")

        if delimiter is None:
            return cls(keyspace, None, root, key_count=store.count(keyspace), encoding=encoding)

        failures: list[KeyDecodeError] = []
        key_count = 0
        node_count = 0
        for raw in store.iter_keys(keyspace):
            try:
                text = raw.decode(encoding)
            except UnicodeDecodeError as e:
                err = KeyDecodeError(raw, e)
                logger.warning("Skipping key in %s: %s", keyspace, err)
                failures.append(err)
                continue

            node = root
            for segment in text.split(delimiter):
                if segment not in node.children:
                    node_count += 1
                node = node.child(segment)
            node.has_value = True
            key_count += 1

        logger.info(
            "Indexed %s: %d keys, %d nodes, %d undecodable",
            keyspace,
            key_count,
            node_count,
            len(failures),
        )
        return cls(
            keyspace,
            delimiter,
            root,
            key_count=key_count,
            node_count=node_count,
            decode_failures=failures,
            encoding=encoding,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, cursor: Sequence[str]) -> HierarchyNode:
        """Follow *cursor* from the root; raise StaleCursorError if a segment is gone."""
        node = self.root
        if self.flat and cursor:
            raise StaleCursorError(tuple(cursor), cursor[0])
        for segment in cursor:
            nxt = node.children.get(segment)
            if nxt is None:
                raise StaleCursorError(tuple(cursor), segment)
            node = nxt
        return node

    def join(self, segments: Sequence[str]) -> str:
        """Rejoin segments into the fully-qualified key text."""
        if self.delimiter is None:
            if len(segments) != 1:
                raise ValueError("flat keys have exactly one segment")
            return segments[0]
        return self.delimiter.join(segments)

