"""Data models for the key index subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field


class KeyDecodeError(Exception):
    """A stored key whose bytes are not valid text for the configured encoding."""

    def __init__(self, raw_key: bytes, cause: UnicodeDecodeError) -> None:
        self.raw_key = raw_key
        super().__init__(f"cannot decode key {raw_key!r}: {cause.reason}")
        self.__cause__ = cause


class StaleCursorError(Exception):
    """The cursor names a path that no longer exists in the current index."""

    def __init__(self, cursor: tuple[str, ...], missing: str) -> None:
        self.cursor = cursor
        self.missing = missing
        super().__init__(f"path {'/'.join(cursor)!r} vanished at segment {missing!r}")


@dataclass(eq=False)
class HierarchyNode:
    """One segment at one level of the key hierarchy.

    ``has_value`` and ``children`` are independent: a node can be both the
    end of a stored key and the parent of longer keys.
    """

    segment: str
    has_value: bool = False
    children: dict[str, HierarchyNode] = field(default_factory=dict)
    _ordered: list[str] | None = field(default=None, repr=False)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def child(self, segment: str) -> HierarchyNode:
        """Return the child for *segment*, creating it if needed."""
        node = self.children.get(segment)
        if node is None:
            node = HierarchyNode(segment)
            self.children[segment] = node
            self._ordered = None
        return node

    def ordered_segments(self) -> list[str]:
        """Child segments in lexicographic order, sorted once and cached."""
        if self._ordered is None:
            self._ordered = sorted(self.children)
        return self._ordered


@dataclass(frozen=True)
class KeyEntry:
    """Display projection of one child of the active node."""

    key: str
    has_children: bool = False
    has_value: bool = True


@dataclass(frozen=True)
class WindowState:
    """The visible slice at the cursor's level. Replaced, never mutated."""

    offset: int = 0
    entries: tuple[KeyEntry, ...] = ()
    total: int = 0

    def __len__(self) -> int:
        return len(self.entries)

    def entry_at(self, index: int) -> KeyEntry | None:
        """Entry at a visible index, or None when out of range."""
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None
