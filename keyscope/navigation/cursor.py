"""Position inside the key hierarchy."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class PathCursor:
    """Ordered stack of segments from the index root; empty means the root.

    A pure coordinate: it never touches the store or the index.
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: Iterable[str] = ()) -> None:
        self._segments: list[str] = list(segments)

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self._segments)

    @property
    def at_root(self) -> bool:
        return not self._segments

    def pop(self) -> str | None:
        """Remove and return the last segment, or None at the root."""
        if not self._segments:
            return None
        return self._segments.pop()

    def move_to(self, segments: Iterable[str]) -> None:
        """Jump to another position, e.g. after a descend or a reset to the root."""
        self._segments = list(segments)

    def child(self, segment: str) -> tuple[str, ...]:
        """Segments of *segment* below the current position."""
        return (*self._segments, segment)

    def label(self, delimiter: str | None = "/") -> str:
        """Human-readable path, e.g. ``/a/b``."""
        sep = delimiter or "/"
        return sep + sep.join(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self._segments)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PathCursor):
            return self._segments == other._segments
        return NotImplemented

    def __repr__(self) -> str:
        return f"PathCursor({self._segments!r})"
