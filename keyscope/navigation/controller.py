"""Navigation state machine driving cursor, index and window."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from keyscope.index.models import KeyEntry, StaleCursorError, WindowState
from keyscope.index.paginator import Paginator
from keyscope.index.tree import KeyIndex
from keyscope.navigation.cursor import PathCursor
from keyscope.navigation.resolver import ValueResolver
from keyscope.store.base import KeyspaceReader

logger = logging.getLogger(__name__)


class AscendResult(str, Enum):
    """Outcome of moving one level up."""

    ascended = "ascended"
    exit_hierarchy = "exit_hierarchy"


@dataclass
class Session:
    """Everything that changes while a user browses one store.

    ``selection`` is relative to ``window``; the absolute position is
    ``window.offset + selection``.
    """

    store: KeyspaceReader
    delimiter: str | None = "/"
    encoding: str = "utf-8"
    viewport: int = 20
    keyspace: str | None = None
    index: KeyIndex | None = None
    cursor: PathCursor = field(default_factory=PathCursor)
    window: WindowState = field(default_factory=WindowState)
    selection: int = 0


class NavigationController:
    """Descend, ascend, switch keyspace and scroll over a KeyValueStore.

    The controller is the only owner of mutable navigation state. Every
    structural move resets offset and selection to 0, because a scroll
    position from another level means nothing at this one.
    """

    def __init__(
        self,
        store: KeyspaceReader,
        delimiter: str | None = "/",
        encoding: str = "utf-8",
        viewport: int = 20,
    ) -> None:
        if delimiter == "":
            raise ValueError("delimiter must be a non-empty string or None")
        self.session = Session(
            store=store, delimiter=delimiter, encoding=encoding, viewport=max(viewport, 1)
        )
        self._paginator: Paginator | None = None
        self._resolver: ValueResolver | None = None

    # -- read-only views -------------------------------------------------------

    @property
    def window(self) -> WindowState:
        return self.session.window

    @property
    def cursor(self) -> tuple[str, ...]:
        return self.session.cursor.segments

    @property
    def keyspace(self) -> str | None:
        return self.session.keyspace

    @property
    def index(self) -> KeyIndex | None:
        return self.session.index

    @property
    def selection(self) -> int:
        return self.session.selection

    @property
    def absolute_selection(self) -> int:
        return self.session.window.offset + self.session.selection

    def list_keyspaces(self) -> list[str]:
        """Keyspace names, sorted for stable display."""
        return sorted(self.session.store.keyspaces())

    def path_label(self) -> str:
        return self.session.cursor.label(self.session.delimiter)

    # -- structural moves ------------------------------------------------------

    def switch_keyspace(self, name: str) -> WindowState:
        """Index *name* and show its root.

        A StoreError leaves the previous keyspace selected and propagates.
        """
        s = self.session
        return self._rebuild(name, s.delimiter, (), 0)

    def set_delimiter(self, delimiter: str | None) -> WindowState:
        """Rebuild the current keyspace's index with a new delimiter."""
        if delimiter == "":
            raise ValueError("delimiter must be a non-empty string or None")
        s = self.session
        if s.keyspace is None:
            s.delimiter = delimiter
            return s.window
        return self._rebuild(s.keyspace, delimiter, s.cursor.segments, 0)

    def reload(self) -> WindowState:
        """Re-scan the current keyspace, keeping the cursor if it still exists."""
        s = self.session
        if s.keyspace is None:
            return s.window
        return self._rebuild(s.keyspace, s.delimiter, s.cursor.segments, s.window.offset)

    def descend(self, visible_index: int | None = None) -> bool:
        """Enter the entry at *visible_index* (default: the selection).

        Only entries of the last window that have children qualify; anything
        else is rejected without touching state.
        """
        s = self.session
        if s.index is None or s.index.flat:
            return False
        idx = s.selection if visible_index is None else visible_index
        entry = s.window.entry_at(idx)
        if entry is None or not entry.has_children:
            return False
        self._fetch(0, segments=s.cursor.child(entry.key))
        return True

    def ascend(self) -> AscendResult:
        """Go up one level; at the root, tell the caller to leave the hierarchy."""
        s = self.session
        at_root = s.cursor.at_root
        if s.index is None:
            s.cursor.pop()
            s.selection = 0
        else:
            self._fetch(0, segments=s.cursor.segments[:-1])
        if at_root:
            return AscendResult.exit_hierarchy
        return AscendResult.ascended

    # -- scrolling -------------------------------------------------------------

    def set_viewport(self, height: int) -> None:
        height = max(height, 1)
        s = self.session
        if height == s.viewport:
            return
        if s.index is not None:
            self._fetch(s.window.offset, viewport=height)
        s.viewport = height

    def move_up(self) -> None:
        s = self.session
        if self.absolute_selection == 0:
            return
        if s.selection > 0:
            s.selection -= 1
        else:
            self._fetch(s.window.offset - 1, keep_selection=True)

    def move_down(self) -> None:
        s = self.session
        if self.absolute_selection + 1 >= s.window.total:
            return
        if s.selection + 1 < min(s.viewport, len(s.window)):
            s.selection += 1
        else:
            self._fetch(s.window.offset + 1, keep_selection=True)

    def page_up(self) -> None:
        s = self.session
        if s.window.offset > 0:
            self._fetch(s.window.offset - s.viewport)
        s.selection = 0

    def page_down(self) -> None:
        s = self.session
        max_offset = max(s.window.total - s.viewport, 0)
        if s.window.offset < max_offset:
            self._fetch(min(s.window.offset + s.viewport, max_offset))
        s.selection = max(len(s.window) - 1, 0)

    def home(self) -> None:
        if self.session.window.offset != 0:
            self._fetch(0)
        self.session.selection = 0

    def end(self) -> None:
        s = self.session
        max_offset = max(s.window.total - s.viewport, 0)
        if s.window.offset != max_offset:
            self._fetch(max_offset)
        s.selection = max(len(s.window) - 1, 0)

    # -- selection -------------------------------------------------------------

    def selected_entry(self) -> KeyEntry | None:
        return self.session.window.entry_at(self.session.selection)

    def full_key(self, entry: KeyEntry) -> bytes | None:
        if self._resolver is None:
            return None
        return self._resolver.full_key(self.session.cursor.segments, entry)

    def value_of(self, entry: KeyEntry) -> bytes | None:
        if self._resolver is None:
            return None
        return self._resolver.get_value(self.session.cursor.segments, entry)

    def selected_value(self) -> bytes | None:
        """Value bound to the selected entry's path, or None."""
        entry = self.selected_entry()
        if entry is None:
            return None
        return self.value_of(entry)

    # -- internals -------------------------------------------------------------

    def _rebuild(
        self,
        keyspace: str,
        delimiter: str | None,
        segments: tuple[str, ...],
        offset: int,
    ) -> WindowState:
        """Index *keyspace* and read its first window before committing anything."""
        s = self.session
        index = KeyIndex.build(s.store, keyspace, delimiter, s.encoding)
        paginator = Paginator(index, s.store)
        window, segments = self._window_for(paginator, segments, offset, s.viewport)

        s.keyspace = keyspace
        s.delimiter = delimiter
        s.index = index
        self._paginator = paginator
        self._resolver = ValueResolver(index, s.store)
        s.cursor.move_to(segments)
        s.window = window
        s.selection = 0
        return window

    def _window_for(
        self,
        paginator: Paginator,
        segments: tuple[str, ...],
        offset: int,
        viewport: int,
    ) -> tuple[WindowState, tuple[str, ...]]:
        """Window at *segments*, plus the segments it was actually read from.

        A vanished cursor falls back to the root; an offset past the end of a
        shrunken level falls back to its last page.
        """
        offset = max(offset, 0)
        try:
            window = paginator.get_window(segments, offset, viewport)
        except StaleCursorError as e:
            logger.info("Resetting to root: %s", e)
            segments = ()
            window = paginator.get_window(segments, 0, viewport)
        if window.total and not window.entries and window.offset > 0:
            window = paginator.get_window(
                segments, max(window.total - viewport, 0), viewport
            )
        return window, segments

    def _fetch(
        self,
        offset: int,
        keep_selection: bool = False,
        segments: tuple[str, ...] | None = None,
        viewport: int | None = None,
    ) -> WindowState:
        """Replace the window; nothing changes when the store read fails."""
        s = self.session
        if self._paginator is None:
            return s.window
        wanted = s.cursor.segments if segments is None else segments
        window, actual = self._window_for(
            self._paginator, wanted, offset, viewport or s.viewport
        )
        if actual != wanted:
            keep_selection = False
        s.cursor.move_to(actual)
        s.window = window
        if not keep_selection:
            s.selection = 0
        s.selection = min(s.selection, max(len(window) - 1, 0))
        return window
