"""Textual front end: keyspace list, key list and value pane."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, ScrollableContainer
from textual.widgets import Static

from keyscope.config.models import KeyscopeConfig
from keyscope.navigation.controller import AscendResult, NavigationController
from keyscope.store.base import StoreError
from keyscope.ui.formatting import decode_value, entry_label, scroll_indicator

logger = logging.getLogger(__name__)

_HELP_LIST = "q quit | enter open | backspace back | tab value pane | f flat/tree | r reload"
_HELP_VALUE = "arrows scroll | pgup/pgdn page | w wrap | tab key pane"


class ValuePane(ScrollableContainer, can_focus=False):
    """Scrollable value view that never takes focus away from the app bindings."""


class KeyscopeApp(App[None]):
    CSS = """
    #path-row {
        height: 3;
        border: solid $primary;
        padding: 0 1;
    }
    #main {
        height: 1fr;
    }
    #list-pane {
        width: 30%;
        border: solid $secondary;
        padding: 0 1;
    }
    #value-pane {
        width: 70%;
        border: solid $secondary;
    }
    #value-pane.focused, #list-pane.focused {
        border: solid $accent;
    }
    #value {
        width: 100%;
    }
    #value.nowrap {
        width: auto;
    }
    #status-row {
        height: 1;
        text-style: dim;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("up,k", "move_up", "Up", show=False),
        Binding("down,j", "move_down", "Down", show=False),
        Binding("pageup", "page_up", "Page up", show=False),
        Binding("pagedown", "page_down", "Page down", show=False),
        Binding("home", "home", "Top", show=False),
        Binding("end", "end", "Bottom", show=False),
        Binding("left", "scroll_left", show=False),
        Binding("right", "scroll_right", show=False),
        Binding("enter", "select", "Open"),
        Binding("backspace", "back", "Back"),
        Binding("tab", "toggle_pane", "Pane", priority=True),
        Binding("w", "toggle_wrap", "Wrap"),
        Binding("f", "toggle_flat", "Flat/Tree"),
        Binding("r", "reload", "Reload"),
    ]

    def __init__(
        self,
        controller: NavigationController,
        config: KeyscopeConfig,
        title: str = "keyscope",
        keyspace: str | None = None,
    ) -> None:
        super().__init__()
        self.controller = controller
        self.config = config
        self.db_title = title
        self.view_mode = "keyspaces"
        self.focused_pane = "list"
        self.wrap_values = config.display.wrap_values
        self.status_message: str | None = None
        self._keyspaces: list[str] = []
        self._ks_selected = 0
        self._ks_offset = 0
        self._initial_keyspace = keyspace
        self._last_delimiter = controller.session.delimiter or config.navigation.delimiter or "/"

    def compose(self) -> ComposeResult:
        yield Static(id="path-row")
        with Horizontal(id="main"):
            yield Static(id="list-pane", classes="focused")
            with ValuePane(id="value-pane"):
                yield Static(id="value")
        yield Static(id="status-row")

    def on_mount(self) -> None:
        self._load_keyspaces()
        if self._initial_keyspace is not None:
            self._open_keyspace(self._initial_keyspace)
        self.call_after_refresh(self._sync_viewport)

    def on_resize(self) -> None:
        self.call_after_refresh(self._sync_viewport)

    # -- helpers ---------------------------------------------------------------

    def _list_height(self) -> int:
        return max(self.query_one("#list-pane", Static).size.height, 1)

    def _sync_viewport(self) -> None:
        self._guarded(self.controller.set_viewport, self._list_height())
        self._refresh()

    def _load_keyspaces(self) -> None:
        try:
            self._keyspaces = self.controller.list_keyspaces()
        except StoreError as e:
            self._report(e)
        self._ks_selected = min(self._ks_selected, max(len(self._keyspaces) - 1, 0))

    def _open_keyspace(self, name: str) -> None:
        try:
            self.controller.switch_keyspace(name)
        except StoreError as e:
            self._report(e)
            return
        self.view_mode = "keys"
        failures = self.controller.index.decode_failures if self.controller.index else []
        if failures:
            self.status_message = f"{len(failures)} undecodable key(s) hidden"

    def _report(self, err: Exception) -> None:
        logger.error("%s", err)
        self.status_message = f"Error: {err}"

    def _guarded(self, fn, *args) -> None:
        """Run a controller call, showing a store failure in the status row."""
        try:
            fn(*args)
        except StoreError as e:
            self._report(e)

    def _refresh(self) -> None:
        self._render_path()
        self._render_list()
        self._render_value()
        self._render_status()

    def _render_path(self) -> None:
        if self.view_mode == "keyspaces":
            text = f"{self.db_title} | Select keyspace"
        else:
            text = (
                f"{self.db_title} | Keyspace: {self.controller.keyspace} "
                f"| Path: {self.controller.path_label()}"
            )
            entry = self.controller.selected_entry()
            key = self.controller.full_key(entry) if entry is not None else None
            if key is not None:
                text += f" | Key: {key.decode(self.controller.session.encoding, 'replace')}"
        self.query_one("#path-row", Static).update(Text(text))

    def _render_list(self) -> None:
        pane = self.query_one("#list-pane", Static)
        text = Text(no_wrap=True, overflow="ellipsis")
        if self.view_mode == "keyspaces":
            height = self._list_height()
            if self._ks_selected < self._ks_offset:
                self._ks_offset = self._ks_selected
            elif self._ks_selected >= self._ks_offset + height:
                self._ks_offset = self._ks_selected - height + 1
            visible = self._keyspaces[self._ks_offset : self._ks_offset + height]
            for i, name in enumerate(visible):
                style = "reverse" if self._ks_offset + i == self._ks_selected else ""
                text.append(name + "\n", style=style)
            pane.border_title = f" {len(self._keyspaces)} Keyspaces "
            if not self._keyspaces:
                text = Text("No keyspaces found!")
        else:
            window = self.controller.window
            for i, entry in enumerate(window.entries):
                style = "reverse" if i == self.controller.selection else ""
                text.append(entry_label(entry) + "\n", style=style)
            pane.border_title = f" {window.total} Keys "
            if not window.entries:
                text = Text(f"No keys found in keyspace {self.controller.keyspace}")
        pane.update(text)

    def _render_value(self) -> None:
        widget = self.query_one("#value", Static)
        container = self.query_one("#value-pane", ValuePane)
        widget.set_class(not self.wrap_values, "nowrap")
        content = ""
        if self.view_mode == "keys":
            try:
                value = self.controller.selected_value()
            except StoreError as e:
                self._report(e)
                value = None
            if value is not None:
                content = decode_value(
                    value,
                    self.config.display.value_encoding,
                    self.config.display.pretty_print,
                )
        widget.update(Text(content, no_wrap=not self.wrap_values))
        wrap_flag = "W" if self.wrap_values else "NW"
        indicator = scroll_indicator(
            round(container.scroll_y), round(container.max_scroll_y)
        )
        container.border_title = f"Value [{wrap_flag}]{indicator}"

    def _render_status(self) -> None:
        if self.status_message:
            line = self.status_message
        else:
            line = _HELP_VALUE if self.focused_pane == "value" else _HELP_LIST
        self.query_one("#status-row", Static).update(Text(line))

    def _value_pane(self) -> ValuePane:
        return self.query_one("#value-pane", ValuePane)

    def _after_move(self) -> None:
        self._value_pane().scroll_home(animate=False)
        self._refresh()

    # -- actions ---------------------------------------------------------------

    def action_move_up(self) -> None:
        self.status_message = None
        if self.focused_pane == "value":
            self._value_pane().scroll_up(animate=False)
        elif self.view_mode == "keyspaces":
            self._ks_selected = max(self._ks_selected - 1, 0)
        else:
            self._guarded(self.controller.move_up)
        if self.focused_pane == "list":
            self._after_move()
        else:
            self._refresh()

    def action_move_down(self) -> None:
        self.status_message = None
        if self.focused_pane == "value":
            self._value_pane().scroll_down(animate=False)
        elif self.view_mode == "keyspaces":
            self._ks_selected = min(self._ks_selected + 1, max(len(self._keyspaces) - 1, 0))
        else:
            self._guarded(self.controller.move_down)
        if self.focused_pane == "list":
            self._after_move()
        else:
            self._refresh()

    def action_page_up(self) -> None:
        if self.focused_pane == "value":
            self._value_pane().scroll_page_up(animate=False)
            self._refresh()
            return
        if self.view_mode == "keyspaces":
            self._ks_selected = max(self._ks_selected - self._list_height(), 0)
        else:
            self._guarded(self.controller.page_up)
        self._after_move()

    def action_page_down(self) -> None:
        if self.focused_pane == "value":
            self._value_pane().scroll_page_down(animate=False)
            self._refresh()
            return
        if self.view_mode == "keyspaces":
            last = max(len(self._keyspaces) - 1, 0)
            self._ks_selected = min(self._ks_selected + self._list_height(), last)
        else:
            self._guarded(self.controller.page_down)
        self._after_move()

    def action_home(self) -> None:
        if self.focused_pane == "value":
            self._value_pane().scroll_home(animate=False)
        elif self.view_mode == "keyspaces":
            self._ks_selected = 0
        else:
            self._guarded(self.controller.home)
        self._refresh()

    def action_end(self) -> None:
        if self.focused_pane == "value":
            self._value_pane().scroll_end(animate=False)
        elif self.view_mode == "keyspaces":
            self._ks_selected = max(len(self._keyspaces) - 1, 0)
        else:
            self._guarded(self.controller.end)
        self._refresh()

    def action_scroll_left(self) -> None:
        if self.focused_pane == "value" and not self.wrap_values:
            self._value_pane().scroll_left(animate=False)

    def action_scroll_right(self) -> None:
        if self.focused_pane == "value" and not self.wrap_values:
            self._value_pane().scroll_right(animate=False)

    def action_select(self) -> None:
        if self.focused_pane != "list":
            return
        self.status_message = None
        if self.view_mode == "keyspaces":
            if self._keyspaces:
                self._open_keyspace(self._keyspaces[self._ks_selected])
        else:
            try:
                self.controller.descend()
            except StoreError as e:
                self._report(e)
        self._after_move()

    def action_back(self) -> None:
        self.focused_pane = "list"
        self._set_focus_classes()
        if self.view_mode == "keys":
            try:
                result = self.controller.ascend()
            except StoreError as e:
                self._report(e)
            else:
                if result is AscendResult.exit_hierarchy:
                    self.view_mode = "keyspaces"
                    self._load_keyspaces()
        self._after_move()

    def action_toggle_pane(self) -> None:
        self.focused_pane = "value" if self.focused_pane == "list" else "list"
        self._set_focus_classes()
        self._after_move()

    def action_toggle_wrap(self) -> None:
        if self.focused_pane == "value":
            self.wrap_values = not self.wrap_values
            self._value_pane().scroll_home(animate=False)
            self._refresh()

    def action_toggle_flat(self) -> None:
        current = self.controller.session.delimiter
        new = None if current is not None else self._last_delimiter
        try:
            self.controller.set_delimiter(new)
        except StoreError as e:
            self._report(e)
        self._after_move()

    def action_reload(self) -> None:
        try:
            self.controller.reload()
            self._load_keyspaces()
        except StoreError as e:
            self._report(e)
        self._after_move()

    def _set_focus_classes(self) -> None:
        self.query_one("#list-pane", Static).set_class(self.focused_pane == "list", "focused")
        self._value_pane().set_class(self.focused_pane == "value", "focused")
