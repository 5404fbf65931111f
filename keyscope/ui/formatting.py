"""Pure helpers shared by the TUI and the CLI."""

from __future__ import annotations

import json

from keyscope.index.models import KeyEntry


def entry_label(entry: KeyEntry) -> str:
    """List label for an entry; directories get a trailing ``+``."""
    name = entry.key if entry.key != "" else "(empty)"
    return f"{name} +" if entry.has_children else name


def decode_value(value: bytes, encoding: str = "utf-8", pretty: bool = True) -> str:
    """Render stored bytes as text, re-indenting JSON documents when *pretty*."""
    text = value.decode(encoding, errors="replace")
    if pretty:
        stripped = text.lstrip()
        if stripped[:1] in ("{", "["):
            try:
                return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
            except ValueError:
                pass
    return text


def wrapped_line_count(text: str, width: int) -> int:
    """Lines *text* occupies when word-wrapped to *width* columns.

    Breaks after the last space inside the width; words longer than the
    width are hard-split.
    """
    if width <= 0:
        return len(text.split("\n"))
    total = 0
    for line in text.split("\n"):
        if not line:
            total += 1
            continue
        remaining = line
        while remaining:
            total += 1
            if len(remaining) <= width:
                break
            split_at = remaining.rfind(" ", 0, width) + 1 or width
            remaining = remaining[split_at:]
    return total


def scroll_indicator(position: int, max_scroll: int) -> str:
    """`` [3/10]`` style suffix, empty when nothing scrolls."""
    if max_scroll <= 0:
        return ""
    return f" [{position + 1}/{max_scroll + 1}]"
