"""Terminal user interface."""

from keyscope.ui.formatting import decode_value, entry_label, scroll_indicator, wrapped_line_count

__all__ = [
    "decode_value",
    "entry_label",
    "scroll_indicator",
    "wrapped_line_count",
]
