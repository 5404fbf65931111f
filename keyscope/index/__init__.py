"""Key index subsystem: segment tree and windowed listing."""

from keyscope.index.models import (
    HierarchyNode,
    KeyDecodeError,
    KeyEntry,
    StaleCursorError,
    WindowState,
)
from keyscope.index.paginator import Paginator, decode_flat_key, encode_key
from keyscope.index.tree import KeyIndex


__all__ = [
    "HierarchyNode",
    "KeyDecodeError",
    "KeyEntry",
    "KeyIndex",
    "Paginator",
    "StaleCursorError",
    "WindowState",
    "decode_flat_key",
    "encode_key",
]
