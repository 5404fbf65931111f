"""keyscope - browse delimiter-encoded key hierarchies in an ordered key-value store."""

from keyscope.config import KeyscopeConfig, load_config
from keyscope.index import KeyEntry, KeyIndex, Paginator, WindowState
from keyscope.navigation import AscendResult, NavigationController, PathCursor, ValueResolver
from keyscope.store import SQLiteStore, StoreError

__version__ = "0.1.0"

__all__ = [
    "AscendResult",
    "KeyEntry",
    "KeyIndex",
    "KeyscopeConfig",
    "NavigationController",
    "Paginator",
    "PathCursor",
    "SQLiteStore",
    "StoreError",
    "ValueResolver",
    "WindowState",
    "load_config",
]
