"""Cursor, value resolution and the navigation controller."""

from keyscope.navigation.controller import AscendResult, NavigationController, Session
from keyscope.navigation.cursor import PathCursor
from keyscope.navigation.resolver import ValueResolver

__all__ = [
    "AscendResult",
    "NavigationController",
    "PathCursor",
    "Session",
    "ValueResolver",
]
