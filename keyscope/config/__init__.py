from .loader import configure_logging, load_config
from .models import (
    DisplayConfig,
    KeyscopeConfig,
    NavigationConfig,
    SeedConfig,
)

__all__ = [
    "DisplayConfig",
    "KeyscopeConfig",
    "NavigationConfig",
    "SeedConfig",
    "configure_logging",
    "load_config",
]
