"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import KeyscopeConfig

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def load_config(cli_path: str | None = None) -> KeyscopeConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./keyscope.yaml"),
        Path.home() / ".keyscope" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return KeyscopeConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e
            except TypeError as e:
                raise ValueError(f"Invalid config in {path}: expected a mapping") from e

    return KeyscopeConfig()


_handler: logging.Handler | None = None


def configure_logging(config: KeyscopeConfig) -> None:
    """Point the root logger at stderr, or at ``log_file`` when one is set.

    Calling it again replaces the handler installed by the previous call and
    leaves any other handlers alone.
    """
    global _handler
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
        _handler.close()

    if config.log_file:
        _handler = logging.FileHandler(config.log_file)
    else:
        _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(_handler)
    root.setLevel(_LEVELS[config.log_level])


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `keyscope config init`
DEFAULT_CONFIG_TEMPLATE = """\
# keyscope.yaml

# Navigation
navigation:
  delimiter: "/"               # null disables the hierarchy (flat key list)
  # default_keyspace: "default"
  page_size: 50                # entries per `keyscope ls` window
  encoding: "utf-8"            # text encoding of keys

# Value pane
display:
  wrap_values: true
  pretty_print: true           # re-indent JSON values
  value_encoding: "utf-8"

# Example database (`keyscope seed`)
seed:
  keys_per_level: 10
  delimiters: ["/", "\\\\", ":", "::", ",", ".", "-", "_"]

# Logging
log_level: "warn"              # debug | info | warn | error
# log_file: "keyscope.log"     # recommended while browsing
"""
