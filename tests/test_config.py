"""Tests for keyscope.config: models, YAML loader and logging setup."""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from keyscope.config import loader
from keyscope.config.loader import (
    DEFAULT_CONFIG_TEMPLATE,
    _expand_env_vars,
    configure_logging,
    load_config,
)
from keyscope.config.models import (
    DisplayConfig,
    KeyscopeConfig,
    NavigationConfig,
    SeedConfig,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run in an empty directory with no user-global config."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
    return tmp_path


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    level = root.level
    yield
    if loader._handler is not None:
        root.removeHandler(loader._handler)
        loader._handler.close()
        loader._handler = None
    root.setLevel(level)


# ── Defaults ────────────────────────────────────────────────────────


class TestKeyscopeConfigDefaults:
    def test_default_log_level(self, sample_config):
        assert sample_config.log_level == "warn"

    def test_default_log_file(self, sample_config):
        assert sample_config.log_file is None

    def test_default_delimiter(self, sample_config):
        assert sample_config.navigation.delimiter == "/"

    def test_default_page_size(self, sample_config):
        assert sample_config.navigation.page_size == 50

    def test_default_display(self, sample_config):
        assert sample_config.display.wrap_values is True
        assert sample_config.display.pretty_print is True

    def test_default_seed_delimiters(self, sample_config):
        assert sample_config.seed.delimiters == ["/", "\\", ":", "::", ",", ".", "-", "_"]


# ── Model validation ────────────────────────────────────────────────


class TestNavigationConfig:
    def test_empty_delimiter_rejected(self):
        with pytest.raises(ValidationError):
            NavigationConfig(delimiter="")

    def test_null_delimiter_means_flat(self):
        assert NavigationConfig(delimiter=None).delimiter is None

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            NavigationConfig(page_size=0)

    def test_unknown_encoding_rejected(self):
        with pytest.raises(ValidationError, match="unknown encoding"):
            NavigationConfig(encoding="bogus")

    def test_encoding_alias_accepted(self):
        assert NavigationConfig(encoding="latin-1").encoding == "latin-1"


class TestDisplayConfig:
    def test_unknown_value_encoding_rejected(self):
        with pytest.raises(ValidationError, match="unknown encoding"):
            DisplayConfig(value_encoding="no-such-codec")


class TestSeedConfig:
    def test_empty_delimiter_rejected(self):
        with pytest.raises(ValidationError):
            SeedConfig(delimiters=["/", ""])

    def test_keys_per_level_positive(self):
        with pytest.raises(ValidationError):
            SeedConfig(keys_per_level=0)


class TestKeyscopeConfig:
    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            KeyscopeConfig(log_level="verbose")

    def test_nested_values(self):
        cfg = KeyscopeConfig(display=DisplayConfig(wrap_values=False))
        assert cfg.display.wrap_values is False


# ── _expand_env_vars ────────────────────────────────────────────────


class TestExpandEnvVars:
    def test_expands_string_variable(self):
        with patch.dict(os.environ, {"KS_DELIM": "::"}):
            assert _expand_env_vars("${KS_DELIM}") == "::"

    def test_missing_var_becomes_empty(self):
        os.environ.pop("KS_UNSET_VARIABLE", None)
        assert _expand_env_vars("x${KS_UNSET_VARIABLE}y") == "xy"

    def test_expands_nested_structures(self):
        with patch.dict(os.environ, {"A": "alpha", "B": "beta"}):
            result = _expand_env_vars({"outer": {"inner": "${A}"}, "list": ["${B}"]})
            assert result == {"outer": {"inner": "alpha"}, "list": ["beta"]}

    def test_non_string_passthrough(self):
        assert _expand_env_vars(42) == 42
        assert _expand_env_vars(True) is True
        assert _expand_env_vars(None) is None


# ── load_config ─────────────────────────────────────────────────────


class TestLoadConfig:
    def test_returns_defaults_when_no_file_exists(self, isolated):
        assert load_config() == KeyscopeConfig()

    def test_loads_valid_yaml(self, isolated):
        (isolated / "keyscope.yaml").write_text(
            "navigation:\n  delimiter: '::'\n  page_size: 10\nlog_level: debug\n"
        )
        config = load_config()
        assert config.navigation.delimiter == "::"
        assert config.navigation.page_size == 10
        assert config.log_level == "debug"

    def test_null_delimiter_from_yaml(self, isolated):
        (isolated / "keyscope.yaml").write_text("navigation:\n  delimiter: null\n")
        assert load_config().navigation.delimiter is None

    def test_raises_on_invalid_yaml(self, isolated):
        (isolated / "keyscope.yaml").write_text("  bad:\nyaml: [unterminated")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config()

    def test_raises_on_invalid_config_values(self, isolated):
        (isolated / "keyscope.yaml").write_text("navigation:\n  delimiter: ''\n")
        with pytest.raises(ValueError, match="Invalid config"):
            load_config()

    def test_raises_on_unknown_encoding(self, isolated):
        (isolated / "keyscope.yaml").write_text("navigation:\n  encoding: bogus\n")
        with pytest.raises(ValueError, match="Invalid config"):
            load_config()

    def test_raises_on_non_mapping(self, isolated):
        (isolated / "keyscope.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_config()

    def test_cli_path_takes_priority(self, isolated):
        (isolated / "keyscope.yaml").write_text("navigation:\n  delimiter: ':'\n")
        custom = isolated / "custom.yaml"
        custom.write_text("navigation:\n  delimiter: '.'\n")
        assert load_config(cli_path=str(custom)).navigation.delimiter == "."

    def test_user_global_config_used_as_fallback(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        fake_home = tmp_path / "fakehome"
        (fake_home / ".keyscope").mkdir(parents=True)
        (fake_home / ".keyscope" / "config.yaml").write_text("log_level: debug\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: fake_home)
        assert load_config().log_level == "debug"

    def test_env_vars_expanded_in_loaded_config(self, isolated, monkeypatch):
        monkeypatch.setenv("KS_KEYSPACE", "tree3")
        (isolated / "keyscope.yaml").write_text(
            "navigation:\n  default_keyspace: ${KS_KEYSPACE}\n"
        )
        assert load_config().navigation.default_keyspace == "tree3"

    def test_empty_yaml_file_returns_defaults(self, isolated):
        (isolated / "keyscope.yaml").write_text("")
        assert load_config() == KeyscopeConfig()

    def test_default_template_is_loadable(self, isolated):
        (isolated / "keyscope.yaml").write_text(DEFAULT_CONFIG_TEMPLATE)
        config = load_config()
        assert config == KeyscopeConfig()


# ── configure_logging ───────────────────────────────────────────────


class TestConfigureLogging:
    def test_sets_root_level(self, restore_logging):
        configure_logging(KeyscopeConfig(log_level="debug"))
        assert logging.getLogger().level == logging.DEBUG
        configure_logging(KeyscopeConfig(log_level="warn"))
        assert logging.getLogger().level == logging.WARNING

    def test_replaces_only_its_own_handler(self, restore_logging):
        root = logging.getLogger()
        before = len(root.handlers)
        configure_logging(KeyscopeConfig())
        configure_logging(KeyscopeConfig())
        assert len(root.handlers) == before + 1

    def test_log_file(self, tmp_path, restore_logging):
        log_file = tmp_path / "keyscope.log"
        configure_logging(KeyscopeConfig(log_level="info", log_file=str(log_file)))
        logging.getLogger("keyscope.test").info("hello from the test")
        loader._handler.flush()
        assert "hello from the test" in log_file.read_text()
