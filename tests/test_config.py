"""
Unit tests for configuration loading and logging setup.
"""

import logging

import pytest

from meter.config import DEFAULT_CONFIG, load_config, setup_logging
from meter.exceptions import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("EXPENSE_METER_CONFIG", "EXPENSE_METER_STATE_PATH",
                 "EXPENSE_METER_CURRENCY", "EXPENSE_METER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")

        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

    def test_file_values_merge_over_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("currency: EUR\nstorage:\n  state_path: /tmp/meter.json\n", encoding="utf-8")

        config = load_config(path)

        assert config["currency"] == "EUR"
        assert config["storage"]["state_path"] == "/tmp/meter.json"
        assert config["logging"]["level"] == "INFO"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == DEFAULT_CONFIG

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("currency: EUR\n", encoding="utf-8")
        monkeypatch.setenv("EXPENSE_METER_CURRENCY", "GBP")
        monkeypatch.setenv("EXPENSE_METER_STATE_PATH", "elsewhere.json")
        monkeypatch.setenv("EXPENSE_METER_LOG_LEVEL", "debug")

        config = load_config(path)

        assert config["currency"] == "GBP"
        assert config["storage"]["state_path"] == "elsewhere.json"
        assert config["logging"]["level"] == "debug"

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("currency: JPY\n", encoding="utf-8")
        monkeypatch.setenv("EXPENSE_METER_CONFIG", str(path))

        assert load_config()["currency"] == "JPY"

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("currency: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert "Invalid YAML" in str(exc_info.value)

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_defaults_not_mutated(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EXPENSE_METER_STATE_PATH", "x.json")

        load_config(tmp_path / "missing.yaml")

        assert DEFAULT_CONFIG["storage"]["state_path"] == "data/state.json"


class TestSetupLogging:

    def test_basic_logging_config(self, restore_root_logger):
        setup_logging({"logging": {"level": "WARNING"}})

        assert restore_root_logger.level == logging.WARNING
        assert any(isinstance(h, logging.StreamHandler) for h in restore_root_logger.handlers)

    def test_file_logging_enabled(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "meter.log"

        setup_logging({"logging": {"level": "INFO", "file": str(log_file)}})
        logging.getLogger("meter.test").info("hello")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert log_file.exists()
        assert "hello" in log_file.read_text(encoding="utf-8")
        for handler in restore_root_logger.handlers:
            if isinstance(handler, logging.FileHandler):
                handler.close()

    def test_unknown_level_raises(self, restore_root_logger):
        with pytest.raises(ConfigError):
            setup_logging({"logging": {"level": "LOUD"}})
