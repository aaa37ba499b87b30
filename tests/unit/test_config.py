"""Tests for configuration management."""

import json
from dataclasses import asdict

import pytest

from methodtrace.config import Config, TraceConfig, get_config, load_config


class TestTraceConfig:
    def test_defaults(self):
        config = TraceConfig()
        assert config.enabled is True
        assert config.max_repr_length == 1000
        assert config.log_level == "WARNING"

    def test_fields(self):
        assert set(asdict(TraceConfig())) == {"enabled", "max_repr_length", "log_level"}

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            TraceConfig(max_repr_length=0)


class TestConfig:
    def test_singleton(self):
        assert get_config() is Config.get_instance()

    def test_get_and_set(self):
        Config.set("max_repr_length", 20)
        assert Config.get("max_repr_length") == 20
        assert Config.get("unknown", "fallback") == "fallback"

    def test_set_ignores_unknown_keys(self):
        Config.set("not_a_setting", 1)
        assert not hasattr(Config.get_instance(), "not_a_setting")

    def test_initialize_with_kwargs(self):
        config = Config.initialize(enabled=False)
        assert config is Config.get_instance()
        assert Config.is_enabled() is False

    @pytest.mark.parametrize("value,expected", [("0", False), ("False", False), ("off", False), ("1", True), ("yes", True)])
    def test_environment_toggle(self, monkeypatch, value, expected):
        monkeypatch.setenv("METHODTRACE_ENABLED", value)
        assert Config.is_enabled() is expected

    def test_explicit_config(self, monkeypatch):
        assert Config.is_enabled(TraceConfig(enabled=False)) is False
        monkeypatch.setenv("METHODTRACE_ENABLED", "1")
        assert Config.is_enabled(TraceConfig(enabled=False)) is True

    def test_load_config_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"enabled": False, "max_repr_length": 50}))

        config = load_config(path)
        assert config.enabled is False
        assert config.max_repr_length == 50

    def test_load_invalid_file_uses_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        config = load_config(path)
        assert config == TraceConfig()
        assert "Error loading config" in caplog.text

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.json") == TraceConfig()

    def test_to_dict(self):
        assert Config.to_dict()["enabled"] is True
