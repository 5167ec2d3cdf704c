# tests/test_config.py
"""Tests for ridr/config.py and ridr/core/app_config.py."""
from __future__ import annotations

import pytest

from ridr.config import Settings, warn_on_risky_config
from ridr.core.app_config import validate_app_config
from ridr.core.errors import InvalidConfigError


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("RIDR_TEST_MODE", raising=False)
        s = Settings(_env_file=None)
        assert s.app_env == "dev"
        assert s.test_mode is False
        assert s.webhook_path == "/webhook"
        assert s.use_json_logs is False

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("RIDR_TEST_MODE", "1")
        monkeypatch.setenv("RIDR_WEBHOOK_PATH", "/hooks/ridr")
        s = Settings(_env_file=None)
        assert s.test_mode is True
        assert s.webhook_path == "/hooks/ridr"

    def test_json_logs_follow_env_unless_set(self):
        assert Settings(_env_file=None, app_env="prod").use_json_logs is True
        assert Settings(_env_file=None, app_env="prod", log_json=False).use_json_logs is False
        assert Settings(_env_file=None, app_env="dev", log_json=True).use_json_logs is True

    def test_invalid_env_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, app_env="qa")


class TestWarnOnRiskyConfig:
    def test_clean_config(self):
        assert warn_on_risky_config(Settings(_env_file=None, test_mode=False)) == []

    def test_prod_with_test_mode_and_debug(self):
        s = Settings(_env_file=None, app_env="prod", test_mode=True, log_level="debug")
        warnings = warn_on_risky_config(s)
        assert len(warnings) == 2
        assert any("test_mode" in w for w in warnings)
        assert any("DEBUG" in w for w in warnings)

    def test_relative_webhook_path(self):
        warnings = warn_on_risky_config(Settings(_env_file=None, webhook_path="webhook"))
        assert warnings == ["webhook_path='webhook' does not start with '/'."]


class TestAppConfigSchema:
    def test_unknown_keys_allowed(self):
        validate_app_config({"custom": {"anything": 1}, "logging": False})

    def test_routing_shape_checked(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            validate_app_config({"routing": {"intents_to_skip_unhandled": "StopIntent"}})
        assert "routing.intents_to_skip_unhandled" in exc_info.value.detail

    def test_routing_unknown_option_rejected(self):
        with pytest.raises(InvalidConfigError):
            validate_app_config({"routing": {"intentMap": {}}})

    def test_logging_accepts_bool_or_options(self):
        validate_app_config({"logging": True})
        validate_app_config({"logging": {"request": False, "indentation": None}})
