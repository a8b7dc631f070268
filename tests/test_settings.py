"""Tests for layered configuration and logging setup."""

from __future__ import annotations

import json
import logging

import pytest

from ifctakeoff.settings import ConfigManager, configure_logging, database_path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("TAKEOFF_ENV", "TAKEOFF_DB", "TAKEOFF_LOG_LEVEL", "TAKEOFF_MODEL_PREFIX"):
        monkeypatch.delenv(key, raising=False)


class TestConfigManager:
    def test_defaults_use_development_profile(self, tmp_path):
        config = ConfigManager().load_config(tmp_path)
        assert config["TAKEOFF_ENV"] == "development"
        assert config["TAKEOFF_LOG_LEVEL"] == "DEBUG"
        assert config["TAKEOFF_DB"] == "takeoff.db"
        assert config["TAKEOFF_MODEL_PREFIX"] == "myModel"

    def test_testing_profile(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TAKEOFF_ENV", "testing")
        assert ConfigManager().load_config(tmp_path)["TAKEOFF_DB"] == ":memory:"

    def test_layer_precedence(self, tmp_path, monkeypatch):
        (tmp_path / ".takeoff").mkdir()
        (tmp_path / ".takeoff" / "config.json").write_text(
            json.dumps({"TAKEOFF_DB": "from-json.db", "TAKEOFF_MODEL_PREFIX": "json"}),
            encoding="utf-8",
        )
        (tmp_path / ".env").write_text(
            "# comment\nTAKEOFF_MODEL_PREFIX = dotenv\n\n", encoding="utf-8"
        )
        monkeypatch.setenv("TAKEOFF_LOG_LEVEL", "ERROR")

        config = ConfigManager().load_config(tmp_path)
        assert config["TAKEOFF_DB"] == "from-json.db"
        assert config["TAKEOFF_MODEL_PREFIX"] == "dotenv"
        assert config["TAKEOFF_LOG_LEVEL"] == "ERROR"

    def test_broken_config_json_is_ignored(self, tmp_path):
        (tmp_path / ".takeoff").mkdir()
        (tmp_path / ".takeoff" / "config.json").write_text("{not json", encoding="utf-8")
        assert ConfigManager().load_config(tmp_path)["TAKEOFF_DB"] == "takeoff.db"

    def test_unknown_profile_keeps_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TAKEOFF_ENV", "staging")
        config = ConfigManager().load_config(tmp_path)
        assert config["TAKEOFF_ENV"] == "staging"
        assert config["TAKEOFF_LOG_LEVEL"] == "INFO"

    def test_non_object_config_json_is_ignored(self, tmp_path):
        (tmp_path / ".takeoff").mkdir()
        (tmp_path / ".takeoff" / "config.json").write_text("[1, 2]", encoding="utf-8")
        assert ConfigManager().load_config(tmp_path)["TAKEOFF_DB"] == "takeoff.db"


class TestDatabasePath:
    def test_relative_to_project_root(self, tmp_path):
        assert database_path({"TAKEOFF_DB": "data/o.db"}, tmp_path) == tmp_path / "data" / "o.db"

    def test_absolute_and_memory_kept(self, tmp_path):
        absolute = tmp_path / "elsewhere.db"
        assert database_path({"TAKEOFF_DB": str(absolute)}, "/project") == absolute
        assert database_path({"TAKEOFF_DB": ":memory:"}, tmp_path) == ":memory:"


class TestConfigureLogging:
    def test_sets_package_level(self):
        configure_logging({"TAKEOFF_LOG_LEVEL": "warning"})
        assert logging.getLogger("ifctakeoff").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        configure_logging({"TAKEOFF_LOG_LEVEL": "LOUD"})
        assert logging.getLogger("ifctakeoff").level == logging.INFO
