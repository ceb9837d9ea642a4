"""Tests for src/config.py"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config import (
    AlertThresholdConfig,
    AppSettings,
    Config,
    EngineConfig,
    OrderNumberConfig,
)


class TestAppSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STOCKLENS_DB_PATH", raising=False)
        monkeypatch.delenv("STOCKLENS_LOG_LEVEL", raising=False)

        settings = AppSettings(_env_file=None)

        assert settings.db_path == Path("data/stocklens.db")
        assert settings.log_level == "INFO"
        assert settings.log_file is None

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STOCKLENS_DB_PATH", str(tmp_path / "x.db"))
        monkeypatch.setenv("STOCKLENS_LOG_LEVEL", "debug")

        settings = AppSettings(_env_file=None)

        assert settings.db_path == tmp_path / "x.db"
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            AppSettings(_env_file=None, log_level="LOUD")


class TestAlertThresholdConfig:
    """Tests for alert threshold validation."""

    def test_defaults(self):
        config = AlertThresholdConfig()

        assert config.urgent_days == 7
        assert config.warning_days == 1
        assert config.shortage_horizon_days == 14
        assert config.shortage_urgent_days == 7

    def test_warning_after_urgent_rejected(self):
        with pytest.raises(ValidationError):
            AlertThresholdConfig(urgent_days=3, warning_days=5)

    def test_urgent_beyond_horizon_rejected(self):
        with pytest.raises(ValidationError):
            AlertThresholdConfig(shortage_horizon_days=5, shortage_urgent_days=6)

    def test_out_of_range(self):
        with pytest.raises(ValidationError):
            AlertThresholdConfig(urgent_days=0)


class TestOrderNumberConfig:
    """Tests for order number settings."""

    def test_prefix_upper_cased(self):
        assert OrderNumberConfig(prefix="po").prefix == "PO"

    def test_prefix_must_be_alphanumeric(self):
        with pytest.raises(ValidationError):
            OrderNumberConfig(prefix="P-O")


class TestEngineConfig:
    """Tests for engine config file handling."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = EngineConfig.load(str(tmp_path / "missing.json"))

        assert config.alerts.urgent_days == 7
        assert config.order_numbers.prefix == "PO"
        assert config.recent_transactions_limit == 10

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(
            json.dumps({"alerts": {"urgent_days": 10}, "order_numbers": {"prefix": "RC"}}),
            encoding="utf-8",
        )

        config = EngineConfig.load(str(path))

        assert config.alerts.urgent_days == 10
        assert config.alerts.warning_days == 1
        assert config.order_numbers.prefix == "RC"


class TestConfig:
    """Tests for the Config factory."""

    def test_db_path_from_settings(self, tmp_path):
        settings = AppSettings(_env_file=None, db_path=tmp_path / "db.sqlite")
        config = Config(settings=settings, engine=EngineConfig())

        assert config.db_path == tmp_path / "db.sqlite"

    def test_load(self, monkeypatch, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"recent_transactions_limit": 5}), encoding="utf-8")
        monkeypatch.setenv("STOCKLENS_ENGINE_CONFIG_PATH", str(path))

        config = Config.load()

        assert config.engine.recent_transactions_limit == 5
