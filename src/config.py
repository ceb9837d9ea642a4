"""
Configuration Management Module

Responsibilities:
1. Read deployment settings from environment variables (STOCKLENS_*) or .env
2. Read engine tuning (alert thresholds, order numbering) from engine_config.json
3. Config validation and defaults

Environment Variables:
    STOCKLENS_DB_PATH            - SQLite database file (default: data/stocklens.db)
    STOCKLENS_LOG_LEVEL          - Logging level (default: INFO)
    STOCKLENS_LOG_FILE           - Optional log file path
    STOCKLENS_ENGINE_CONFIG_PATH - Engine config JSON (default: config/engine_config.json)
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Deployment settings.

    Loaded in this priority order:
    1. Environment variables (STOCKLENS_*)
    2. .env file (if exists)
    3. Field defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    db_path: Path = Field(default=Path("data/stocklens.db"), description="SQLite database file")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")
    engine_config_path: str = Field(
        default="config/engine_config.json", description="Engine config JSON path"
    )

    @field_validator("log_level")
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


class AlertThresholdConfig(BaseSettings):
    """Day thresholds for the alert classifier"""

    urgent_days: int = Field(7, ge=1, le=90, description="Delay (days) that makes an alert urgent")
    warning_days: int = Field(1, ge=1, le=90, description="Delay (days) that makes an alert a warning")
    shortage_horizon_days: int = Field(
        14, ge=1, le=180, description="Look-ahead window for impending shortages"
    )
    shortage_urgent_days: int = Field(
        7, ge=0, le=180, description="Days until start that make a shortage urgent"
    )

    @model_validator(mode="after")
    def validate_ordering(self) -> "AlertThresholdConfig":
        if self.warning_days > self.urgent_days:
            raise ValueError("warning_days must not exceed urgent_days")
        if self.shortage_urgent_days > self.shortage_horizon_days:
            raise ValueError("shortage_urgent_days must not exceed shortage_horizon_days")
        return self


class OrderNumberConfig(BaseSettings):
    """Purchase order numbering: prefix + YYMMDD + zero-padded daily counter"""

    prefix: str = Field("PO", min_length=1, max_length=6, description="Order number prefix")
    sequence_width: int = Field(3, ge=1, le=6, description="Zero padding of the daily counter")

    @field_validator("prefix")
    def validate_prefix(cls, value: str) -> str:
        if not value.isalnum():
            raise ValueError(f"Invalid order number prefix: {value}")
        return value.upper()


class EngineConfig(BaseSettings):
    """Complete engine configuration"""

    alerts: AlertThresholdConfig = Field(default_factory=AlertThresholdConfig)
    order_numbers: OrderNumberConfig = Field(default_factory=OrderNumberConfig)
    recent_transactions_limit: int = Field(
        10, ge=1, le=100, description="Ledger entries shown on part availability detail"
    )

    @classmethod
    def load(cls, path: str = "config/engine_config.json") -> "EngineConfig":
        """Load config from JSON file."""
        config_path = Path(path)
        if not config_path.exists():
            return cls()
        with config_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return cls(**data)


class Config:
    """Main Config Class - Factory Pattern (NOT Singleton).

    The running app holds the one built by get_config().
    """

    def __init__(
        self,
        settings: AppSettings,
        engine: EngineConfig,
    ):
        self.settings = settings
        self.engine = engine

    @property
    def db_path(self) -> Path:
        return self.settings.db_path

    @classmethod
    def load(cls) -> "Config":
        """Factory method to load config.

        Deployment settings: Environment variables > .env
        Engine config: engine_config.json
        """
        settings = AppSettings()
        return cls(settings=settings, engine=EngineConfig.load(settings.engine_config_path))


@lru_cache()
def get_config() -> Config:
    """Get config instance (cached for performance)."""
    return Config.load()
