"""
Configuration management using Pydantic settings.
Supports environment variables, .env files, and YAML configuration.
"""

import os
import yaml
from typing import Optional
from enum import Enum
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
import logging

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Application environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DatabaseConfig(BaseSettings):
    """Database configuration for the report store."""
    model_config = SettingsConfigDict(env_prefix="DB_")

    url: str = "sqlite:///./emergency_ops.db"
    echo: bool = False


class SecurityConfig(BaseSettings):
    """Security configuration."""
    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    secret_key: str = "change-me-in-production-change-me-now"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    password_hash_rounds: int = 12

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError("Secret key must be at least 32 characters long")
        return v


class LoggingConfig(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: LogLevel = LogLevel.INFO
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_path: Optional[str] = None
    max_file_size: int = 10485760  # 10MB
    backup_count: int = 5
    json_format: bool = False


class LiveUpdatesConfig(BaseSettings):
    """Periodic upvote refresh configuration."""
    model_config = SettingsConfigDict(env_prefix="LIVE_UPDATES_")

    enabled: bool = True
    interval_seconds: float = Field(10.0, gt=0)
    max_increment: int = Field(1, ge=0)


class StoreConfig(BaseSettings):
    """Timeout and retry policy for the report store."""
    model_config = SettingsConfigDict(env_prefix="STORE_")

    timeout_seconds: float = Field(5.0, gt=0)
    # First attempt plus one retry
    retry_attempts: int = Field(2, ge=1)


class Config(BaseSettings):
    """Main application configuration."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Core
    app_name: str = "Emergency Operations"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    seed_demo_data: bool = True
    host: str = "127.0.0.1"
    port: int = Field(8000, ge=1, le=65535)

    # Components
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    live_updates: LiveUpdatesConfig = Field(default_factory=LiveUpdatesConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v


CONFIG_FILE_ENV = "EMERGENCY_OPS_CONFIG"


def _read_yaml(path: Optional[str]) -> dict:
    if not path or not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    logger.info(f"Loaded configuration from {path}")
    return data


@lru_cache()
def get_config(config_file: Optional[str] = None) -> Config:
    """
    Cached application configuration.

    Values from the YAML file (``config_file`` or the path in
    ``$EMERGENCY_OPS_CONFIG``) are passed as init arguments and therefore
    win over environment variables and ``.env``.
    """
    config = Config(**_read_yaml(config_file or os.environ.get(CONFIG_FILE_ENV)))
    logger.info(f"Configuration loaded for {config.app_name} ({config.environment.value})")
    return config


def load_config(config_file: Optional[str] = None) -> Config:
    """Re-read configuration, dropping the cached instance."""
    get_config.cache_clear()
    return get_config(config_file)
