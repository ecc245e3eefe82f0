"""Configuration loading for download-ticks.

Settings live in ``~/.config/download-ticks/config.toml``:

    [http]
    retry_counter = 3
    pause = 3.0
    timeout = 30.0

    [defaults]
    market = "binance"

    [logging]
    level = "WARNING"
"""

import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator

from download_ticks.errors import ConfigError
from download_ticks.logging_config import LOG_LEVELS
from download_ticks.models import Market

CONFIG_DIR = Path.home() / ".config" / "download-ticks"
CONFIG_PATH = CONFIG_DIR / "config.toml"
CONFIG_ENV_VAR = "DOWNLOAD_TICKS_CONFIG"


class HttpSettings(BaseModel):
    """HTTP request behaviour."""

    retry_counter: int = Field(default=3, ge=1, le=20, description="Attempts per request")
    pause: float = Field(default=3.0, ge=0, description="Seconds between attempts")
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    user_agent: str = Field(default="download-ticks", min_length=1)


class DefaultSettings(BaseModel):
    """Defaults for CLI options."""

    market: Market = Field(default=Market.BINANCE)


class LoggingSettings(BaseModel):
    """Log output settings."""

    level: str = Field(default="WARNING")

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}. Must be one of {LOG_LEVELS}")
        return value


class Settings(BaseModel):
    """Root container for all settings."""

    http: HttpSettings = Field(default_factory=HttpSettings)
    defaults: DefaultSettings = Field(default_factory=DefaultSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def get_config_path(path: Optional[Path] = None) -> Path:
    """Resolve the config file: explicit path, then env var, then default."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return CONFIG_PATH


def load_config(path: Optional[Path] = None) -> Settings:
    """Load settings, falling back to defaults when no file exists.

    Args:
        path: Config file to read instead of the default location.

    Returns:
        Populated Settings.

    Raises:
        ConfigError: If the file is not valid TOML or has invalid values.
    """
    config_path = get_config_path(path)

    if not config_path.exists():
        return Settings()

    try:
        data = toml.load(config_path)
    except toml.TomlDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
