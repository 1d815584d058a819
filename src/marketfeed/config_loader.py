"""Configuration loader with Pydantic validation and environment variable interpolation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables at module level
load_dotenv(find_dotenv(usecwd=True))

from marketfeed.constants import (
    DEFAULT_CANDLE_MINUTES,
    DEFAULT_CHART_INTERVAL_SEC,
    DEFAULT_CHART_WINDOW,
    DEFAULT_INDEX_MAX_PCT,
    DEFAULT_INDICES_INTERVAL_SEC,
    DEFAULT_OPTION_CHAIN_INTERVAL_SEC,
    DEFAULT_OPTION_MAX_PCT,
    DEFAULT_SEED_CANDLES,
    DEFAULT_STOCK_MAX_PCT,
    DEFAULT_STOCKS_INTERVAL_SEC,
    Category,
    LogLevel,
)


def interpolate_env_vars(value: Any) -> Any:
    """
    Interpolate environment variables in string values.

    Supports formats:
    - ${VAR_NAME} - replaced by the variable, or an empty string when unset
    - ${VAR_NAME:default} - optional with default value
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            return ""

    return re.sub(pattern, replacer, value)


def process_config_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively process config dict to interpolate env vars."""
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                process_config_dict(item) if isinstance(item, dict) else interpolate_env_vars(item)
                for item in value
            ]
        else:
            result[key] = interpolate_env_vars(value)
    return result


# ============================================
# Pydantic Configuration Models
# ============================================


class EnvironmentConfig(BaseModel):
    """Environment and runtime settings."""

    log_level: LogLevel = LogLevel.INFO
    random_seed: int | None = None

    @field_validator("random_seed", mode="before")
    @classmethod
    def empty_seed_is_none(cls, v: Any) -> Any:
        """Interpolated but unset seeds arrive as empty strings."""
        if v == "":
            return None
        return v


class SchedulerConfig(BaseModel):
    """Tick period per data category, in seconds."""

    stocks_interval_sec: float = DEFAULT_STOCKS_INTERVAL_SEC
    indices_interval_sec: float = DEFAULT_INDICES_INTERVAL_SEC
    option_chain_interval_sec: float = DEFAULT_OPTION_CHAIN_INTERVAL_SEC
    chart_interval_sec: float = DEFAULT_CHART_INTERVAL_SEC

    @field_validator(
        "stocks_interval_sec",
        "indices_interval_sec",
        "option_chain_interval_sec",
        "chart_interval_sec",
    )
    @classmethod
    def validate_positive_interval(cls, v: float) -> float:
        """Validate intervals are positive."""
        if v <= 0:
            raise ValueError(f"Interval must be positive, got: {v}")
        return v

    def interval_for(self, category: Category) -> float:
        """Period for one category."""
        return {
            Category.STOCKS: self.stocks_interval_sec,
            Category.INDICES: self.indices_interval_sec,
            Category.OPTION_CHAIN: self.option_chain_interval_sec,
            Category.CHART: self.chart_interval_sec,
        }[category]


class PerturbationConfig(BaseModel):
    """Bounds of the random walk applied on every tick."""

    stock_max_pct: float = DEFAULT_STOCK_MAX_PCT
    index_max_pct: float = DEFAULT_INDEX_MAX_PCT
    option_max_pct: float = DEFAULT_OPTION_MAX_PCT
    stock_volume_step: int = 100_000
    option_volume_step: int = 500

    @field_validator("stock_max_pct", "index_max_pct", "option_max_pct")
    @classmethod
    def validate_pct(cls, v: float) -> float:
        """Validate bound is a usable percentage."""
        if not 0 < v < 100:
            raise ValueError(f"Percent bound must be in (0, 100), got: {v}")
        return v

    @field_validator("stock_volume_step", "option_volume_step")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Value must be non-negative, got: {v}")
        return v


class ChartConfig(BaseModel):
    """Candle window settings."""

    window_size: int = DEFAULT_CHART_WINDOW
    candle_minutes: int = DEFAULT_CANDLE_MINUTES
    seed_candles: int = DEFAULT_SEED_CANDLES

    @field_validator("window_size", "candle_minutes", "seed_candles")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Validate positive integers."""
        if v <= 0:
            raise ValueError(f"Value must be positive, got: {v}")
        return v

    @model_validator(mode="after")
    def validate_seed_fits_window(self) -> ChartConfig:
        """Seed series must fit in the window."""
        if self.seed_candles > self.window_size:
            raise ValueError(
                f"seed_candles ({self.seed_candles}) must not exceed "
                f"window_size ({self.window_size})"
            )
        return self


class WatchlistsConfig(BaseModel):
    """Watchlist bootstrap settings."""

    seed_defaults: bool = True


class AppConfig(BaseModel):
    """Root application configuration."""

    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    perturbation: PerturbationConfig = Field(default_factory=PerturbationConfig)
    chart: ChartConfig = Field(default_factory=ChartConfig)
    watchlists: WatchlistsConfig = Field(default_factory=WatchlistsConfig)

    @property
    def is_deterministic(self) -> bool:
        """Check if a random seed pins the simulation."""
        return self.environment.random_seed is not None


# ============================================
# Configuration Loader
# ============================================


class ConfigLoader:
    """Load and validate configuration from YAML files with env var interpolation."""

    def __init__(self, config_path: str | Path) -> None:
        """
        Initialize config loader.

        Args:
            config_path: Path to the YAML configuration file.
        """
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """
        Load and validate configuration.

        Returns:
            Validated AppConfig instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If config validation fails.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        processed_config = process_config_dict(raw_config)

        self._config = AppConfig.model_validate(processed_config)

        return self._config

    @property
    def config(self) -> AppConfig:
        """Get loaded config, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Force reload configuration from disk."""
        self._config = None
        return self.load()


def load_config(config_path: str | Path) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Validated AppConfig instance.
    """
    loader = ConfigLoader(config_path)
    return loader.load()


def load_config_with_overrides(
    config_path: str | Path,
    *,
    seed: int | None = None,
    log_level: str | None = None,
) -> AppConfig:
    """
    Load configuration with CLI overrides.

    Args:
        config_path: Path to the YAML configuration file.
        seed: Override the random seed.
        log_level: Override the log level.

    Returns:
        Validated AppConfig instance with overrides applied.
    """
    config = load_config(config_path)

    env_updates: dict[str, Any] = {}

    if seed is not None:
        env_updates["random_seed"] = seed

    if log_level is not None:
        env_updates["log_level"] = LogLevel(log_level.upper())

    if env_updates:
        return config.model_copy(
            update={"environment": config.environment.model_copy(update=env_updates)}
        )

    return config
