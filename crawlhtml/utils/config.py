"""
Configuration management for crawlhtml.
Loads and validates settings from YAML files and environment variables.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

ENV_PREFIX = "CRAWLHTML_"


class GeneralConfig(BaseModel):
    """General configuration."""

    project_name: str = "crawlhtml"
    log_level: str = "WARNING"
    log_file: str | None = None
    json_logs: bool = False


class CrawlerConfig(BaseModel):
    """Navigation lifecycle configuration.

    Delays are in seconds. The navigation timeout also bounds the
    post-navigation request handling (challenge, settle, capture).
    """

    navigation_timeout: float = 60.0
    pre_navigation_delay_min: float = 0.25
    pre_navigation_delay_max: float = 1.0
    post_navigation_delay_min: float = 0.4
    post_navigation_delay_max: float = 1.0
    network_idle_timeout: float = 5.0
    challenge_timeout: float = 15.0
    wait_until: str = "domcontentloaded"
    blocked_resource_types: list[str] = Field(
        default_factory=lambda: ["image", "stylesheet", "font", "media"]
    )
    accept_language: str = "en-US,en;q=0.9"
    do_not_track: bool = True


class BrowserConfig(BaseModel):
    """Browser launch configuration."""

    default_headless: bool = True
    default_engine: str = "standard"  # standard | hardened
    locale: str = "en-US"
    ignore_https_errors: bool = True


class StorageConfig(BaseModel):
    """Storage configuration."""

    cache_dir: str = "data/cache"


class SessionPoolConfig(BaseModel):
    """Session quality scoring configuration."""

    max_pool_size: int = 4
    max_error_score: float = 0.5
    error_score_decrement: float = 0.5
    max_usage_count: int = 5


class Settings(BaseModel):
    """Main settings container."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    session_pool: SessionPoolConfig = Field(default_factory=SessionPoolConfig)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary.
        override: Override dictionary.

    Returns:
        Merged dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_yaml_config(config_dir: Path) -> dict[str, Any]:
    """Load settings.yaml with local.yaml overrides.

    local.yaml mirrors the structure of settings.yaml under a top-level
    ``settings`` key, e.g.::

        settings:
          crawler:
            navigation_timeout: 90

    Args:
        config_dir: Configuration directory path.

    Returns:
        Merged configuration dictionary.
    """
    config = _read_yaml(config_dir / "settings.yaml")
    local_overrides = _read_yaml(config_dir / "local.yaml")
    if "settings" in local_overrides:
        config = _deep_merge(config, local_overrides["settings"])
    return config


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides.

    Environment variables should be prefixed with CRAWLHTML_ and use
    double underscores for nested keys.

    Example:
        CRAWLHTML_CRAWLER__NAVIGATION_TIMEOUT=90

    Args:
        config: Configuration dictionary.

    Returns:
        Configuration with environment overrides.
    """
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX) or "__" not in key:
            continue

        key_path = key[len(ENV_PREFIX) :].lower().split("__")

        current = config
        for part in key_path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        final_key = key_path[-1]
        try:
            if value.lower() in ("true", "false"):
                current[final_key] = value.lower() == "true"
            elif "." in value:
                current[final_key] = float(value)
            else:
                current[final_key] = int(value)
        except ValueError:
            current[final_key] = value

    return config


def get_config_dir() -> Path:
    """Directory holding settings.yaml (overridable via CRAWLHTML_CONFIG_DIR)."""
    return Path(os.environ.get(f"{ENV_PREFIX}CONFIG_DIR", "config"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings.

    Settings are loaded from:
    1. Default values
    2. YAML configuration files
    3. Environment variables (highest priority)

    Returns:
        Settings instance.
    """
    config = _load_yaml_config(get_config_dir())
    config = _apply_env_overrides(config)
    return Settings(**config)

