"""
SqueezeCloud Configuration System.

Priority order (highest to lowest):
1. Command-line arguments
2. Environment variables
3. Configuration file (YAML)
4. Default values

``api_key`` and ``playmethod`` only seed the persisted preferences; the
pipeline reads the live values from ``Preferences`` on every resolution.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from squeezecloud.catalog.client import CatalogClient
from squeezecloud.catalog.types import PlayMethod
from squeezecloud.playback.cache import META_CACHE_TTL

logger = logging.getLogger(__name__)

VALID_PLAYMETHODS = {m.value for m in PlayMethod}

# Valid log levels
VALID_LOG_LEVELS = {"debug", "info", "warning", "error"}

# Environment variable mappings
ENV_MAPPINGS = {
    "SQUEEZECLOUD_API_KEY": ("catalog", "api_key"),
    "SQUEEZECLOUD_PLAYMETHOD": ("catalog", "playmethod"),
    "SQUEEZECLOUD_API_BASE": ("catalog", "api_base"),
    "SQUEEZECLOUD_INSECURE_HTTPS": ("catalog", "insecure_https"),
    "SQUEEZECLOUD_PREFS_PATH": ("prefs", "path"),
    "SQUEEZECLOUD_LOG_LEVEL": ("logging", "level"),
}


class ConfigError(Exception):
    """Configuration error."""

    pass


@dataclass
class CatalogConfig:
    """Catalog API configuration."""

    api_key: Optional[str] = None  # None keeps the stored preference
    playmethod: Optional[str] = None  # None keeps the stored preference
    api_base: str = CatalogClient.API_BASE
    insecure_https: bool = False


@dataclass
class PrefsConfig:
    """Persisted preferences location."""

    path: Optional[Path] = None  # Memory only if unset


@dataclass
class CacheConfig:
    """Metadata cache configuration."""

    ttl: int = META_CACHE_TTL
    max_size: int = 1000


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class Config:
    """Complete SqueezeCloud configuration."""

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    prefs: PrefsConfig = field(default_factory=PrefsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def validate_config(config: Config) -> None:
    """
    Validate configuration.

    Raises:
        ConfigError: If configuration is invalid
    """
    errors = []

    if config.catalog.playmethod is not None and (
        config.catalog.playmethod not in VALID_PLAYMETHODS
    ):
        errors.append(
            f"Invalid playmethod: {config.catalog.playmethod}. "
            f"Valid values: {sorted(VALID_PLAYMETHODS)}"
        )

    if not config.catalog.api_base.startswith(("http://", "https://")):
        errors.append(f"Invalid API base URL: {config.catalog.api_base}")

    if config.cache.ttl <= 0:
        errors.append(f"Invalid cache TTL: {config.cache.ttl}")
    if config.cache.max_size <= 0:
        errors.append(f"Invalid cache size: {config.cache.max_size}")

    if config.logging.level.lower() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid log level: {config.logging.level}. "
            f"Valid values: {sorted(VALID_LOG_LEVELS)}"
        )

    if errors:
        raise ConfigError("Configuration validation failed:\n  - " + "\n  - ".join(errors))


def load_yaml_config(path: Path) -> dict:
    """
    Load configuration from YAML file.

    Args:
        path: Path to YAML file

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    if not path.exists():
        logger.debug(f"Config file not found: {path}")
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
            return data if data else {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML config: {e}")
    except IOError as e:
        raise ConfigError(f"Error reading config file: {e}")


def set_nested(d: dict, path: tuple, value: Any) -> None:
    """Set a nested dictionary value using a path tuple."""
    for key in path[:-1]:
        d = d.setdefault(key, {})
    d[path[-1]] = value


def load_env_config() -> dict:
    """
    Load configuration from environment variables.

    Returns:
        Configuration dictionary with values from environment
    """
    result: dict = {}

    for env_var, path in ENV_MAPPINGS.items():
        value: Any = os.environ.get(env_var)
        if value is None:
            continue
        if env_var == "SQUEEZECLOUD_INSECURE_HTTPS":
            value = value.lower() in ("true", "1", "yes", "on")
        elif env_var == "SQUEEZECLOUD_PLAYMETHOD":
            value = value.lower()
        set_nested(result, path, value)

    return result


def _deep_merge(base: dict, override: dict) -> None:
    """Recursively merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def merge_configs(*configs: dict) -> dict:
    """
    Deep merge multiple configuration dictionaries.
    Later configs override earlier ones.
    """
    result: dict = {}
    for config in configs:
        _deep_merge(result, config)
    return result


def dict_to_config(d: dict) -> Config:
    """Convert a dictionary to Config dataclass."""
    config = Config()

    if "catalog" in d:
        c = d["catalog"]
        config.catalog.api_key = c.get("api_key", config.catalog.api_key)
        config.catalog.playmethod = c.get("playmethod", config.catalog.playmethod)
        config.catalog.api_base = c.get("api_base", config.catalog.api_base)
        config.catalog.insecure_https = bool(
            c.get("insecure_https", config.catalog.insecure_https)
        )

    if "prefs" in d:
        path = d["prefs"].get("path")
        if path:
            config.prefs.path = Path(path).expanduser()

    if "cache" in d:
        config.cache.ttl = d["cache"].get("ttl", config.cache.ttl)
        config.cache.max_size = d["cache"].get("max_size", config.cache.max_size)

    if "logging" in d:
        config.logging.level = d["logging"].get("level", config.logging.level)

    return config


def load_config(
    config_path: Optional[Path] = None,
    cli_args: Optional[dict] = None,
) -> Config:
    """
    Load configuration from all sources.

    Args:
        config_path: Path to YAML config file
        cli_args: Dictionary of CLI arguments

    Returns:
        Merged Config object

    Raises:
        ConfigError: If configuration is invalid
    """
    configs = []

    if config_path:
        file_config = load_yaml_config(config_path)
        if file_config:
            configs.append(file_config)
            logger.debug(f"Loaded config from {config_path}")

    env_config = load_env_config()
    if env_config:
        configs.append(env_config)
        logger.debug("Loaded config from environment variables")

    if cli_args:
        configs.append(cli_args)
        logger.debug("Loaded config from CLI arguments")

    merged = merge_configs(*configs) if configs else {}
    config = dict_to_config(merged)
    validate_config(config)

    return config
