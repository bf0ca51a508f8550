"""YAML configuration loading and JSON schema validation."""

from .loader import AppConfig, ConfigError, default_config, load_config

__all__ = [
    "AppConfig",
    "ConfigError",
    "default_config",
    "load_config",
]
