"""Configuration loading and validation."""

from .loader import load_config, validate_config, get_config_value, DEFAULT_CONFIG_PATH

__all__ = [
    "load_config",
    "validate_config",
    "get_config_value",
    "DEFAULT_CONFIG_PATH",
]
