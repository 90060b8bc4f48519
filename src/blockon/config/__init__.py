"""Configuration models and loaders for blockon."""

from .loader import (
    ConfigError,
    DEFAULT_CONFIG_PATH,
    dump_example_config,
    load_config,
    retry_config_from_env,
)
from .models import BlockOnConfig, LoggingConfig, ProbeConfig, RetryConfig

__all__ = [
    "BlockOnConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "LoggingConfig",
    "ProbeConfig",
    "RetryConfig",
    "dump_example_config",
    "load_config",
    "retry_config_from_env",
]
