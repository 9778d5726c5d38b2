"""Configuration models, loading and environment helpers."""

from .durations import format_duration, parse_duration
from .errors import ConfigurationError
from .loader import (
    CONFIG_PATH_ENV,
    default_config_path,
    example_config,
    load_config,
    parse_config,
    save_config,
    write_example_config,
)
from .models import Config, DatabaseConfig, Endpoint, LogConfig, MonitorConfig
from .runtime import (
    env_float,
    env_seconds,
    env_str,
)

__all__ = [
    "CONFIG_PATH_ENV",
    "Config",
    "ConfigurationError",
    "DatabaseConfig",
    "Endpoint",
    "LogConfig",
    "MonitorConfig",
    "default_config_path",
    "env_float",
    "env_seconds",
    "env_str",
    "example_config",
    "format_duration",
    "load_config",
    "parse_config",
    "parse_duration",
    "save_config",
    "write_example_config",
]
