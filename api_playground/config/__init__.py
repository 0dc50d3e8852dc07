"""Configuration management."""

from .config import (
    Config,
    ConfigError,
    FetchConfig,
    QueryConfig,
    ExportConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "Config",
    "ConfigError",
    "FetchConfig",
    "QueryConfig",
    "ExportConfig",
    "LoggingConfig",
    "load_config",
]
