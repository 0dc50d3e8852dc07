"""Configuration management for the API data playground."""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Type, TypeVar
import yaml
from pathlib import Path


DEFAULT_BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "::1",
    "10.",
    "172.",
    "192.168.",
    "169.254.",
]


class ConfigError(ValueError):
    """Raised when a configuration section is malformed."""


@dataclass
class FetchConfig:
    """Configuration for the HTTP fetch layer."""

    timeout_seconds: float = 10.0
    user_agent: str = "API-Data-Playground/1.0"
    allowed_schemes: List[str] = field(default_factory=lambda: ["http", "https"])
    blocked_hosts: List[str] = field(
        default_factory=lambda: list(DEFAULT_BLOCKED_HOSTS)
    )
    history_size: int = 5


@dataclass
class QueryConfig:
    """Configuration for the query engine."""

    enable_aggregates: bool = False
    table_name: str = "data"


@dataclass
class ExportConfig:
    """Configuration for exports."""

    filename_prefix: str = "api-data"
    json_indent: int = 2


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    structured: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


SectionT = TypeVar("SectionT")


def _build_section(
    section_cls: Type[SectionT], data: Any, section_name: str
) -> SectionT:
    """Build one config section, rejecting unknown keys."""
    if data is None:
        return section_cls()
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{section_name}' must be a mapping")
    known = set()
    for section_field in fields(section_cls):
        known.add(section_field.name)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(
            f"Unknown keys in section '{section_name}': {', '.join(unknown)}"
        )
    return section_cls(**data)


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        fetch:
          timeout_seconds: 10
          user_agent: API-Data-Playground/1.0
          blocked_hosts: [localhost, "10.", "192.168."]
          history_size: 5

        query:
          enable_aggregates: false
          table_name: data

        export:
          filename_prefix: api-data
          json_indent: 2

        logging:
          level: INFO
          structured: false
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at the top level")

    return Config(
        fetch=_build_section(FetchConfig, data.get("fetch"), "fetch"),
        query=_build_section(QueryConfig, data.get("query"), "query"),
        export=_build_section(ExportConfig, data.get("export"), "export"),
        logging=_build_section(LoggingConfig, data.get("logging"), "logging"),
    )
