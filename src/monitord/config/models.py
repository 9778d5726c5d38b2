"""Configuration dataclasses.

All values are immutable once loaded. A changed endpoint arrives as a new
``Endpoint`` value from the next reload, never as an in-place mutation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .durations import format_duration
from .errors import ConfigurationError

DEFAULT_CONFIG_CHECK_INTERVAL_SECONDS = 180.0
DEFAULT_REDIS_MAX_ENTRIES = 1000
SUPPORTED_BACKENDS = ("sqlite", "redis")


@dataclass(frozen=True)
class Endpoint:
    """One monitored target."""

    name: str
    url: str
    interval: float
    timeout: float
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()
    enabled: bool = True

    def schedule_equal(self, other: "Endpoint") -> bool:
        """Return True when a running monitor for ``self`` can keep serving ``other``."""
        return (
            self.url == other.url
            and self.name == other.name
            and self.interval == other.interval
            and self.timeout == other.timeout
            and self.tags == other.tags
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "url": self.url,
            "interval": format_duration(self.interval),
            "timeout": format_duration(self.timeout),
        }
        if self.description:
            payload["description"] = self.description
        if self.tags:
            payload["tags"] = list(self.tags)
        payload["enabled"] = self.enabled
        return payload


@dataclass(frozen=True)
class MonitorConfig:
    """Endpoint set plus the configuration watch cadence."""

    endpoints: Tuple[Endpoint, ...] = ()
    config_check_interval: float = DEFAULT_CONFIG_CHECK_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if not math.isfinite(self.config_check_interval) or self.config_check_interval <= 0:
            raise ConfigurationError.invalid_format(
                "monitor.config_check_interval", self.config_check_interval, "a positive duration"
            )
        seen: Dict[str, Endpoint] = {}
        for endpoint in self.endpoints:
            previous = seen.get(endpoint.url)
            if previous is not None:
                raise ConfigurationError.duplicate_url(endpoint.url, previous.name, endpoint.name)
            seen[endpoint.url] = endpoint

    def enabled_endpoints(self) -> Tuple[Endpoint, ...]:
        return tuple(endpoint for endpoint in self.endpoints if endpoint.enabled)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "endpoints": [endpoint.to_dict() for endpoint in self.endpoints],
            "config_check_interval": format_duration(self.config_check_interval),
        }


@dataclass(frozen=True)
class DatabaseConfig:
    """Where health checks are persisted."""

    path: Path
    backend: str = "sqlite"
    redis_url: Optional[str] = None
    redis_max_entries: int = DEFAULT_REDIS_MAX_ENTRIES

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"path": str(self.path)}
        if self.backend != "sqlite":
            payload["backend"] = self.backend
        if self.redis_url:
            payload["redis_url"] = self.redis_url
        if self.redis_max_entries != DEFAULT_REDIS_MAX_ENTRIES:
            payload["redis_max_entries"] = self.redis_max_entries
        return payload


@dataclass(frozen=True)
class LogConfig:
    """Logging sink settings."""

    path: Optional[Path] = None
    level: str = "info"

    def to_dict(self) -> Dict[str, Any]:
        return {"path": str(self.path) if self.path else "", "level": self.level}


@dataclass(frozen=True)
class Config:
    """Complete daemon configuration."""

    database: DatabaseConfig
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LogConfig = field(default_factory=LogConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "database": self.database.to_dict(),
            "monitor": self.monitor.to_dict(),
            "logging": self.logging.to_dict(),
        }
