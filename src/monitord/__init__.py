"""monitord: concurrent HTTP endpoint monitoring with live config reconciliation."""

from .app import MonitorApp
from .config import Config, ConfigurationError, Endpoint, MonitorConfig, load_config
from .errors import (
    MonitordError,
    PersistenceError,
    ProbeTransportError,
    ReloadError,
    ShutdownTimeoutError,
    StartupError,
)
from .monitor import CheckStatus, HealthCheck, MonitoringService, ShutdownCoordinator

__all__ = [
    "CheckStatus",
    "Config",
    "ConfigurationError",
    "Endpoint",
    "HealthCheck",
    "MonitorApp",
    "MonitorConfig",
    "MonitordError",
    "MonitoringService",
    "PersistenceError",
    "ProbeTransportError",
    "ReloadError",
    "ShutdownCoordinator",
    "ShutdownTimeoutError",
    "StartupError",
    "load_config",
]
