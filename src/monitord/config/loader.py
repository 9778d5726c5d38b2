"""
Configuration file loading for the monitoring daemon.

The config is a single JSON document with ``database``, ``monitor`` and
``logging`` sections. ``load_config`` is also the reload collaborator used
by the configuration watch loop, so it must either return a fully validated
``Config`` or raise; it never returns a partially parsed value.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..http_utils import ensure_http_url
from .durations import parse_duration
from .errors import ConfigurationError
from .models import (
    DEFAULT_CONFIG_CHECK_INTERVAL_SECONDS,
    DEFAULT_REDIS_MAX_ENTRIES,
    SUPPORTED_BACKENDS,
    Config,
    DatabaseConfig,
    Endpoint,
    LogConfig,
    MonitorConfig,
)
from .runtime import env_str
from .runtime_helpers import ListNormalizer

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "MONITORD_CONFIG"
_DEFAULT_RELATIVE_CONFIG_PATH = Path(".config") / "monitord" / "config.json"


def default_config_path() -> Path:
    """Return ``$MONITORD_CONFIG`` or ``~/.config/monitord/config.json``."""
    override = env_str(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / _DEFAULT_RELATIVE_CONFIG_PATH


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load and validate the daemon configuration.

    When no path is given and the default file does not exist yet, an example
    configuration is written there first.

    Args:
        path: Explicit config file path

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file is missing, is not valid JSON or fails validation
    """
    if path is None:
        path = default_config_path()
        if not path.exists():
            write_example_config(path)
            logger.info("Created example config at: %s", path)

    logger.info("Loading config from: %s", path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in config file {path}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Failed to read config file {path}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file {path} must contain an object at the top level")

    return parse_config(payload)


def parse_config(payload: Mapping[str, Any], base_dir: Optional[Path] = None) -> Config:
    """
    Build a ``Config`` from a decoded JSON document.

    Relative database and log paths are resolved against ``base_dir``
    (the user's home directory by default).
    """
    if base_dir is None:
        base_dir = Path.home()
    return Config(
        database=_parse_database(_section(payload, "database"), base_dir),
        monitor=_parse_monitor(_section(payload, "monitor")),
        logging=_parse_logging(_section(payload, "logging", required=False), base_dir),
    )


def save_config(config: Config, path: Path) -> None:
    """Write ``config`` to ``path`` as indented JSON, creating directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")


def example_config() -> Config:
    return Config(
        database=DatabaseConfig(path=Path(".config/monitord/monitord.db")),
        monitor=MonitorConfig(
            config_check_interval=DEFAULT_CONFIG_CHECK_INTERVAL_SECONDS,
            endpoints=(
                Endpoint(
                    name="Example",
                    url="https://example.com",
                    interval=60.0,
                    timeout=10.0,
                    description="Example endpoint, replace with your own",
                    tags=("production", "external"),
                    enabled=True,
                ),
            ),
        ),
        logging=LogConfig(path=Path(".config/monitord/monitord.log"), level="info"),
    )


def write_example_config(path: Path) -> None:
    """Create the example configuration file at ``path``."""
    try:
        save_config(example_config(), path)
    except OSError as exc:
        raise ConfigurationError(f"Failed to create example config at {path}") from exc


def _section(payload: Mapping[str, Any], name: str, *, required: bool = True) -> Dict[str, Any]:
    if name not in payload or payload[name] is None:
        if required:
            raise ConfigurationError(f"Configuration section not found: {name}")
        return {}
    section = payload[name]
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be an object, got {type(section).__name__}")
    return section


def _resolve_path(raw: str, base_dir: Path) -> Path:
    candidate = Path(raw).expanduser()
    if candidate.is_absolute():
        return candidate
    return base_dir / candidate


def _parse_database(section: Dict[str, Any], base_dir: Path) -> DatabaseConfig:
    backend = section.get("backend", "sqlite")
    if backend not in SUPPORTED_BACKENDS:
        raise ConfigurationError.invalid_format("database.backend", backend, f"one of {', '.join(SUPPORTED_BACKENDS)}")

    raw_path = section.get("path")
    if backend == "sqlite" and (not isinstance(raw_path, str) or not raw_path.strip()):
        raise ConfigurationError.missing_value("database.path")

    redis_url = section.get("redis_url")
    if backend == "redis" and (not isinstance(redis_url, str) or not redis_url.strip()):
        raise ConfigurationError.missing_value("database.redis_url", "required for the redis backend")

    max_entries = section.get("redis_max_entries", DEFAULT_REDIS_MAX_ENTRIES)
    if isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries <= 0:
        raise ConfigurationError.invalid_format("database.redis_max_entries", max_entries, "a positive integer")

    path = _resolve_path(raw_path, base_dir) if isinstance(raw_path, str) and raw_path.strip() else base_dir
    return DatabaseConfig(path=path, backend=backend, redis_url=redis_url, redis_max_entries=max_entries)


def _parse_monitor(section: Dict[str, Any]) -> MonitorConfig:
    raw_endpoints = section.get("endpoints", [])
    if not isinstance(raw_endpoints, list):
        raise ConfigurationError.invalid_format("monitor.endpoints", raw_endpoints, "a list of endpoint objects")

    endpoints = tuple(_parse_endpoint(raw, index) for index, raw in enumerate(raw_endpoints))

    raw_interval = section.get("config_check_interval")
    if raw_interval is None:
        interval = DEFAULT_CONFIG_CHECK_INTERVAL_SECONDS
    else:
        interval = parse_duration(raw_interval, "monitor.config_check_interval")

    return MonitorConfig(endpoints=endpoints, config_check_interval=interval)


def _parse_endpoint(raw: Any, index: int) -> Endpoint:
    field_prefix = f"monitor.endpoints[{index}]"
    if not isinstance(raw, dict):
        raise ConfigurationError.invalid_format(field_prefix, raw, "an endpoint object")

    url = raw.get("url")
    if not isinstance(url, str) or not url.strip():
        raise ConfigurationError.missing_value(f"{field_prefix}.url")
    url = url.strip()
    try:
        ensure_http_url(url)
    except ValueError as exc:
        raise ConfigurationError.invalid_format(f"{field_prefix}.url", url, "an http(s) URL with a host") from exc

    name = raw.get("name", "")
    if not isinstance(name, str):
        raise ConfigurationError.invalid_format(f"{field_prefix}.name", name, "a string")

    interval = _positive_duration(raw, "interval", field_prefix)
    timeout = _positive_duration(raw, "timeout", field_prefix)
    if timeout > interval:
        logger.warning("Endpoint %s timeout (%ss) exceeds its interval (%ss)", url, timeout, interval)

    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        raise ConfigurationError.invalid_format(f"{field_prefix}.description", description, "a string")

    enabled = raw.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ConfigurationError.invalid_format(f"{field_prefix}.enabled", enabled, "true or false")

    return Endpoint(
        name=name,
        url=url,
        interval=interval,
        timeout=timeout,
        description=description or None,
        tags=_parse_tags(raw.get("tags"), field_prefix),
        enabled=enabled,
    )


def _positive_duration(raw: Dict[str, Any], key: str, field_prefix: str) -> float:
    field_name = f"{field_prefix}.{key}"
    if key not in raw:
        raise ConfigurationError.missing_value(field_name)
    seconds = parse_duration(raw[key], field_name)
    if seconds <= 0:
        raise ConfigurationError.invalid_format(field_name, raw[key], "a positive duration")
    return seconds


def _parse_tags(raw_tags: Any, field_prefix: str) -> tuple:
    if raw_tags is None:
        return ()
    if not isinstance(raw_tags, list) or not all(isinstance(tag, str) for tag in raw_tags):
        raise ConfigurationError.invalid_format(f"{field_prefix}.tags", raw_tags, "a list of strings")
    cleaned: List[str] = [tag.strip() for tag in raw_tags if tag.strip()]
    return ListNormalizer.deduplicate_preserving_order(cleaned)


def _parse_logging(section: Dict[str, Any], base_dir: Path) -> LogConfig:
    raw_path = section.get("path")
    if raw_path is not None and not isinstance(raw_path, str):
        raise ConfigurationError.invalid_format("logging.path", raw_path, "a string")
    level = section.get("level", "info")
    if not isinstance(level, str) or not level.strip():
        raise ConfigurationError.invalid_format("logging.level", level, "a level name")
    path = _resolve_path(raw_path, base_dir) if raw_path and raw_path.strip() else None
    return LogConfig(path=path, level=level.strip().lower())


__all__ = [
    "CONFIG_PATH_ENV",
    "default_config_path",
    "example_config",
    "load_config",
    "parse_config",
    "save_config",
    "write_example_config",
]
