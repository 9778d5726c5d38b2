"""
Centralized logging configuration for the daemon.

This module provides a single setup_logging function that configures:
- Console output on stdout
- Optional file output (append mode, safe for external rotation)
- Root level taken from the config, overridable from the environment
"""

import logging
import logging.handlers
import sys
import threading
from typing import Optional

from .config.errors import ConfigurationError
from .config.models import LogConfig

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def resolve_level(level_name: str) -> int:
    try:
        return _LEVELS[level_name.strip().lower()]
    except KeyError as exc:
        raise ConfigurationError.invalid_format("logging.level", level_name, ", ".join(sorted(_LEVELS))) from exc


def _close_handlers(logger: logging.Logger) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", logger.name, e)
    logger.handlers = []


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)


def _build_console_handler() -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_build_formatter())
    return console_handler


def _build_file_handler(log_config: LogConfig) -> Optional[logging.Handler]:
    if log_config.path is None:
        return None

    try:
        log_config.path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.WatchedFileHandler(log_config.path, mode="a")
    except OSError as exc:
        raise ConfigurationError(f"Cannot open log file {log_config.path}") from exc
    file_handler.setFormatter(_build_formatter())
    return file_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("redis.asyncio").setLevel(logging.WARNING)


def setup_logging(log_config: Optional[LogConfig] = None, *, level_override: Optional[str] = None) -> None:
    """Configure root logging for the daemon"""

    log_config = log_config or LogConfig()
    level = resolve_level(level_override or log_config.level)

    with _config_lock:
        root_logger = logging.getLogger()
        _close_handlers(root_logger)

        root_logger.addHandler(_build_console_handler())
        file_handler = _build_file_handler(log_config)
        if file_handler:
            root_logger.addHandler(file_handler)

        root_logger.setLevel(level)
        _suppress_noisy_third_parties()
