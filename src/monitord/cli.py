"""Command line entry point for the monitoring daemon.

Usage:
    monitord [--config PATH] [--shutdown-timeout SECONDS] [--log-level LEVEL]
    monitord --init [--config PATH]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .app import MonitorApp
from .config.errors import ConfigurationError
from .config.loader import default_config_path, load_config, write_example_config
from .config.runtime import env_seconds, env_str
from .errors import PersistenceError, ShutdownTimeoutError, StartupError
from .logging_config import setup_logging
from .service_runner import run_async_service, wait_for_shutdown_signal

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 30.0
SHUTDOWN_TIMEOUT_ENV = "MONITORD_SHUTDOWN_TIMEOUT_SECONDS"
LOG_LEVEL_ENV = "MONITORD_LOG_LEVEL"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="monitord", description="Continuously probe HTTP endpoints and record their health")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the JSON config file (default: $MONITORD_CONFIG or ~/.config/monitord/config.json)",
    )
    parser.add_argument(
        "--shutdown-timeout",
        type=float,
        default=None,
        help=f"Seconds to wait for monitors to stop (default: ${SHUTDOWN_TIMEOUT_ENV} or {DEFAULT_SHUTDOWN_TIMEOUT_SECONDS:g})",
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--init", action="store_true", help="Write an example config file and exit")
    return parser


def _resolve_shutdown_timeout(cli_value: Optional[float]) -> float:
    if cli_value is not None:
        return cli_value
    return env_seconds(SHUTDOWN_TIMEOUT_ENV, or_value=DEFAULT_SHUTDOWN_TIMEOUT_SECONDS)


async def run_daemon(config_path: Optional[Path], shutdown_timeout: float, log_level: Optional[str]) -> int:
    try:
        config = load_config(config_path)
        setup_logging(config.logging, level_override=log_level or env_str(LOG_LEVEL_ENV))
    except ConfigurationError as exc:
        logger.error("Failed to load config: %s", exc)
        return 1

    try:
        app = await MonitorApp.create(config, config_path)
    except (PersistenceError, ConfigurationError) as exc:
        logger.error("Failed to initialize application: %s", exc)
        return 1

    app.log_configuration_summary()
    try:
        await app.start()
    except StartupError as exc:
        logger.error("Failed to start application: %s", exc)
        try:
            await app.shutdown(shutdown_timeout)
        except ShutdownTimeoutError as shutdown_exc:
            logger.error("Failed to shutdown gracefully: %s", shutdown_exc)
        return 1

    await wait_for_shutdown_signal()

    try:
        await app.shutdown(shutdown_timeout)
    except ShutdownTimeoutError as exc:
        logger.error("Failed to shutdown gracefully: %s", exc)
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.init:
        target = args.config or default_config_path()
        try:
            write_example_config(target)
        except ConfigurationError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
        sys.stdout.write(f"Created example config at: {target}\n")
        return 0

    # Console logging until the configured sinks are known.
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        shutdown_timeout = _resolve_shutdown_timeout(args.shutdown_timeout)
    except ConfigurationError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    return run_async_service(
        lambda: run_daemon(args.config, shutdown_timeout, args.log_level),
        service_name="monitord",
        shutdown_message="monitord interrupted by user",
    )


if __name__ == "__main__":
    sys.exit(main())
