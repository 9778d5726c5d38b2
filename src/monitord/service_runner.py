from __future__ import annotations

"""Utilities for running the long-lived async daemon with consistent shutdown handling."""

import asyncio
import logging
import signal
from typing import Any, Callable, Coroutine, Optional

ServiceFactory = Callable[[], Coroutine[Any, Any, Optional[int]]]

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def wait_for_shutdown_signal(stop_event: Optional[asyncio.Event] = None) -> None:
    """
    Block until SIGINT/SIGTERM arrives or ``stop_event`` is set.

    Platforms without ``loop.add_signal_handler`` rely on KeyboardInterrupt
    handling in ``run_async_service`` instead.
    """
    logger = logging.getLogger(__name__)
    loop = asyncio.get_running_loop()
    event = stop_event or asyncio.Event()
    installed = []

    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            # Windows event loops and non-main threads cannot install handlers.
            logger.debug("Signal handler for %s not available", sig)

    try:
        await event.wait()
        logger.info("Shutdown signal received")
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def run_async_service(
    factory: ServiceFactory,
    *,
    service_name: str,
    logger_name: Optional[str] = None,
    shutdown_message: Optional[str] = None,
) -> int:
    """Run an async service with consistent Ctrl+C handling.

    Args:
        factory: Callable returning the coroutine to execute; its result is the exit code.
        service_name: Identifier used in log lines.
        logger_name: Optional logger name override.
        shutdown_message: Optional custom message when interrupted.

    Returns:
        Process exit code.
    """

    logger = logging.getLogger(logger_name or f"monitord.{service_name}")
    try:
        result = asyncio.run(factory())
    except KeyboardInterrupt:
        if shutdown_message:
            logger.info(shutdown_message)
        else:
            logger.info("%s service interrupted by user", service_name)
        return 130
    return int(result or 0)
