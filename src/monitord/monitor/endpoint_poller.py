"""Per-endpoint polling loop."""

import asyncio
import logging

from ..errors import PersistenceError
from ..storage.base import CheckStore
from .health_check import Prober, perform_health_check
from .types import EndpointMonitor, HealthCheck, MonitorState

logger = logging.getLogger(__name__)

PERSISTENCE_ERRORS = (PersistenceError, OSError)


def next_tick_after(previous_tick: float, interval: float, now: float) -> float:
    """
    Return the deadline of the next tick, keeping the original phase.

    Ticks missed while a probe overran collapse into a single tick that is
    already due.
    """
    elapsed_ticks = int((now - previous_tick) // interval)
    if elapsed_ticks < 1:
        return previous_tick + interval
    return previous_tick + elapsed_ticks * interval


class EndpointPoller:
    """Ticks, probes and persists for a single ``EndpointMonitor`` until cancelled."""

    def __init__(self, monitor: EndpointMonitor, prober: Prober, store: CheckStore):
        self.monitor = monitor
        self.prober = prober
        self.store = store

    async def run(self) -> None:
        monitor = self.monitor
        endpoint = monitor.endpoint
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + endpoint.interval

        if monitor.state is MonitorState.STARTING:
            monitor.state = MonitorState.RUNNING
        logger.info("Monitoring endpoint %s every %ss (timeout %ss)", endpoint.url, endpoint.interval, endpoint.timeout)

        try:
            while True:
                delay = max(0.0, next_tick - loop.time())
                if await monitor.scope.wait_cancelled(timeout=delay):
                    break

                check = await perform_health_check(endpoint, self.prober)
                await self._persist(check)
                monitor.last_check = check.timestamp

                next_tick = next_tick_after(next_tick, endpoint.interval, loop.time())
        finally:
            monitor.state = MonitorState.STOPPED
            logger.info("Stopping monitoring for endpoint: %s", endpoint.url)

    async def _persist(self, check: HealthCheck) -> None:
        try:
            await self.store.save_check(check)
        except PERSISTENCE_ERRORS as exc:
            logger.error("Error saving check for %s: %s", check.url, exc)
