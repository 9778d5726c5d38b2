"""Bounded shutdown coordination for background workers."""

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_DRAIN_TIMEOUT_SECONDS = 5.0


class ShutdownCoordinator:
    """
    Counted set of outstanding workers with a deadline-bounded drain.

    Workers register with ``add`` before they are scheduled and call ``done``
    exactly once when they exit. ``drain_with_deadline`` only waits; it never
    stops a worker.
    """

    def __init__(self, default_timeout_seconds: float = DEFAULT_DRAIN_TIMEOUT_SECONDS):
        self.default_timeout_seconds = default_timeout_seconds
        self._outstanding = 0
        self._drained = asyncio.Event()
        self._drained.set()

    @property
    def outstanding(self) -> int:
        return self._outstanding

    def add(self, delta: int = 1) -> None:
        if self._outstanding + delta < 0:
            raise ValueError(f"Outstanding worker count cannot go negative (count={self._outstanding}, delta={delta})")
        self._outstanding += delta
        if self._outstanding == 0:
            self._drained.set()
        else:
            self._drained.clear()

    def done(self) -> None:
        self.add(-1)

    async def drain_with_deadline(self, timeout_seconds: Optional[float] = None) -> bool:
        """
        Wait for the outstanding count to reach zero.

        Args:
            timeout_seconds: Deadline for the wait; defaults to ``default_timeout_seconds``

        Returns:
            True once every worker is done, False if the deadline passed first
        """
        timeout = self.default_timeout_seconds if timeout_seconds is None else timeout_seconds
        if self._drained.is_set():
            return True
        try:
            await asyncio.wait_for(self._drained.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Drain deadline of %.1fs elapsed with %d worker(s) outstanding", timeout, self._outstanding)
            return False
        return True
