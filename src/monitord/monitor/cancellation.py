"""Hierarchical cancellation scopes for monitoring tasks."""

import asyncio
import logging
import weakref
from typing import Optional

logger = logging.getLogger(__name__)


class CancellationScope:
    """
    Cooperative cancellation token.

    Cancelling a scope cancels every live descendant; cancelling a child
    leaves its parent and siblings alone. Workers observe cancellation by
    waiting on the scope between units of work, so nothing already in flight
    is interrupted.
    """

    def __init__(self, parent: Optional["CancellationScope"] = None, name: str = ""):
        self.name = name
        self._event = asyncio.Event()
        self._children: "weakref.WeakSet[CancellationScope]" = weakref.WeakSet()
        self._parent = parent
        if parent is not None:
            parent._children.add(self)
            if parent.cancelled:
                self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def child(self, name: str = "") -> "CancellationScope":
        """Derive a scope that is cancelled together with this one."""
        return CancellationScope(parent=self, name=name)

    def cancel(self) -> None:
        if self._event.is_set():
            return
        self._event.set()
        logger.debug("Cancellation requested for scope %s", self.name or id(self))
        for child in list(self._children):
            child.cancel()

    async def wait_cancelled(self, timeout: Optional[float] = None) -> bool:
        """
        Park until the scope is cancelled or ``timeout`` elapses.

        Returns:
            True if the scope is cancelled, False on timeout
        """
        if self._event.is_set():
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def __repr__(self) -> str:
        return f"CancellationScope(name={self.name!r}, cancelled={self.cancelled})"
