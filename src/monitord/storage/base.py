"""Storage contract consumed by the polling loops."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..monitor.types import HealthCheck


@runtime_checkable
class CheckStore(Protocol):
    """Persists health checks.

    Implementations must accept concurrent ``save_check`` calls from every
    polling loop and raise ``PersistenceError`` when a write fails.
    """

    async def save_check(self, check: HealthCheck) -> None: ...

    async def close(self) -> None: ...
