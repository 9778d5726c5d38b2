"""Exception hierarchy for the monitoring engine.

Only ``StartupError`` and ``ShutdownTimeoutError`` are expected to cross the
service boundary. Probe, persistence and reload failures are absorbed and
logged by the loops that hit them.

Exception classes support two patterns:
1. No-argument raise: raise ReloadError()
2. Contextual attributes: err = PersistenceError("write failed", backend="sqlite"); raise err
"""

from typing import Any


class MonitordError(Exception):
    """Base exception for all monitord errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Monitoring error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class StartupError(MonitordError):
    """Monitoring service failed to start."""


class ProbeTransportError(MonitordError):
    """Probe request did not complete."""


class PersistenceError(MonitordError):
    """Health check could not be persisted."""


class ReloadError(MonitordError):
    """Configuration reload failed."""


class ShutdownTimeoutError(MonitordError):
    """Workers did not drain before the shutdown deadline."""


__all__ = [
    "MonitordError",
    "StartupError",
    "ProbeTransportError",
    "PersistenceError",
    "ReloadError",
    "ShutdownTimeoutError",
]
