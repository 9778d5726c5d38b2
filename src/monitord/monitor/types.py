"""Data types for endpoint monitoring."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..config.models import Endpoint
from .cancellation import CancellationScope

TAG_SEPARATOR = ","

_monitor_ids = itertools.count(1)


class CheckStatus(Enum):
    """Outcome of a single probe"""

    UP = "UP"
    DEGRADED = "DEGRADED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class HealthCheck:
    """Result of one probe, handed to the check store as-is."""

    name: str
    url: str
    status: CheckStatus
    timestamp: datetime
    status_code: Optional[int] = None
    response_time_ms: Optional[int] = None
    error_message: Optional[str] = None
    tags: Tuple[str, ...] = ()

    def to_record(self) -> Dict[str, Any]:
        """Flatten into the persisted column layout."""
        return {
            "name": self.name,
            "url": self.url,
            "status": self.status.value,
            "status_code": self.status_code,
            "response_time": self.response_time_ms,
            "timestamp": self.timestamp.isoformat(),
            "error": self.error_message,
            "tags": TAG_SEPARATOR.join(self.tags),
        }


class MonitorState(Enum):
    STARTING = "starting"
    RUNNING = "running"
    CANCEL_REQUESTED = "cancel_requested"
    STOPPED = "stopped"


@dataclass
class EndpointMonitor:
    """Run-state for one active endpoint.

    ``last_check`` and the RUNNING/STOPPED transitions belong to the polling
    loop; everyone else may only request cancellation.
    """

    endpoint: Endpoint
    scope: CancellationScope
    monitor_id: int = field(default_factory=lambda: next(_monitor_ids))
    last_check: Optional[datetime] = None
    state: MonitorState = MonitorState.STARTING
    task: Optional[asyncio.Task] = None

    def request_cancel(self) -> None:
        self.scope.cancel()
        if self.state in (MonitorState.STARTING, MonitorState.RUNNING):
            self.state = MonitorState.CANCEL_REQUESTED

    def snapshot(self) -> "MonitorSnapshot":
        return MonitorSnapshot(
            monitor_id=self.monitor_id,
            endpoint=self.endpoint,
            last_check=self.last_check,
            state=self.state,
        )


@dataclass(frozen=True)
class MonitorSnapshot:
    """Read-only view of an ``EndpointMonitor``."""

    monitor_id: int
    endpoint: Endpoint
    last_check: Optional[datetime]
    state: MonitorState


@dataclass(frozen=True)
class ProbeResponse:
    """What the outbound client observed for a completed request."""

    status_code: int
    elapsed_ms: int
