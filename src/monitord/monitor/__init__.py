"""Endpoint monitoring engine."""

from .cancellation import CancellationScope
from .endpoint_poller import EndpointPoller
from .health_check import perform_health_check
from .http_prober import HttpProber
from .reconciler import ReconciliationPlan, plan_reconciliation
from .service import MonitoringService
from .shutdown import ShutdownCoordinator
from .types import (
    CheckStatus,
    EndpointMonitor,
    HealthCheck,
    MonitorSnapshot,
    MonitorState,
    ProbeResponse,
)

__all__ = [
    "CancellationScope",
    "CheckStatus",
    "EndpointMonitor",
    "EndpointPoller",
    "HealthCheck",
    "HttpProber",
    "MonitorSnapshot",
    "MonitorState",
    "MonitoringService",
    "ProbeResponse",
    "ReconciliationPlan",
    "ShutdownCoordinator",
    "perform_health_check",
    "plan_reconciliation",
]
