"""Diffing of a freshly loaded endpoint set against the running monitors."""

from dataclasses import dataclass
from typing import Mapping, Tuple

from ..config.models import Endpoint, MonitorConfig


@dataclass(frozen=True)
class ReconciliationPlan:
    """Minimal set of monitor changes, keyed by URL."""

    start: Tuple[Endpoint, ...] = ()
    restart: Tuple[Endpoint, ...] = ()
    stop: Tuple[str, ...] = ()
    unchanged: Tuple[str, ...] = ()

    @property
    def is_noop(self) -> bool:
        return not (self.start or self.restart or self.stop)


def plan_reconciliation(current: Mapping[str, Endpoint], desired: MonitorConfig) -> ReconciliationPlan:
    """
    Compare running endpoint snapshots with the enabled endpoints of ``desired``.

    Args:
        current: URL to the endpoint each running monitor was started with
        desired: Newly loaded monitor configuration

    Returns:
        ReconciliationPlan with new URLs to start, changed URLs to restart,
        disabled or removed URLs to stop, and URLs left untouched
    """
    start = []
    restart = []
    unchanged = []
    wanted = set()

    for endpoint in desired.enabled_endpoints():
        wanted.add(endpoint.url)
        running = current.get(endpoint.url)
        if running is None:
            start.append(endpoint)
        elif running.schedule_equal(endpoint):
            unchanged.append(endpoint.url)
        else:
            restart.append(endpoint)

    stop = tuple(url for url in current if url not in wanted)
    return ReconciliationPlan(start=tuple(start), restart=tuple(restart), stop=stop, unchanged=tuple(unchanged))
