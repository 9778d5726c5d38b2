"""
Monitoring service.

Owns the URL -> EndpointMonitor map and the active monitor configuration.
Both are guarded by one asyncio lock, so ``start``, ``reload_config`` and
``shutdown`` never interleave. Probes and reload fetches always happen
outside the lock.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Coroutine, Dict, Optional, Set, Tuple, Union

from ..config.errors import ConfigurationError
from ..config.models import Config, Endpoint, MonitorConfig
from ..errors import ReloadError, ShutdownTimeoutError, StartupError
from ..storage.base import CheckStore
from .cancellation import CancellationScope
from .endpoint_poller import EndpointPoller
from .health_check import Prober
from .http_prober import HttpProber
from .reconciler import ReconciliationPlan, plan_reconciliation
from .shutdown import ShutdownCoordinator
from .types import EndpointMonitor, MonitorSnapshot

logger = logging.getLogger(__name__)

ReloadFn = Callable[[], Union[Config, Awaitable[Config]]]

RELOAD_ERRORS = (ConfigurationError, OSError, ValueError, TypeError, KeyError)

_FORCE_CANCEL_GRACE_SECONDS = 1.0


class MonitoringService:
    """Runs one polling loop per enabled endpoint plus a configuration watch loop."""

    def __init__(
        self,
        store: CheckStore,
        config: MonitorConfig,
        reload_fn: ReloadFn,
        prober: Optional[Prober] = None,
        coordinator: Optional[ShutdownCoordinator] = None,
    ):
        """
        Initialize the monitoring service.

        Args:
            store: Destination for every HealthCheck
            config: Initial monitor configuration
            reload_fn: Zero-argument callable (sync or async) returning a fresh Config
            prober: Outbound request client; an aiohttp prober is created when omitted
            coordinator: Outstanding-worker counter used for the shutdown drain
        """
        self.store = store
        self._config = config
        self._reload_fn = reload_fn
        self._owns_prober = prober is None
        self._prober: Prober = prober if prober is not None else HttpProber()
        self._coordinator = coordinator if coordinator is not None else ShutdownCoordinator()

        self._lock = asyncio.Lock()
        self._monitors: Dict[str, EndpointMonitor] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._root_scope: Optional[CancellationScope] = None
        self._watch_scope: Optional[CancellationScope] = None
        self._closed = False

    @property
    def current_config(self) -> MonitorConfig:
        return self._config

    @property
    def outstanding_workers(self) -> int:
        return self._coordinator.outstanding

    @property
    def is_running(self) -> bool:
        return self._root_scope is not None and not self._closed

    def snapshot(self) -> Dict[str, MonitorSnapshot]:
        """Return read-only views of the active monitors, keyed by URL."""
        return {url: monitor.snapshot() for url, monitor in self._monitors.items()}

    def active_urls(self) -> Tuple[str, ...]:
        return tuple(self._monitors)

    async def start(self, parent_scope: Optional[CancellationScope] = None) -> None:
        """
        Start a monitor for every enabled endpoint and the configuration watch loop.

        Args:
            parent_scope: Scope whose cancellation also stops this service

        Raises:
            StartupError: If the service was already started or shut down, or a
                monitor could not be spawned. Monitors started before the
                failure are left running.
        """
        async with self._lock:
            if self._closed:
                raise StartupError("Monitoring service has already been shut down")
            if self._root_scope is not None:
                raise StartupError("Monitoring service is already running")

            self._root_scope = CancellationScope(parent_scope, name="monitord")

            for endpoint in self._config.enabled_endpoints():
                try:
                    self._start_endpoint_locked(endpoint)
                except (RuntimeError, ValueError) as exc:
                    raise StartupError(f"Failed to start endpoint {endpoint.url}: {exc}", url=endpoint.url) from exc

            self._watch_scope = self._root_scope.child("config-watch")
            try:
                self._spawn(self._watch_config(self._watch_scope), name="monitord-config-watch")
            except RuntimeError as exc:
                raise StartupError(f"Failed to start configuration watcher: {exc}") from exc

        logger.info("Started monitoring %d endpoint(s)", len(self._monitors))

    def _start_endpoint_locked(self, endpoint: Endpoint) -> EndpointMonitor:
        """Register and launch a monitor for ``endpoint``. Caller must hold the lock."""
        if not self._lock.locked():
            raise RuntimeError("Endpoint monitors may only be started while holding the service lock")
        if self._root_scope is None:
            raise RuntimeError("Monitoring service has no root scope")

        monitor = EndpointMonitor(endpoint=endpoint, scope=self._root_scope.child(endpoint.url))
        self._monitors[endpoint.url] = monitor

        poller = EndpointPoller(monitor, self._prober, self.store)
        monitor.task = self._spawn(poller.run(), name=f"monitord-endpoint-{monitor.monitor_id}")
        return monitor

    def _spawn(self, coro: Coroutine, name: str) -> asyncio.Task:
        try:
            task = asyncio.get_running_loop().create_task(coro, name=name)
        except RuntimeError:
            coro.close()
            raise
        self._coordinator.add()
        self._tasks.add(task)
        task.add_done_callback(self._on_worker_done)
        return task

    def _on_worker_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        self._coordinator.done()
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error("Worker %s exited with an unexpected error", task.get_name(), exc_info=exc)
        # Drop the dead monitor so the next reload starts the URL again.
        for url, monitor in list(self._monitors.items()):
            if monitor.task is task:
                del self._monitors[url]
                logger.warning("Removed failed monitor for %s; it restarts on the next reload", url)
                break

    async def _watch_config(self, scope: CancellationScope) -> None:
        logger.debug("Configuration watch loop started")
        while True:
            if await scope.wait_cancelled(timeout=self._config.config_check_interval):
                break
            try:
                await self.reload_config()
            except ReloadError as exc:
                logger.error("Error reloading configuration: %s", exc)
        logger.debug("Configuration watch loop stopped")

    async def _fetch_config(self) -> Config:
        try:
            fetched = self._reload_fn()
            if inspect.isawaitable(fetched):
                fetched = await fetched
        except RELOAD_ERRORS as exc:
            raise ReloadError(f"Failed to reload config: {exc}") from exc

        if not isinstance(fetched, Config):
            raise ReloadError(f"Reload returned {type(fetched).__name__}, expected Config")
        return fetched

    async def reload_config(self) -> ReconciliationPlan:
        """
        Fetch a fresh configuration and reconcile the running monitors with it.

        Returns:
            The plan that was applied

        Raises:
            ReloadError: If the configuration could not be fetched; nothing is changed
        """
        logger.info("Reloading configuration...")
        new_config = (await self._fetch_config()).monitor

        async with self._lock:
            if self._closed:
                logger.debug("Skipping reconciliation; service is shut down")
                return ReconciliationPlan()
            if self._root_scope is None:
                self._config = new_config
                return ReconciliationPlan()

            current = {url: monitor.endpoint for url, monitor in self._monitors.items()}
            plan = plan_reconciliation(current, new_config)
            self._apply_plan_locked(plan)
            self._config = new_config

        if plan.is_noop:
            logger.debug("Configuration unchanged; %d endpoint(s) left running", len(plan.unchanged))
        else:
            logger.info(
                "Reconciled endpoints: %d added, %d restarted, %d removed, %d unchanged",
                len(plan.start),
                len(plan.restart),
                len(plan.stop),
                len(plan.unchanged),
            )
        return plan

    def _apply_plan_locked(self, plan: ReconciliationPlan) -> None:
        reconciled = dict(self._monitors)

        for url in plan.stop:
            logger.info("Removing endpoint: %s", url)
            reconciled.pop(url).request_cancel()

        for endpoint in plan.restart:
            logger.info("Updating configuration for endpoint: %s", endpoint.url)
            reconciled[endpoint.url].request_cancel()
            reconciled[endpoint.url] = self._start_endpoint_locked(endpoint)

        for endpoint in plan.start:
            logger.info("Adding new endpoint: %s", endpoint.url)
            reconciled[endpoint.url] = self._start_endpoint_locked(endpoint)

        self._monitors = reconciled

    async def shutdown(self, timeout_seconds: Optional[float] = None, *, force_cancel: bool = True) -> None:
        """
        Cancel every loop and wait for them to drain.

        Args:
            timeout_seconds: Drain deadline; the coordinator default applies when omitted
            force_cancel: When the deadline passes, cancel the lingering tasks so
                in-flight requests are aborted instead of leaking

        Raises:
            ShutdownTimeoutError: If workers were still outstanding at the deadline
        """
        async with self._lock:
            self._closed = True
            for monitor in self._monitors.values():
                monitor.request_cancel()
            if self._watch_scope is not None:
                self._watch_scope.cancel()
            if self._root_scope is not None:
                self._root_scope.cancel()

        drained = await self._coordinator.drain_with_deadline(timeout_seconds)
        if drained:
            await self._close_prober()
            logger.info("Monitoring service stopped")
            return

        outstanding = self._coordinator.outstanding
        lingering = [task for task in self._tasks if not task.done()]
        if force_cancel and lingering:
            logger.warning("Force-cancelling %d lingering worker(s)", len(lingering))
            for task in lingering:
                task.cancel()
            await asyncio.wait(lingering, timeout=_FORCE_CANCEL_GRACE_SECONDS)
            await self._close_prober()
        else:
            logger.warning("Leaving %d worker(s) running past the shutdown deadline", len(lingering))

        raise ShutdownTimeoutError(
            f"{outstanding} worker(s) still running after shutdown deadline",
            outstanding=outstanding,
            timeout=timeout_seconds,
        )

    async def _close_prober(self) -> None:
        if not self._owns_prober:
            return
        close = getattr(self._prober, "close", None)
        if close is not None:
            await close()
