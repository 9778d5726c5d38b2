"""Application wiring: check store plus monitoring service."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .config.loader import load_config
from .config.models import Config
from .errors import PersistenceError, ShutdownTimeoutError
from .monitor.cancellation import CancellationScope
from .monitor.health_check import Prober
from .monitor.service import MonitoringService
from .storage.base import CheckStore
from .storage.factory import open_store

logger = logging.getLogger(__name__)


class MonitorApp:
    """Owns the check store and the monitoring service for one daemon run."""

    def __init__(self, config: Config, store: CheckStore, service: MonitoringService):
        self.config = config
        self.store = store
        self.service = service

    @classmethod
    async def create(
        cls,
        config: Config,
        config_path: Optional[Path] = None,
        *,
        prober: Optional[Prober] = None,
    ) -> "MonitorApp":
        """
        Open the configured check store and build the monitoring service.

        Args:
            config: Initial configuration
            config_path: File re-read by the configuration watch loop
            prober: Optional outbound client override
        """
        store = await open_store(config.database)

        async def reload_config() -> Config:
            return await asyncio.to_thread(load_config, config_path)

        service = MonitoringService(store, config.monitor, reload_config, prober=prober)
        return cls(config, store, service)

    def log_configuration_summary(self) -> None:
        logger.info("Initial configuration loaded:")
        logger.info("  Database Path: %s", self.config.database.path)
        logger.info("  Number of Endpoints: %d", len(self.config.monitor.endpoints))
        logger.info("  Config Check Interval: %ss", self.config.monitor.config_check_interval)
        logger.info("  Log Path: %s", self.config.logging.path or "<stdout only>")

    async def start(self, parent_scope: Optional[CancellationScope] = None) -> None:
        logger.info("Starting application...")
        await self.service.start(parent_scope)

    async def shutdown(self, timeout_seconds: Optional[float] = None) -> None:
        """
        Stop the monitoring service, then close the check store.

        Raises:
            ShutdownTimeoutError: If monitors did not drain in time (the store is
                still closed first)
        """
        logger.info("Shutting down application...")
        timeout_error: Optional[ShutdownTimeoutError] = None
        try:
            await self.service.shutdown(timeout_seconds)
        except ShutdownTimeoutError as exc:
            logger.error("Error shutting down monitor service: %s", exc)
            timeout_error = exc

        try:
            await self.store.close()
        except PersistenceError as exc:
            logger.error("Error closing check store: %s", exc)

        if timeout_error is not None:
            raise timeout_error
