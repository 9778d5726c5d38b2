"""Single-probe health classification."""

import logging
from datetime import datetime, timezone
from typing import Protocol

from ..config.models import Endpoint
from ..errors import ProbeTransportError
from .types import CheckStatus, HealthCheck, ProbeResponse

logger = logging.getLogger(__name__)

_HTTP_OK = 200


class Prober(Protocol):
    async def probe(self, url: str, timeout_seconds: float) -> ProbeResponse: ...


async def perform_health_check(endpoint: Endpoint, prober: Prober) -> HealthCheck:
    """
    Probe ``endpoint`` once and classify the outcome.

    A request that never completes is ERROR, exactly 200 is UP, and any
    other status code is DEGRADED. There is no retry here; the next tick is
    the retry.

    Args:
        endpoint: Endpoint to probe
        prober: Outbound request client

    Returns:
        HealthCheck stamped with the probe start time
    """
    logger.debug("Starting health check for endpoint: %s", endpoint.url)
    started_at = datetime.now(timezone.utc)

    try:
        response = await prober.probe(endpoint.url, endpoint.timeout)
    except ProbeTransportError as exc:
        logger.error("Error checking endpoint %s: %s", endpoint.url, exc)
        return HealthCheck(
            name=endpoint.name,
            url=endpoint.url,
            status=CheckStatus.ERROR,
            timestamp=started_at,
            error_message=str(exc),
            tags=endpoint.tags,
        )

    if response.status_code == _HTTP_OK:
        status = CheckStatus.UP
        logger.info(
            "Health check successful for %s - Status: %s, Response time: %dms",
            endpoint.url,
            status.value,
            response.elapsed_ms,
        )
    else:
        status = CheckStatus.DEGRADED
        logger.warning(
            "Health check degraded for %s - Status: %s, Status code: %d, Response time: %dms",
            endpoint.url,
            status.value,
            response.status_code,
            response.elapsed_ms,
        )

    return HealthCheck(
        name=endpoint.name,
        url=endpoint.url,
        status=status,
        timestamp=started_at,
        status_code=response.status_code,
        response_time_ms=response.elapsed_ms,
        tags=endpoint.tags,
    )
