"""HTTP request client used by the polling loops."""

import logging
import time
from typing import Optional

import aiohttp
from aiohttp import ClientTimeout

from ..errors import ProbeTransportError
from ..http_utils import is_aiohttp_session_open
from ..network_errors import PROBE_ERROR_TYPES, describe_network_error
from .types import ProbeResponse

logger = logging.getLogger(__name__)


class HttpProber:
    """Issues one GET per probe through a shared aiohttp session."""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the prober.

        Args:
            session: Session to reuse; when omitted one is created on first use
                and closed by ``close``
        """
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if not is_aiohttp_session_open(self._session):
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def probe(self, url: str, timeout_seconds: float) -> ProbeResponse:
        """
        Request ``url`` once, bounded by ``timeout_seconds``.

        Returns:
            Status code and elapsed milliseconds until the response headers arrived

        Raises:
            ProbeTransportError: If the request did not complete
        """
        session = self._get_session()
        start_time = time.monotonic()
        try:
            async with session.get(url, timeout=ClientTimeout(total=timeout_seconds)) as response:
                elapsed_ms = int((time.monotonic() - start_time) * 1000)
                return ProbeResponse(status_code=response.status, elapsed_ms=elapsed_ms)
        except PROBE_ERROR_TYPES as exc:
            raise ProbeTransportError(describe_network_error(exc, timeout_seconds), url=url, timeout=timeout_seconds) from exc

    async def close(self) -> None:
        if self._owns_session and is_aiohttp_session_open(self._session):
            await self._session.close()
        self._session = None
