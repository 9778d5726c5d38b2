"""
Network error detection and classification.

Canonical grouping of the exceptions that mean "the probe request did not
complete" as opposed to programming errors, which must keep propagating.
"""

import asyncio
import socket

import aiohttp

NETWORK_ERROR_TYPES = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    socket.gaierror,
    OSError,
)

# aiohttp raises ValueError subclasses for malformed URLs and headers.
PROBE_ERROR_TYPES = NETWORK_ERROR_TYPES + (ValueError,)


def describe_network_error(exception: BaseException, timeout_seconds: float) -> str:
    """Render a transport failure as a one-line error message."""
    if isinstance(exception, asyncio.TimeoutError):
        return f"request timed out after {timeout_seconds:g}s"
    detail = str(exception).strip()
    name = type(exception).__name__
    return f"{name}: {detail}" if detail else name


__all__ = [
    "NETWORK_ERROR_TYPES",
    "PROBE_ERROR_TYPES",
    "describe_network_error",
]
