"""Reachability helpers for Panasonic Viera integration."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .const import DEFAULT_PORT, DEFAULT_PROBE_TIMEOUT

_LOGGER = logging.getLogger(__name__)

# async (host) -> alive
ReachabilityProbe = Callable[[str], Awaitable[bool]]


async def async_tcp_probe(
    host: str,
    port: int = DEFAULT_PORT,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> bool:
    """Return True if a TCP connection to the TV control port can be opened."""
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except (OSError, asyncio.TimeoutError) as err:
        _LOGGER.debug("Probe of %s:%s failed: %s", host, port, err)
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError as err:
        _LOGGER.debug("Error closing probe connection to %s: %s", host, err)
    return True


def tcp_probe(port: int = DEFAULT_PORT, timeout: float = DEFAULT_PROBE_TIMEOUT) -> ReachabilityProbe:
    """Return a probe bound to port and timeout."""

    async def _probe(host: str) -> bool:
        return await async_tcp_probe(host, port, timeout)

    return _probe
