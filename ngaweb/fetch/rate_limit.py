"""Per-host request gate: one request in flight per host, paced."""
import asyncio
import logging
import time
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class HostGate:
    """
    Serialize requests per host and space their starts.

    While a caller holds ``slot(url)`` no other request to the same host
    starts, and consecutive starts are at least ``1 / rate_per_second``
    seconds apart. Thread pages and page turns on the forum are sensitive
    to bursts, so each host only ever sees one request at a time. A rate of
    0 keeps the serialization but drops the spacing.
    """

    def __init__(self, rate_per_second: float):
        self.rate_per_second = rate_per_second
        self.min_interval = 1.0 / rate_per_second if rate_per_second > 0 else 0.0
        self._last_start: Dict[str, float] = {}
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @staticmethod
    def host_of(url: str) -> str:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}"

    def delay_for(self, host: str, now: float) -> float:
        """Seconds to wait before the next request to ``host`` may start."""
        last = self._last_start.get(host)
        if last is None:
            return 0.0
        return max(0.0, self.min_interval - (now - last))

    @asynccontextmanager
    async def slot(self, url: str) -> AsyncIterator[None]:
        """Hold the host for the duration of one request."""
        host = self.host_of(url)
        async with self._locks[host]:
            wait_time = self.delay_for(host, time.monotonic())
            if wait_time > 0:
                logger.debug(f"Host gate: waiting {wait_time:.2f}s for {host}")
                await asyncio.sleep(wait_time)
            self._last_start[host] = time.monotonic()
            yield
