"""HTTP client for NGA thread pages."""
import logging
from typing import Optional

import httpx

from ngaweb.config import config
from ngaweb.errors import (
    EmptyResponseError,
    HTTPStatusError,
    InvalidRequestError,
    TransportError,
)
from ngaweb.fetch.endpoints import get_thread_url
from ngaweb.fetch.rate_limit import HostGate
from ngaweb.parse.models import RawDocument, RequestKey

logger = logging.getLogger(__name__)


def validate_request(tid: str, page: int) -> None:
    """Reject tid/page pairs that cannot address a thread page."""
    if not isinstance(tid, str) or not tid.isdigit():
        raise InvalidRequestError(f"tid must be a non-empty string of digits, got {tid!r}")
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise InvalidRequestError(f"page must be an integer >= 1, got {page!r}")


class FetchClient:
    """HTTP client with per-host pacing and typed failures."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        rate_per_host: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.BASE_URL).rstrip("/")
        self.headers = {
            "User-Agent": config.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
            "Accept-Language": config.ACCEPT_LANGUAGE,
        }
        limits = httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        )
        self.client = httpx.AsyncClient(
            http2=True,
            timeout=config.TIMEOUT,
            follow_redirects=True,
            limits=limits,
            headers=self.headers,
            transport=transport,
        )
        self.host_gate = HostGate(
            config.RATE_PER_HOST if rate_per_host is None else rate_per_host
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch_thread_html(
        self,
        tid: str,
        page: int,
        referer: Optional[str] = None,
    ) -> RawDocument:
        """
        Fetch read.php?tid=&page= and return its HTML.

        Raises InvalidRequestError before any I/O for a malformed tid/page,
        then HTTPStatusError, EmptyResponseError or TransportError.
        """
        validate_request(tid, page)
        url = get_thread_url(tid, page, base_url=self.base_url)

        headers = {}
        if referer:
            headers["Referer"] = referer

        try:
            async with self.host_gate.slot(url):
                response = await self.client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Network error for {url}: {e}")
            raise TransportError(e) from e

        logger.debug(f"GET {url} -> {response.status_code} ({len(response.content)} bytes)")

        if not response.is_success:
            raise HTTPStatusError(response.status_code, url)

        html = response.text
        if not html or not html.strip():
            raise EmptyResponseError(f"Empty body for {url}")

        return RawDocument(key=RequestKey(tid, page), html=html)
