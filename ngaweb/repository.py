"""Thread page repository: the one entry point consumers use."""
import logging
from typing import Optional

from ngaweb.config import config
from ngaweb.fetch.client import FetchClient
from ngaweb.fetch.retry import FetchFunc, RetryingFetcher, RetryPolicy
from ngaweb.metrics import RepositoryStats
from ngaweb.parse.models import RequestKey, ThreadPage
from ngaweb.parse.thread_parser import parse_thread_page
from ngaweb.store.inflight import InflightRegistry
from ngaweb.store.page_cache import PageCache

logger = logging.getLogger(__name__)


class ThreadRepository:
    """
    Load parsed, sanitized thread pages.

    A load is answered from the page cache when a fresh entry exists.
    Otherwise it joins (or starts) the single in-flight fetch for that page;
    the fetch is retried with backoff, parsed, and cached on success. Errors
    reach every joined caller unchanged and are never cached.
    """

    def __init__(
        self,
        client: Optional[FetchClient] = None,
        fetch: Optional[FetchFunc] = None,
        cache: Optional[PageCache] = None,
        inflight: Optional[InflightRegistry] = None,
        retry_policy: Optional[RetryPolicy] = None,
        ttl: Optional[float] = None,
        base_url: Optional[str] = None,
        retrier: Optional[RetryingFetcher] = None,
    ):
        self.base_url = base_url or config.BASE_URL
        self._owns_client = False
        if fetch is None and retrier is None:
            if client is None:
                client = FetchClient(base_url=self.base_url)
                self._owns_client = True
            fetch = client.fetch_thread_html
        self.client = client
        if retrier is None:
            retrier = RetryingFetcher(fetch, policy=retry_policy)
        self.retrier = retrier
        self.cache = PageCache() if cache is None else cache
        self.inflight = InflightRegistry() if inflight is None else inflight
        self.ttl = config.CACHE_TTL if ttl is None else ttl
        self.stats = RepositoryStats()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this repository created it."""
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    async def load_thread_page(
        self,
        tid: str,
        page: int = 1,
        referer: Optional[str] = None,
    ) -> ThreadPage:
        """Return the parsed page ``page`` of thread ``tid``."""
        key = RequestKey(tid, page)

        cached = self.cache.get(key, self.ttl)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            self.stats.increment("cache_hit")
            return cached
        self.stats.increment("cache_miss")

        if key in self.inflight:
            self.stats.increment("joined")

        async def compute() -> ThreadPage:
            try:
                raw = await self.retrier.fetch(key, referer=referer)
            except Exception:
                self.stats.increment("failed")
                raise
            self.stats.increment("fetched")
            parsed = parse_thread_page(key.tid, key.page, raw.html, base_url=self.base_url)
            self.cache.put(key, parsed)
            logger.debug(f"Loaded {key}: {len(parsed.posts)} posts, has_next={parsed.has_next}")
            return parsed

        return await self.inflight.run(key, compute)
