"""In-memory TTL cache of parsed thread pages."""
import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from ngaweb.parse.models import RequestKey, ThreadPage

logger = logging.getLogger(__name__)


class PageCache:
    """
    Latest parsed page per (tid, page), valid for a bounded age.

    Expired entries are not evicted, ``get`` just treats them as misses and
    the next ``put`` overwrites them. There is no size bound: the cache lives
    as long as the process and only remembers what was actually requested.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[RequestKey, Tuple[float, ThreadPage]] = {}
        self._lock = threading.Lock()

    def get(self, key: RequestKey, max_age: float) -> Optional[ThreadPage]:
        """Return the cached page if it is at most ``max_age`` seconds old."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, page = entry
        if self._clock() - stored_at <= max_age:
            return page
        logger.debug(f"Cache entry for {key} expired")
        return None

    def put(self, key: RequestKey, page: ThreadPage) -> None:
        """Store ``page`` for ``key``, replacing any previous entry."""
        with self._lock:
            self._entries[key] = (self._clock(), page)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
