"""Counters for repository activity."""
import logging
import time
from collections import defaultdict
from typing import Dict

logger = logging.getLogger(__name__)


class RepositoryStats:
    """Track cache hits, single-flight joins and upstream fetches."""

    def __init__(self):
        self.start_time = time.time()
        self.counters: Dict[str, int] = defaultdict(int)

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] = self.counters.get(key, 0) + amount

    def get_hit_rate(self) -> float:
        """Share of loads answered from the cache."""
        hits = self.counters.get("cache_hit", 0)
        total = hits + self.counters.get("cache_miss", 0)
        if total > 0:
            return hits / total
        return 0.0

    def report(self) -> None:
        """Log current counters."""
        logger.info(
            f"Loads: hit={self.counters.get('cache_hit', 0)} "
            f"miss={self.counters.get('cache_miss', 0)} | "
            f"Fetched: {self.counters.get('fetched', 0)} | "
            f"Joined: {self.counters.get('joined', 0)} | "
            f"Failed: {self.counters.get('failed', 0)} | "
            f"Hit rate: {self.get_hit_rate():.0%}"
        )

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        return {
            "cache_hit": self.counters.get("cache_hit", 0),
            "cache_miss": self.counters.get("cache_miss", 0),
            "joined": self.counters.get("joined", 0),
            "fetched": self.counters.get("fetched", 0),
            "failed": self.counters.get("failed", 0),
            "hit_rate": self.get_hit_rate(),
            "elapsed_seconds": time.time() - self.start_time,
        }
