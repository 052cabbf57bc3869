"""URL builders for NGA endpoints."""
from urllib.parse import urlencode

from ngaweb.config import config


def get_thread_url(tid: str, page: int, base_url: str | None = None) -> str:
    """Get the read.php URL for one page of a thread."""
    base = (base_url or config.BASE_URL).rstrip("/")
    return f"{base}/read.php?{urlencode({'tid': tid, 'page': page})}"
