"""Configuration management from environment variables."""
import os
from urllib.parse import urlparse

from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Config:
    """Application configuration."""

    # NGA
    BASE_URL: str = os.getenv("BASE_URL", "https://nga.178.com")
    # Fixed mobile-browser UA, keep it stable between requests
    USER_AGENT: str = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Linux; Android 11; WebView) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36",
    )
    ACCEPT_LANGUAGE: str = os.getenv("ACCEPT_LANGUAGE", "zh-CN,zh;q=0.9")

    # Transport
    TIMEOUT: float = float(os.getenv("TIMEOUT", "20"))
    RATE_PER_HOST: float = float(os.getenv("RATE_PER_HOST", "2.0"))

    # Retry
    MAX_ATTEMPTS: int = 3
    MIN_BACKOFF: float = float(os.getenv("MIN_BACKOFF", "0.5"))
    MAX_BACKOFF: float = float(os.getenv("MAX_BACKOFF", "16"))
    JITTER: float = float(os.getenv("JITTER", "0.2"))
    MIN_SLEEP: float = float(os.getenv("MIN_SLEEP", "0.1"))

    # Page cache
    CACHE_TTL: float = float(os.getenv("CACHE_TTL", "60"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        errors = []
        parsed = urlparse(cls.BASE_URL)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"BASE_URL must be an absolute http(s) URL, got {cls.BASE_URL!r}")
        if cls.TIMEOUT <= 0:
            errors.append("TIMEOUT must be positive")
        if cls.CACHE_TTL <= 0:
            errors.append("CACHE_TTL must be positive")
        if cls.MIN_BACKOFF <= 0 or cls.MAX_BACKOFF < cls.MIN_BACKOFF:
            errors.append("MIN_BACKOFF must be positive and not above MAX_BACKOFF")
        if cls.JITTER < 0:
            errors.append("JITTER must not be negative")
        if cls.MIN_SLEEP <= 0:
            errors.append("MIN_SLEEP must be positive")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


config = Config()
