"""Tests for configuration validation and the CLI helpers."""
import pytest
from ngaweb.config import Config
from ngaweb.main import format_page, parse_args
from ngaweb.parse.models import Post, ThreadPage


def test_default_config_is_valid():
    """Test defaults pass validation."""
    Config.validate()


def test_invalid_base_url(monkeypatch):
    """Test a relative BASE_URL is rejected."""
    monkeypatch.setattr(Config, "BASE_URL", "nga.178.com")
    with pytest.raises(ValueError, match="BASE_URL"):
        Config.validate()


def test_invalid_ttl_and_backoff(monkeypatch):
    """Test all problems are reported together."""
    monkeypatch.setattr(Config, "CACHE_TTL", 0)
    monkeypatch.setattr(Config, "MIN_BACKOFF", 20.0)
    with pytest.raises(ValueError) as exc_info:
        Config.validate()
    assert "CACHE_TTL" in str(exc_info.value)
    assert "MIN_BACKOFF" in str(exc_info.value)


def test_parse_args_defaults():
    """Test CLI defaults."""
    args = parse_args(["--tid", "123"])
    assert args.tid == "123"
    assert args.page == 1
    assert args.referer is None
    assert args.json is False


def test_format_page():
    """Test the human-readable summary."""
    page = ThreadPage(
        tid="123",
        page=1,
        posts=(Post(pid="9", floor=0, author="Ann", time_text="2024-05-01", html="<p>x</p>"),),
        has_next=True,
    )
    text = format_page(page)
    assert "tid=123 page=1 posts=1 has_next=True" in text
    assert "#0" in text
    assert "Ann" in text
