"""Tests for post field matchers."""
import pytest
from ngaweb.parse.matchers import (
    capture,
    first_match,
    match_author,
    match_floor,
    match_pid,
    match_time,
    strip_html,
)


def test_floor_hash_marker():
    """Test '#12' style floor."""
    assert match_floor('<span>第 "#12"</span>') == 12


def test_floor_chinese_markers():
    """Test '12楼' and '12樓' floors."""
    assert match_floor("<span>12楼</span>") == 12
    assert match_floor("<span>7 樓</span>") == 7


def test_floor_first_in_document_order():
    """Test the earliest floor token wins."""
    assert match_floor("<span>5楼</span><p>see #9</p>") == 5


def test_floor_absent():
    """Test no floor token."""
    assert match_floor("<p>no floor here</p>") is None


def test_floor_ignores_entities_and_colours():
    """Test &#60; and #fff style tokens are not floors."""
    assert match_floor("<p>&#60;b&#62; tag</p>") is None
    assert match_floor('<span style="color:#333;">x</span>') is None


def test_pid_from_post_container():
    """Test pid from div id=post_."""
    assert match_pid('<div id="post_123456" class="x">') == "123456"
    assert match_pid('<table class="postrow" id="post_42">') == "42"


def test_pid_absent():
    """Test no pid."""
    assert match_pid('<div class="postrow">') is None


def test_author_from_uid_link():
    """Test author from the first uid link, markup stripped."""
    html = (
        '<a href="/nuke.php?func=ucp&uid=42" class="author"><b>Alice</b></a>'
        '<a href="/nuke.php?func=ucp&uid=43">Bob</a>'
    )
    assert match_author(html) == "Alice"


def test_author_absent():
    """Test no uid link."""
    assert match_author('<a href="/read.php?tid=1">thread</a>') is None


def test_time_from_posttime_span():
    """Test time from span.posttime with nested markup."""
    html = '<span class="posttime"><b>2024-05-01</b> 10:00</span>'
    assert match_time(html) == "2024-05-01 10:00"


def test_time_from_postdate_id():
    """Test span carrying postdate in its id."""
    assert match_time('<span id="postdate0">2024-05-01 10:00</span>') == "2024-05-01 10:00"


def test_time_from_em_title():
    """Test fallback to em[title]."""
    assert match_time('<em title="2024-05-01 10:00">1h ago</em>') == "2024-05-01 10:00"


def test_time_absent():
    """Test no time element."""
    assert match_time("<p>nothing</p>") is None


def test_strip_html():
    """Test markup stripping and whitespace collapse."""
    assert strip_html("<b>a</b>\n  <i>b</i>") == "a b"
    assert strip_html("") == ""


def test_first_match_order():
    """Test matchers run in list order."""
    matchers = [capture(r"x=(\d+)"), capture(r"y=(\d+)")]
    assert first_match(matchers, "y=2 x=1") == "1"
    assert first_match(matchers, "y=2") == "2"
    assert first_match(matchers, "z=3") is None


def test_floor_ignores_colour_without_semicolon():
    """Test colour values in style attributes are not floors."""
    assert match_floor('<span style="color:#333">x</span>') is None
    assert match_floor('<span style="color: #333">x</span>') is None
    assert match_floor('<span style="color:#333">x</span><a>#4</a>') == 4
