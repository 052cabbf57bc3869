"""Field matchers for post fragments.

Each matcher is a pure function ``fragment -> value | None``. A field is
resolved by running its matchers in list order and keeping the first value
found, so a new markup variant means one more matcher, not a new parser.
"""
import logging
import re
from typing import Callable, Optional

from selectolax.lexbor import LexborHTMLParser

logger = logging.getLogger(__name__)

Matcher = Callable[[str], Optional[str]]

_FLAGS = re.IGNORECASE | re.DOTALL


def strip_html(fragment: str) -> str:
    """Return the visible text of a markup snippet, whitespace collapsed."""
    if not fragment:
        return ""
    tree = LexborHTMLParser(fragment)
    root = tree.body if tree.body is not None else tree.root
    text = root.text(separator=" ", strip=True) if root is not None else ""
    return " ".join(text.split())


def capture(pattern: str, group: int = 1, flags: int = _FLAGS) -> Matcher:
    """Build a matcher returning ``group`` of the first match of ``pattern``."""
    compiled = re.compile(pattern, flags)

    def _match(fragment: str) -> Optional[str]:
        match = compiled.search(fragment)
        if not match:
            return None
        return match.group(group)

    _match.__name__ = f"capture({pattern!r})"
    return _match


def text_of(matcher: Matcher) -> Matcher:
    """Wrap a matcher so its result has markup stripped; empty text counts as no match."""

    def _match(fragment: str) -> Optional[str]:
        value = matcher(fragment)
        if value is None:
            return None
        return strip_html(value) or None

    return _match


def first_match(matchers: list[Matcher], fragment: str) -> Optional[str]:
    """Run matchers in order and return the first non-empty value."""
    for matcher in matchers:
        value = matcher(fragment)
        if value:
            return value
    return None


# pid: <div id="post_123456"> (also the table skin)
PID_MATCHERS: list[Matcher] = [
    capture(r"""<div\s+id=["']post_(\d+)["']"""),
    capture(r"""<(?:div|table)\b[^>]*\bid=["']post_(\d+)["']"""),
]

# floor: "#12", "12楼", "12樓", whichever comes first in the fragment.
# "&#60;" entities and "color:#333" style values are not floors.
FLOOR_MATCHERS: list[Matcher] = [
    capture(r"(?<![&\w:])(?<!:\s)#\s*(\d+)(?![\w;])|(\d+)\s*[楼樓]", group=0),
]

# author: text of the first link carrying a uid= query parameter
AUTHOR_MATCHERS: list[Matcher] = [
    text_of(capture(r"""<a\b[^>]*href=["'][^"']*[?&;]uid=[^"']*["'][^>]*>(.*?)</a>""")),
]

# time: span.posttime / span.postdate, then em[title]
TIME_MATCHERS: list[Matcher] = [
    text_of(capture(r"<span\b[^>]*(?:posttime|postdate)[^>]*>(.*?)</span>")),
    capture(r"""<em\b[^>]*\btitle=["']([^"']+)["']"""),
]


def match_floor(fragment: str) -> Optional[int]:
    """Extract the floor number of a post, if any."""
    token = first_match(FLOOR_MATCHERS, fragment)
    if not token:
        return None
    digits = re.sub(r"\D", "", token)
    try:
        return int(digits)
    except ValueError:
        logger.debug(f"Unparsable floor token: {token!r}")
        return None


def match_pid(fragment: str) -> Optional[str]:
    return first_match(PID_MATCHERS, fragment)


def match_author(fragment: str) -> Optional[str]:
    return first_match(AUTHOR_MATCHERS, fragment)


def match_time(fragment: str) -> Optional[str]:
    return first_match(TIME_MATCHERS, fragment)
