"""Parse a thread page HTML into posts.

Best-effort and regex based: the page is cut into post fragments on the
first known post container marker, then each fragment goes through the
field matchers and the sanitizer. Nothing in here raises on odd markup;
missing pieces simply come out as None (or the anonymous author).
"""
import logging

from ngaweb.parse.matchers import match_author, match_floor, match_pid, match_time
from ngaweb.parse.models import ANONYMOUS_AUTHOR, Post, ThreadPage
from ngaweb.parse.sanitize import sanitize_fragment

logger = logging.getLogger(__name__)

# Post container markers, most common skin first
POST_MARKERS = [
    '<div id="post_',
    '<div class="postrow',
    '<table class="postrow',
]

NEXT_PAGE_MARKERS = ["下一页", "下一頁", "&gt;", "›"]


def split_into_posts(html: str) -> list[str]:
    """
    Split a page into post fragments.

    Only the first marker present in the page is used. Each fragment keeps
    its marker as prefix; whatever precedes the first marker is page chrome
    and is dropped. Without any marker the whole page is one fragment.
    """
    marker = next((m for m in POST_MARKERS if m in html), None)
    if marker is None:
        return [html]
    parts = html.split(marker)
    if len(parts) <= 1:
        return [html]
    return [marker + part for part in parts[1:]]


def has_next_page(html: str) -> bool:
    """Whether the page shows a "next page" control. Heuristic, not authoritative."""
    return any(marker in html for marker in NEXT_PAGE_MARKERS)


def parse_post(fragment: str, base_url: str | None = None) -> Post:
    """Extract one post from its fragment."""
    return Post(
        pid=match_pid(fragment),
        floor=match_floor(fragment),
        author=match_author(fragment) or ANONYMOUS_AUTHOR,
        time_text=match_time(fragment),
        html=sanitize_fragment(fragment, base_url=base_url),
    )


def parse_thread_page(tid: str, page: int, html: str, base_url: str | None = None) -> ThreadPage:
    """Turn the HTML of read.php?tid=&page= into a ThreadPage."""
    html = html or ""
    fragments = split_into_posts(html)
    posts = tuple(parse_post(fragment, base_url=base_url) for fragment in fragments)

    if len(fragments) == 1 and not any(m in html for m in POST_MARKERS):
        logger.debug(f"No post marker found for tid={tid} page={page}, using whole page as one post")

    return ThreadPage(tid=tid, page=page, posts=posts, has_next=has_next_page(html))
