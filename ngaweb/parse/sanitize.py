"""Make a post fragment safe and self-contained for direct rendering."""
import re
from urllib.parse import urljoin

from selectolax.lexbor import LexborHTMLParser, LexborNode

from ngaweb.config import config

# Executable / styling blocks, removed with their content
_BLOCK_PATTERNS = [
    re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL),
    # Unterminated openers swallow the rest of the fragment, as a browser would
    re.compile(r"<script\b[^>]*>.*\Z", re.IGNORECASE | re.DOTALL),
    re.compile(r"<style\b[^>]*>.*\Z", re.IGNORECASE | re.DOTALL),
]
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")

# Deferred image sources, in order of preference
LAZY_SOURCE_ATTRS = ("data-src", "zoomfile", "file", "data-original", "data-srcset")
SRCSET_ATTRS = ("data-srcset", "srcset")
URL_ATTRS = ("src", "href", "poster")


def remove_blocks(html: str) -> str:
    """Remove script and style blocks."""
    for pattern in _BLOCK_PATTERNS:
        html = pattern.sub("", html)
    return html


def first_srcset_candidate(value: str) -> str:
    """Return the URL of the first candidate of a srcset list."""
    first = value.split(",")[0].strip()
    return first.split()[0] if first else ""


def absolutize(value: str, base_url: str | None = None) -> str:
    """Turn a protocol-relative or site-relative reference into an absolute URL."""
    base = (base_url or config.BASE_URL).rstrip("/")
    stripped = value.strip()
    if not stripped or stripped.startswith("#"):
        return value
    if stripped.startswith("//"):
        return "https:" + stripped
    if stripped.startswith("/"):
        return base + stripped
    if _SCHEME_RE.match(stripped):
        return value
    return urljoin(base + "/", stripped)


def _resolve_lazy_source(node: LexborNode) -> None:
    """Replace deferred sources (and any placeholder src) with a single src."""
    attrs = node.attributes
    lazy_value = None
    for name in LAZY_SOURCE_ATTRS:
        value = attrs.get(name)
        if value and value.strip():
            lazy_value = first_srcset_candidate(value) if name in SRCSET_ATTRS else value
            break

    if lazy_value is None:
        srcset = attrs.get("srcset")
        if srcset and srcset.strip() and "src" not in attrs:
            lazy_value = first_srcset_candidate(srcset)

    for name in LAZY_SOURCE_ATTRS + SRCSET_ATTRS:
        if name in attrs:
            del node.attrs[name]
    if lazy_value:
        node.attrs["src"] = lazy_value


def _clean_attributes(node: LexborNode, base_url: str | None) -> None:
    """Drop event handlers and javascript: URLs, absolutize the remaining URLs."""
    for name, value in node.attributes.items():
        if name.startswith("on"):
            del node.attrs[name]
            continue
        if name not in URL_ATTRS or value is None:
            continue
        if value.strip().lower().startswith("javascript:"):
            del node.attrs[name]
            continue
        absolute = absolutize(value, base_url)
        if absolute != value:
            node.attrs[name] = absolute


def sanitize_fragment(html: str, base_url: str | None = None) -> str:
    """
    Sanitize one post fragment.

    Steps, in order:
    - drop <script>/<style> blocks
    - move lazy-loading sources (data-src, zoomfile, ...) into src
    - make every src/href absolute against the site origin
    Inline event handlers and javascript: URLs are dropped along the way.
    """
    if not html:
        return ""

    html = remove_blocks(html)
    tree = LexborHTMLParser(html)
    if tree.body is None:
        return ""

    # Blocks the regex pass could not see (e.g. assembled from split tags)
    for node in tree.css("script, style"):
        node.decompose()

    for node in tree.body.css("*"):
        _resolve_lazy_source(node)
        _clean_attributes(node, base_url)

    return tree.body.inner_html or ""
