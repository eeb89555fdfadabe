"""Markdown rendering via markdown-it-py.

Raw HTML in the source is never passed through, bare URLs are turned into
links, typographic replacements are on, and every link or image target has
to pass :func:`is_allowed_link` for the current origin.
"""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

from markdown_it import MarkdownIt

ALLOWED_LINK_SCHEMES = frozenset({"http", "https", "mailto"})
DEFAULT_LINK_ORIGIN = "http://127.0.0.1"


def is_allowed_link(url: str, base_origin: str = DEFAULT_LINK_ORIGIN) -> bool:
    try:
        resolved = urljoin(base_origin, url.strip())
        scheme = urlsplit(resolved).scheme
    except ValueError:
        return False
    return scheme.lower() in ALLOWED_LINK_SCHEMES


def build_markdown(base_origin: str = DEFAULT_LINK_ORIGIN) -> MarkdownIt:
    md = (
        MarkdownIt("commonmark", {"html": False, "linkify": True, "typographer": True})
        .enable("table")
        .enable("strikethrough")
        .enable("linkify")
        .enable(["replacements", "smartquotes"])
    )

    def validate_link(url: str) -> bool:
        return is_allowed_link(url, base_origin)

    md.validateLink = validate_link  # type: ignore[method-assign]
    return md


_MARKDOWN_CACHE: dict[str, MarkdownIt] = {}


def get_markdown(base_origin: str = DEFAULT_LINK_ORIGIN) -> MarkdownIt:
    md = _MARKDOWN_CACHE.get(base_origin)
    if md is None:
        md = build_markdown(base_origin)
        _MARKDOWN_CACHE[base_origin] = md
    return md


def render_markdown(text: str, base_origin: str = DEFAULT_LINK_ORIGIN) -> str:
    return get_markdown(base_origin).render(text)
