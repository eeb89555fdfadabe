from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Literal

from .highlight import escape_html, render_jsonl
from .http_client import FetchResponse, build_base_url, fetch_document
from .markdown import DEFAULT_LINK_ORIGIN, render_markdown
from .target import FetchTarget

logger = logging.getLogger(__name__)

ContentKind = Literal["markdown", "jsonl"]
Fetcher = Callable[[str], FetchResponse]


@dataclass
class RenderContext:
    """Mount point and completion state for a single load cycle."""

    content_html: str = ""
    meta_text: str = ""
    in_progress: bool = False
    loaded: bool = False
    failed: bool = False

    def mount(self, html: str) -> None:
        # Fragments are built completely before they get here.
        self.content_html = html


@contextmanager
def loading(ctx: RenderContext) -> Iterator[RenderContext]:
    if ctx.in_progress or ctx.loaded:
        raise RuntimeError("render context already used for a load")
    ctx.in_progress = True
    try:
        yield ctx
    finally:
        ctx.in_progress = False
        ctx.loaded = True


def classify_content_type(content_type: str | None) -> ContentKind:
    if content_type and "markdown" in content_type.lower():
        return "markdown"
    return "jsonl"


def error_block(message: str) -> str:
    return f'<div class="error">{escape_html(message)}</div>'


def render_body(text: str, content_type: str | None, *, link_origin: str = DEFAULT_LINK_ORIGIN) -> str:
    if classify_content_type(content_type) == "markdown":
        return f'<div class="prose">{render_markdown(text, link_origin)}</div>'
    return render_jsonl(text)


def target_url(target: FetchTarget, api_base: str) -> str:
    return f"{build_base_url(api_base)}{target.fetch_path()}"


def _dispatch(
    target: FetchTarget,
    ctx: RenderContext,
    *,
    api_base: str,
    link_origin: str,
    fetch: Fetcher,
) -> None:
    url = target_url(target, api_base)
    resp = fetch(url)
    if not resp.ok:
        logger.warning("upstream returned %s for %s", resp.status, url)
        ctx.failed = True
        ctx.mount(error_block(f"Failed to load: {resp.status}"))
        return
    ctx.mount(render_body(resp.text(), resp.content_type, link_origin=link_origin))


def load(
    target: FetchTarget,
    ctx: RenderContext,
    *,
    api_base: str,
    link_origin: str = DEFAULT_LINK_ORIGIN,
    fetch: Fetcher = fetch_document,
) -> RenderContext:
    """Fetch ``target`` and mount its rendering into ``ctx``.

    Nothing raised while fetching or rendering escapes: failures end up as an
    error block in the mount point. ``ctx.loaded`` is set on every exit path.
    """

    with loading(ctx):
        ctx.meta_text = target.describe()
        try:
            _dispatch(target, ctx, api_base=api_base, link_origin=link_origin, fetch=fetch)
        except Exception as exc:
            logger.warning("document load failed: %s", target.describe(), exc_info=exc)
            ctx.failed = True
            ctx.mount(error_block(f"Error: {str(exc) or type(exc).__name__}"))
    return ctx
