from __future__ import annotations

import mimetypes
import os
from importlib import resources
from pathlib import PurePosixPath
from string import Template

from .highlight import escape_html
from .loader import RenderContext

_INDEX_TEMPLATE: Template | None = None
_ASSET_CACHE: dict[str, bytes] = {}


def _no_cache_enabled() -> bool:
    return os.environ.get("PROMPT_VIEWER_NO_CACHE") == "1"


def _read_index_template() -> Template:
    raw = resources.files(__package__).joinpath("viewer_static/index.html").read_text("utf-8")
    return Template(raw)


def get_index_template() -> Template:
    global _INDEX_TEMPLATE
    if _no_cache_enabled():
        return _read_index_template()
    if _INDEX_TEMPLATE is None:
        _INDEX_TEMPLATE = _read_index_template()
    return _INDEX_TEMPLATE


def get_static_asset_bytes(asset_path: str) -> tuple[bytes, str]:
    """Return bytes + content-type for a packaged viewer_static asset."""

    clean = asset_path.strip().lstrip("/")
    path = PurePosixPath(clean)
    if not clean or path.is_absolute() or ".." in path.parts or path.name == "index.html":
        raise ValueError("invalid asset path")

    key = str(path)
    cached: bytes | None = None
    if not _no_cache_enabled():
        cached = _ASSET_CACHE.get(key)
    if cached is None:
        cached = resources.files(__package__).joinpath("viewer_static").joinpath(key).read_bytes()
        if not _no_cache_enabled():
            _ASSET_CACHE[key] = cached

    content_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    if content_type.startswith("text/"):
        content_type = f"{content_type}; charset=utf-8"
    return cached, content_type


def render_page(ctx: RenderContext, *, route_base: str = "/h/") -> str:
    meta = escape_html(ctx.meta_text)
    return get_index_template().substitute(
        title=f"{meta} - prompt viewer" if meta else "prompt viewer",
        route_base=route_base,
        body_class="loaded" if ctx.loaded else "",
        meta=meta,
        content=ctx.content_html,
    )
