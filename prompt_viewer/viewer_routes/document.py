from __future__ import annotations

from typing import Protocol

from ..config import ViewerConfig
from ..http_client import fetch_document
from ..loader import Fetcher, RenderContext, load
from ..target import parse_target
from ..viewer_assets import render_page


class _ViewerHandler(Protocol):
    def _send_html(self, html: str, status: int = 200) -> None: ...

    def _send_text(self, text: str, status: int = 200) -> None: ...

    def _send_redirect(self, location: str) -> None: ...

    def _send_static_asset(self, asset_path: str) -> None: ...


def render_document_page(
    cfg: ViewerConfig,
    path: str,
    query: str,
    *,
    fetch: Fetcher = fetch_document,
) -> tuple[RenderContext, str]:
    target = parse_target(path, query, route_base=cfg.route_base)
    ctx = load(
        target,
        RenderContext(),
        api_base=cfg.api_base,
        link_origin=cfg.effective_link_origin(),
        fetch=fetch,
    )
    return ctx, render_page(ctx, route_base=cfg.route_base)


def handle_get(
    handler: _ViewerHandler,
    cfg: ViewerConfig,
    path: str,
    query: str,
    *,
    fetch: Fetcher = fetch_document,
) -> bool:
    route_base = cfg.route_base
    prefix = route_base.rstrip("/")

    if path == "/healthz":
        handler._send_text("ok")
        return True

    if path == "/" and prefix:
        handler._send_redirect(route_base)
        return True

    assets_prefix = f"{route_base}assets/"
    if path.startswith(assets_prefix):
        handler._send_static_asset(path[len(assets_prefix) :])
        return True

    if prefix and path != prefix and not path.startswith(route_base):
        return False

    _, page = render_document_page(cfg, path, query, fetch=fetch)
    handler._send_html(page)
    return True
