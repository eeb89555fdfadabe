from __future__ import annotations

import logging
import socket
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import urlparse

from . import viewer_assets
from .config import ViewerConfig, load_config
from .http_client import fetch_document
from .loader import Fetcher
from .viewer_http import (
    send_bytes_response,
    send_html_response,
    send_not_found,
    send_redirect,
    send_text_response,
)
from .viewer_routes import document as viewer_routes_document

logger = logging.getLogger(__name__)

DEFAULT_VIEWER_HOST = "127.0.0.1"
DEFAULT_VIEWER_PORT = 38990


class ViewerServer(HTTPServer):
    def __init__(
        self,
        server_address: tuple[str, int],
        config: ViewerConfig,
        *,
        fetch: Fetcher = fetch_document,
    ) -> None:
        super().__init__(server_address, ViewerHandler)
        self.config = config
        self.fetch = fetch


class ViewerHandler(BaseHTTPRequestHandler):
    server: ViewerServer

    def _send_html(self, html: str, status: int = 200) -> None:
        send_html_response(self, html, status=status)

    def _send_text(self, text: str, status: int = 200) -> None:
        send_text_response(self, text, status=status)

    def _send_redirect(self, location: str) -> None:
        send_redirect(self, location)

    def _send_static_asset(self, asset_path: str) -> None:
        try:
            body, content_type = viewer_assets.get_static_asset_bytes(asset_path)
        except (FileNotFoundError, IsADirectoryError, ValueError):
            send_not_found(self)
            return
        send_bytes_response(self, body, content_type=content_type)

    def log_message(self, format: str, *args: object) -> None:  # noqa: A003
        if self.server.config.request_logs:
            super().log_message(format, *args)

    def do_GET(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)
        try:
            if viewer_routes_document.handle_get(
                self,
                self.server.config,
                parsed.path,
                parsed.query,
                fetch=self.server.fetch,
            ):
                return
            send_not_found(self)
        except Exception:
            logger.exception("viewer request failed: %s", parsed.path)
            self.send_response(500)
            self.end_headers()


def _port_open(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(0.2)
        try:
            return sock.connect_ex((host, port)) == 0
        except OSError:
            return False


def _serve(config: ViewerConfig) -> None:
    server = ViewerServer((config.viewer_host, config.viewer_port), config)
    logger.info(
        "viewer listening on http://%s:%s%s (api %s)",
        config.viewer_host,
        config.viewer_port,
        config.route_base,
        config.api_base,
    )
    server.serve_forever()


def start_viewer(config: ViewerConfig | None = None, background: bool = False) -> None:
    cfg = config or load_config()
    if _port_open(cfg.viewer_host, cfg.viewer_port):
        logger.info("viewer already running on %s:%s", cfg.viewer_host, cfg.viewer_port)
        return
    if background:
        thread = threading.Thread(target=_serve, args=(cfg,), daemon=True)
        thread.start()
    else:
        _serve(cfg)
