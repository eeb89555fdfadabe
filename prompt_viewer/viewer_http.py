from __future__ import annotations

import os
from http.server import BaseHTTPRequestHandler


def send_bytes_response(
    handler: BaseHTTPRequestHandler,
    body: bytes,
    *,
    content_type: str,
    status: int = 200,
) -> None:
    handler.send_response(status)
    handler.send_header("Content-Type", content_type)
    if os.environ.get("PROMPT_VIEWER_NO_CACHE") == "1":
        handler.send_header("Cache-Control", "no-store")
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def send_html_response(handler: BaseHTTPRequestHandler, html: str, status: int = 200) -> None:
    send_bytes_response(
        handler,
        html.encode("utf-8"),
        content_type="text/html; charset=utf-8",
        status=status,
    )


def send_text_response(handler: BaseHTTPRequestHandler, text: str, status: int = 200) -> None:
    send_bytes_response(
        handler,
        text.encode("utf-8"),
        content_type="text/plain; charset=utf-8",
        status=status,
    )


def send_redirect(handler: BaseHTTPRequestHandler, location: str, status: int = 302) -> None:
    handler.send_response(status)
    handler.send_header("Location", location)
    handler.send_header("Content-Length", "0")
    handler.end_headers()


def send_not_found(handler: BaseHTTPRequestHandler) -> None:
    handler.send_response(404)
    handler.end_headers()
