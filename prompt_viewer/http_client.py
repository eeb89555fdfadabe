from __future__ import annotations

from dataclasses import dataclass
from http.client import HTTPConnection, HTTPSConnection
from urllib.parse import urlparse


@dataclass(frozen=True)
class FetchResponse:
    status: int
    content_type: str
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def build_base_url(address: str) -> str:
    trimmed = address.strip().rstrip("/")
    if not trimmed:
        return ""
    # urlparse reads "localhost:3000" as scheme "localhost".
    if "://" in trimmed:
        return trimmed
    return f"http://{trimmed}"


def fetch_document(
    url: str,
    *,
    headers: dict[str, str] | None = None,
) -> FetchResponse:
    """Issue one GET and read the whole response. No retry, no timeout."""

    parsed = urlparse(url)
    if not parsed.hostname:
        raise ValueError("missing hostname")
    if parsed.scheme == "https":
        conn = HTTPSConnection(parsed.hostname, parsed.port or 443)
    else:
        conn = HTTPConnection(parsed.hostname, parsed.port or 80)
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    request_headers = {"Accept": "text/markdown, application/x-ndjson, */*"}
    if headers:
        request_headers.update(headers)
    try:
        conn.request("GET", path, headers=request_headers)
        resp = conn.getresponse()
        status = int(resp.status)
        content_type = resp.getheader("Content-Type") or ""
        body = resp.read()
    finally:
        conn.close()
    return FetchResponse(status=status, content_type=content_type, body=body)
