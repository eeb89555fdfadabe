from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import parse_qs, quote, urlsplit

DEFAULT_ROUTE_BASE = "/h/"

# Same unreserved set as encodeURIComponent.
_REV_SAFE_CHARS = "!~*'()"


@dataclass(frozen=True)
class FetchTarget:
    is_front: bool
    id: str | None = None
    revision: str | None = None

    def __post_init__(self) -> None:
        if self.is_front and self.id is not None:
            raise ValueError("front page target cannot carry an id")
        if not self.is_front and not self.id:
            raise ValueError("document target requires an id")

    def fetch_path(self) -> str:
        path = "/" if self.is_front else f"/{self.id}"
        if self.revision:
            path = f"{path}?rev={quote(self.revision, safe=_REV_SAFE_CHARS)}"
        return path

    def describe(self) -> str:
        if self.is_front:
            return "Front page"
        suffix = f" (rev {self.revision})" if self.revision else ""
        return f"UUID: {self.id}{suffix}"


def normalize_route_base(route_base: str) -> str:
    trimmed = route_base.strip().strip("/")
    return f"/{trimmed}/" if trimmed else "/"


def _route_prefix_re(route_base: str) -> re.Pattern[str]:
    trimmed = normalize_route_base(route_base).rstrip("/")
    return re.compile(rf"^{re.escape(trimmed)}(?:/|$)")


def parse_target(path: str, query: str = "", route_base: str = DEFAULT_ROUTE_BASE) -> FetchTarget:
    """Resolve a navigation path and query string into a fetch target.

    Never raises: a path without the route prefix is read best-effort as an
    id, and anything left empty means the front page.
    """

    remaining = _route_prefix_re(route_base).sub("", path or "", count=1)
    remaining = remaining.lstrip("/")
    params = parse_qs((query or "").lstrip("?"), keep_blank_values=True)
    revision = params.get("rev", [None])[0]
    if not remaining:
        return FetchTarget(is_front=True, id=None, revision=revision)
    return FetchTarget(is_front=False, id=remaining.split("/", 1)[0], revision=revision)


def parse_location(location: str, route_base: str = DEFAULT_ROUTE_BASE) -> FetchTarget:
    """Parse a full location (``/h/<id>?rev=2``, an absolute URL or a bare id)."""

    parts = urlsplit(location.strip())
    return parse_target(parts.path, parts.query, route_base=route_base)
