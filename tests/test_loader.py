from __future__ import annotations

import pytest

from prompt_viewer.http_client import FetchResponse
from prompt_viewer.loader import (
    RenderContext,
    classify_content_type,
    error_block,
    load,
    loading,
    render_body,
    target_url,
)
from prompt_viewer.target import FetchTarget

API_BASE = "http://api.test"


class _RecordingFetch:
    def __init__(self, resp: object) -> None:
        self.resp = resp
        self.urls: list[str] = []

    def __call__(self, url: str) -> object:
        self.urls.append(url)
        return self.resp


class _UnreadableResponse:
    """Non-2xx response whose body must never be decoded."""

    ok = False
    status = 404
    content_type = "application/x-ndjson"

    def text(self) -> str:
        raise AssertionError("body read on failed response")


def _ok(body: str, content_type: str = "") -> FetchResponse:
    return FetchResponse(status=200, content_type=content_type, body=body.encode("utf-8"))


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("text/markdown; charset=utf-8", "markdown"),
        ("text/x-markdown", "markdown"),
        ("Text/Markdown", "markdown"),
        ("application/x-ndjson", "jsonl"),
        ("application/json", "jsonl"),
        ("", "jsonl"),
        (None, "jsonl"),
    ],
)
def test_classify_content_type(content_type: str | None, expected: str) -> None:
    assert classify_content_type(content_type) == expected


def test_target_url() -> None:
    assert target_url(FetchTarget(is_front=True), "http://api.test/") == "http://api.test/"
    assert (
        target_url(FetchTarget(is_front=False, id="abc", revision="2"), "api.test:3000")
        == "http://api.test:3000/abc?rev=2"
    )


def test_render_body_markdown_is_wrapped_in_prose() -> None:
    html = render_body("# Title", "text/markdown")
    assert html.startswith('<div class="prose">')
    assert "<h1>Title</h1>" in html


def test_render_body_defaults_to_jsonl() -> None:
    assert render_body('{"a": 1}', None).startswith('<pre class="jsonl">')


def test_error_block_escapes_message() -> None:
    assert error_block("Error: <bad>") == '<div class="error">Error: &lt;bad&gt;</div>'


def test_load_markdown_document() -> None:
    fetch = _RecordingFetch(_ok("# Hello\n\nworld", "text/markdown; charset=utf-8"))
    ctx = load(FetchTarget(is_front=True), RenderContext(), api_base=API_BASE, fetch=fetch)

    assert fetch.urls == ["http://api.test/"]
    assert ctx.loaded is True
    assert ctx.failed is False
    assert ctx.meta_text == "Front page"
    assert ctx.content_html.startswith('<div class="prose">')
    assert "<h1>Hello</h1>" in ctx.content_html


def test_load_jsonl_document() -> None:
    fetch = _RecordingFetch(_ok('{"a": 1}\n{"b": 2}', "application/x-ndjson"))
    target = FetchTarget(is_front=False, id="abc", revision="7")
    ctx = load(target, RenderContext(), api_base=API_BASE, fetch=fetch)

    assert fetch.urls == ["http://api.test/abc?rev=7"]
    assert ctx.meta_text == "UUID: abc (rev 7)"
    assert ctx.content_html.startswith('<pre class="jsonl">')
    assert ctx.content_html.count('<span class="line">') == 2
    assert ctx.loaded is True


def test_load_without_content_type_uses_jsonl() -> None:
    fetch = _RecordingFetch(_ok("[1, 2]"))
    ctx = load(FetchTarget(is_front=False, id="abc"), RenderContext(), api_base=API_BASE, fetch=fetch)
    assert ctx.content_html.startswith('<pre class="jsonl">')


def test_load_http_error_renders_status_without_reading_body() -> None:
    fetch = _RecordingFetch(_UnreadableResponse())
    ctx = load(FetchTarget(is_front=False, id="missing"), RenderContext(), api_base=API_BASE, fetch=fetch)

    assert ctx.content_html == '<div class="error">Failed to load: 404</div>'
    assert ctx.failed is True
    assert ctx.loaded is True


def test_load_network_failure_renders_error_and_signals_completion() -> None:
    def failing_fetch(url: str) -> FetchResponse:
        raise ConnectionRefusedError("connection <refused>")

    ctx = load(FetchTarget(is_front=True), RenderContext(), api_base=API_BASE, fetch=failing_fetch)

    assert ctx.content_html == '<div class="error">Error: connection &lt;refused&gt;</div>'
    assert ctx.failed is True
    assert ctx.loaded is True
    assert ctx.in_progress is False


def test_load_error_without_message_uses_exception_name() -> None:
    def failing_fetch(url: str) -> FetchResponse:
        raise TimeoutError()

    ctx = load(FetchTarget(is_front=True), RenderContext(), api_base=API_BASE, fetch=failing_fetch)
    assert ctx.content_html == '<div class="error">Error: TimeoutError</div>'


def test_load_empty_api_base_is_reported_not_raised() -> None:
    ctx = load(FetchTarget(is_front=True), RenderContext(), api_base="")
    assert ctx.content_html == '<div class="error">Error: missing hostname</div>'
    assert ctx.loaded is True


def test_loading_signals_completion_on_exception() -> None:
    ctx = RenderContext()
    with pytest.raises(KeyError):
        with loading(ctx):
            assert ctx.in_progress is True
            raise KeyError("x")
    assert ctx.loaded is True
    assert ctx.in_progress is False


def test_render_context_allows_one_load_cycle() -> None:
    fetch = _RecordingFetch(_ok("[]"))
    ctx = load(FetchTarget(is_front=True), RenderContext(), api_base=API_BASE, fetch=fetch)

    with pytest.raises(RuntimeError, match="already used"):
        load(FetchTarget(is_front=True), ctx, api_base=API_BASE, fetch=fetch)
    assert fetch.urls == ["http://api.test/"]
