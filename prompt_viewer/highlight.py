from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

TokenClass = Literal["key", "string", "number", "boolean", "null", "bracket"]

TOKEN_CSS_CLASSES: dict[str, str] = {
    "key": "json-key",
    "string": "json-string",
    "number": "json-number",
    "boolean": "json-bool",
    "null": "json-null",
    "bracket": "json-bracket",
}

MIN_GUTTER_WIDTH = 3

# Matches one span emitted by a pass. Escaped text never contains a literal
# "<", so every "<span" in cumulative markup came from a pass.
_WRAPPED_SPAN_RE = re.compile(r'(<span class="json-[a-z]+">.*?</span>)')

# A quoted segment never starts at the closing quote of the previous one.
_QUOTED = r'(?<![\w"\\])"(?:[^"\\]|\\.)*"'


def escape_html(text: str) -> str:
    """Neutralize ``&``, ``<`` and ``>``.

    Not idempotent: escaping twice double-escapes ``&``. Call it exactly once
    per raw input.
    """

    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


@dataclass(frozen=True)
class TokenPass:
    """One classification pass over cumulative line markup.

    The pattern is applied only to text outside spans produced by earlier
    passes, so a segment wrapped once is never matched again.
    """

    token_class: TokenClass
    pattern: re.Pattern[str]

    @property
    def css_class(self) -> str:
        return TOKEN_CSS_CLASSES[self.token_class]

    def apply(self, markup: str) -> str:
        parts = _WRAPPED_SPAN_RE.split(markup)
        # split() with one capture group alternates bare text / wrapped span.
        for idx in range(0, len(parts), 2):
            if parts[idx]:
                parts[idx] = self.pattern.sub(self._wrap, parts[idx])
        return "".join(parts)

    def _wrap(self, match: re.Match[str]) -> str:
        return f'<span class="{self.css_class}">{match.group(0)}</span>'


# Order is significant: keys before strings, quoted content before bare
# literals, brackets last.
TOKEN_PASSES: tuple[TokenPass, ...] = (
    TokenPass("key", re.compile(_QUOTED + r"(?=\s*:)")),
    TokenPass("string", re.compile(_QUOTED + r"(?!\s*:)")),
    TokenPass("number", re.compile(r"(?<![\w.])-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?\b", re.ASCII)),
    TokenPass("boolean", re.compile(r"\b(?:true|false)\b", re.ASCII)),
    TokenPass("null", re.compile(r"\bnull\b", re.ASCII)),
    TokenPass("bracket", re.compile(r"[{}\[\]]")),
)


def highlight_line(raw: str) -> str:
    markup = escape_html(raw)
    if not markup:
        return ""
    for token_pass in TOKEN_PASSES:
        markup = token_pass.apply(markup)
    return markup


@dataclass(frozen=True)
class RenderedLine:
    index: int
    gutter_text: str
    body_html: str

    def to_html(self) -> str:
        return f'<span class="line"><span class="ln">{self.gutter_text}</span>{self.body_html}</span>'


def gutter_width(line_count: int) -> int:
    return max(MIN_GUTTER_WIDTH, len(str(line_count)))


def render_jsonl_lines(document: str) -> list[RenderedLine]:
    """Highlight every line of ``document``.

    Splits on ``\\n`` only, so a trailing newline yields a trailing empty
    line and the result always has ``len(document.split("\\n"))`` entries.
    """

    lines = document.split("\n")
    width = gutter_width(len(lines))
    return [
        RenderedLine(index=idx, gutter_text=str(idx).rjust(width), body_html=highlight_line(line))
        for idx, line in enumerate(lines, start=1)
    ]


def render_jsonl(document: str) -> str:
    body = "\n".join(line.to_html() for line in render_jsonl_lines(document))
    return f'<pre class="jsonl">{body}</pre>'
