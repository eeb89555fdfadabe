from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich import print

from . import __version__
from .commands.viewer_cmds import serve as _serve
from .config import ViewerConfig, load_config
from .loader import RenderContext, load, render_body
from .target import normalize_route_base, parse_location
from .viewer_assets import render_page

app = typer.Typer(help="prompt-viewer: render stored prompt documents as Markdown or JSONL")

MARKDOWN_SUFFIXES = {".md", ".markdown"}


def _config(
    *,
    api_base: str | None = None,
    route_base: str | None = None,
    host: str | None = None,
    port: int | None = None,
) -> ViewerConfig:
    cfg = load_config()
    if api_base:
        cfg.api_base = api_base
    if route_base:
        cfg.route_base = normalize_route_base(route_base)
    if host:
        cfg.viewer_host = host
    if port:
        cfg.viewer_port = port
    return cfg


def _emit(html: str, output: Path | None) -> None:
    if output is None:
        # Not rich.print: JSONL brackets would be read as console markup.
        typer.echo(html)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html + "\n", encoding="utf-8")
    print(f"[green]Wrote {output}[/green]")


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind viewer"),
    port: int = typer.Option(None, help="Port to bind viewer"),
    api_base: str = typer.Option(None, help="Base URL of the document API"),
    route_base: str = typer.Option(None, help="Routing base path for rendered documents"),
    background: bool = typer.Option(False, help="Run viewer in background"),
    stop: bool = typer.Option(False, help="Stop background viewer"),
    restart: bool = typer.Option(False, help="Restart background viewer"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Run the document viewer server."""

    level_name = log_level.strip().upper()
    if level_name not in logging.getLevelNamesMapping():
        print(f"[red]Unknown log level: {log_level}[/red]")
        raise typer.Exit(code=1)
    logging.basicConfig(
        level=level_name,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cfg = _config(api_base=api_base, route_base=route_base, host=host, port=port)
    _serve(
        config=cfg,
        background=background,
        stop=stop,
        restart=restart,
        log_level=level_name,
    )


@app.command()
def render(
    location: str = typer.Argument(..., help="Location to render, e.g. /h/<id>?rev=2 or a bare id"),
    api_base: str = typer.Option(None, help="Base URL of the document API"),
    route_base: str = typer.Option(None, help="Routing base path for rendered documents"),
    page: bool = typer.Option(False, help="Emit the full HTML page instead of the fragment"),
    output: Path = typer.Option(None, help="Write HTML to this file"),
) -> None:
    """Fetch a document and print its rendering."""

    cfg = _config(api_base=api_base, route_base=route_base)
    try:
        target = parse_location(location, route_base=cfg.route_base)
    except ValueError as exc:
        print(f"[red]Invalid location: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    ctx = load(
        target,
        RenderContext(),
        api_base=cfg.api_base,
        link_origin=cfg.effective_link_origin(),
    )
    html = render_page(ctx, route_base=cfg.route_base) if page else ctx.content_html
    _emit(html, output)
    if ctx.failed:
        raise typer.Exit(code=1)


@app.command()
def highlight(
    path: Path = typer.Argument(..., help="Local .jsonl or .md file"),
    markdown: bool = typer.Option(False, "--markdown", help="Force the Markdown renderer"),
    output: Path = typer.Option(None, help="Write HTML to this file"),
) -> None:
    """Render a local file without fetching anything."""

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"[red]Cannot read {path}: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    is_markdown = markdown or path.suffix.lower() in MARKDOWN_SUFFIXES
    content_type = "text/markdown" if is_markdown else "application/x-ndjson"
    cfg = _config()
    _emit(render_body(text, content_type, link_origin=cfg.effective_link_origin()), output)


@app.command("version")
def version() -> None:
    """Print version."""

    print(__version__)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
