from __future__ import annotations

import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import typer
from rich import print

from prompt_viewer.config import ViewerConfig
from prompt_viewer.viewer import _port_open, start_viewer


def _viewer_pid_path() -> Path:
    pid_path = os.environ.get("PROMPT_VIEWER_PID", "~/.prompt-viewer.pid")
    return Path(os.path.expanduser(pid_path))


def _read_pid(pid_path: Path) -> int | None:
    try:
        raw = pid_path.read_text().strip()
    except FileNotFoundError:
        return None
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _pid_running(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def _write_pid(pid_path: Path, pid: int) -> None:
    pid_path.parent.mkdir(parents=True, exist_ok=True)
    pid_path.write_text(f"{pid}\n")


def _clear_pid(pid_path: Path) -> None:
    try:
        pid_path.unlink()
    except FileNotFoundError:
        return


def _stop_running_viewer(pid_path: Path, host: str, port: int) -> None:
    pid = _read_pid(pid_path)
    if pid is None:
        if _port_open(host, port):
            print("[yellow]Viewer is running but no PID file was found[/yellow]")
        else:
            print("[yellow]No background viewer found[/yellow]")
        return
    if not _pid_running(pid):
        _clear_pid(pid_path)
        print("[yellow]Removed stale viewer PID file[/yellow]")
        return
    if not _port_open(host, port):
        _clear_pid(pid_path)
        print("[yellow]Removed stale viewer PID file (port not listening)[/yellow]")
        return
    os.kill(pid, signal.SIGTERM)
    deadline = time.monotonic() + 2.0
    while time.monotonic() < deadline:
        if not _pid_running(pid):
            break
        time.sleep(0.05)
    _clear_pid(pid_path)
    print(f"[green]Stopped viewer (pid {pid})[/green]")


def serve(
    *,
    config: ViewerConfig,
    background: bool,
    stop: bool,
    restart: bool,
    log_level: str = "INFO",
) -> None:
    """Run the viewer server (foreground or background)."""

    if stop and restart:
        print("[red]Use only one of --stop or --restart[/red]")
        raise typer.Exit(code=1)

    host = config.viewer_host
    port = config.viewer_port
    url = f"http://{host}:{port}{config.route_base}"
    pid_path = _viewer_pid_path()

    if stop or restart:
        _stop_running_viewer(pid_path, host, port)
        if stop:
            return
        background = True

    if background:
        pid = _read_pid(pid_path)
        if pid is not None:
            if _pid_running(pid) and _port_open(host, port):
                print(f"[yellow]Viewer already running (pid {pid})[/yellow]")
                return
            _clear_pid(pid_path)
        if _port_open(host, port):
            print(f"[yellow]Viewer already running at {url}[/yellow]")
            return
        cmd = [
            sys.executable,
            "-m",
            "prompt_viewer.cli",
            "serve",
            "--host",
            host,
            "--port",
            str(port),
            "--api-base",
            config.api_base,
            "--route-base",
            config.route_base,
            "--log-level",
            log_level,
        ]
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
            env=os.environ.copy(),
        )
        _write_pid(pid_path, proc.pid)
        print(f"[green]Viewer started in background (pid {proc.pid}) at {url}[/green]")
        return

    if _port_open(host, port):
        print(f"[yellow]Viewer already running at {url}[/yellow]")
        return
    print(f"[green]Viewer running at {url}[/green]")
    start_viewer(config, background=False)
