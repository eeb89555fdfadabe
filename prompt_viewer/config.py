from __future__ import annotations

import json
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .target import DEFAULT_ROUTE_BASE, normalize_route_base

DEFAULT_CONFIG_PATH = Path("~/.config/prompt-viewer/config.json").expanduser()

CONFIG_ENV_OVERRIDES = {
    "api_base": "PROMPT_VIEWER_API_BASE",
    "route_base": "PROMPT_VIEWER_ROUTE_BASE",
    "viewer_host": "PROMPT_VIEWER_HOST",
    "viewer_port": "PROMPT_VIEWER_PORT",
    "link_origin": "PROMPT_VIEWER_LINK_ORIGIN",
    "request_logs": "PROMPT_VIEWER_LOGS",
}

_INT_KEYS = {"viewer_port"}
_BOOL_KEYS = {"request_logs"}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("PROMPT_VIEWER_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class ViewerConfig:
    api_base: str = "http://127.0.0.1:3000"
    route_base: str = DEFAULT_ROUTE_BASE
    viewer_host: str = "127.0.0.1"
    viewer_port: int = 38990
    # Origin that relative Markdown links resolve against; defaults to the viewer itself.
    link_origin: str | None = None
    request_logs: bool = False

    def effective_link_origin(self) -> str:
        if self.link_origin:
            return self.link_origin
        return f"http://{self.viewer_host}:{self.viewer_port}"


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    if value.lower() in {"1", "true", "yes", "on"}:
        return True
    if value.lower() in {"0", "false", "off", "no"}:
        return False
    return default


def _parse_int(value: object, default: int, *, key: str) -> int:
    if value is None:
        return default
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default


def _coerce_bool(value: object, default: bool, *, key: str) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return _parse_bool(value, default)
    warnings.warn(f"Invalid bool for {key}: {value!r}", RuntimeWarning, stacklevel=2)
    return default


def load_config(path: Path | None = None) -> ViewerConfig:
    cfg = ViewerConfig()
    try:
        data = read_config_file(path)
    except ValueError:
        data = {}
    cfg = _apply_dict(cfg, data)
    cfg = _apply_dict(cfg, get_env_overrides())
    cfg.route_base = normalize_route_base(cfg.route_base)
    return cfg


def _apply_dict(cfg: ViewerConfig, data: dict[str, Any]) -> ViewerConfig:
    for key, value in data.items():
        if not hasattr(cfg, key):
            continue
        if key in _INT_KEYS:
            setattr(cfg, key, _parse_int(value, getattr(cfg, key), key=key))
            continue
        if key in _BOOL_KEYS:
            setattr(cfg, key, _coerce_bool(value, getattr(cfg, key), key=key))
            continue
        if isinstance(value, str):
            setattr(cfg, key, value)
            continue
        if value is None and key == "link_origin":
            cfg.link_origin = None
            continue
        warnings.warn(f"Invalid string for {key}: {value!r}", RuntimeWarning, stacklevel=2)
    return cfg
