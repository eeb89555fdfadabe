from __future__ import annotations

import json
from pathlib import Path

import pytest

from prompt_viewer.config import (
    ViewerConfig,
    get_config_path,
    get_env_overrides,
    load_config,
    read_config_file,
)


def test_get_config_path_uses_env(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "custom.json"
    monkeypatch.setenv("PROMPT_VIEWER_CONFIG", str(target))
    assert get_config_path() == target


def test_read_config_file_rejects_invalid_json(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("{not-json}")
    with pytest.raises(ValueError, match="invalid config json"):
        read_config_file(config_path)


def test_read_config_file_rejects_non_object(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2]")
    with pytest.raises(ValueError, match="config must be an object"):
        read_config_file(config_path)


def test_read_config_file_missing_or_empty(tmp_path: Path) -> None:
    assert read_config_file(tmp_path / "missing.json") == {}
    empty = tmp_path / "empty.json"
    empty.write_text("   ")
    assert read_config_file(empty) == {}


def test_load_config_defaults() -> None:
    cfg = load_config()
    assert cfg == ViewerConfig()
    assert cfg.route_base == "/h/"
    assert cfg.effective_link_origin() == "http://127.0.0.1:38990"


def test_load_config_reads_file(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "api_base": "https://api.example",
                "route_base": "view",
                "viewer_port": "4000",
                "link_origin": "https://docs.example",
                "request_logs": True,
                "unknown": "ignored",
            }
        )
    )

    cfg = load_config(config_path)

    assert cfg.api_base == "https://api.example"
    assert cfg.route_base == "/view/"
    assert cfg.viewer_port == 4000
    assert cfg.request_logs is True
    assert cfg.effective_link_origin() == "https://docs.example"


def test_load_config_env_overrides_file(tmp_path: Path, monkeypatch) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"api_base": "https://file.example", "viewer_port": 4000}))
    monkeypatch.setenv("PROMPT_VIEWER_API_BASE", "https://env.example")
    monkeypatch.setenv("PROMPT_VIEWER_PORT", "5000")
    monkeypatch.setenv("PROMPT_VIEWER_LOGS", "yes")

    cfg = load_config(config_path)

    assert cfg.api_base == "https://env.example"
    assert cfg.viewer_port == 5000
    assert cfg.request_logs is True
    assert get_env_overrides() == {
        "api_base": "https://env.example",
        "viewer_port": "5000",
        "request_logs": "yes",
    }


def test_load_config_ignores_invalid_file(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("{broken")
    assert load_config(config_path) == ViewerConfig()


def test_load_config_warns_on_invalid_int(monkeypatch) -> None:
    monkeypatch.setenv("PROMPT_VIEWER_PORT", "not-a-port")
    with pytest.warns(RuntimeWarning, match="Invalid int for viewer_port"):
        cfg = load_config()
    assert cfg.viewer_port == 38990


def test_load_config_warns_on_invalid_string(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"api_base": 12}))
    with pytest.warns(RuntimeWarning, match="Invalid string for api_base"):
        cfg = load_config(config_path)
    assert cfg.api_base == "http://127.0.0.1:3000"
