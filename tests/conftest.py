from __future__ import annotations

from pathlib import Path

import pytest

from prompt_viewer.config import CONFIG_ENV_OVERRIDES


@pytest.fixture(autouse=True)
def _isolate_viewer_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PROMPT_VIEWER_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("PROMPT_VIEWER_PID", str(tmp_path / "viewer.pid"))
    monkeypatch.delenv("PROMPT_VIEWER_NO_CACHE", raising=False)
    for env_var in CONFIG_ENV_OVERRIDES.values():
        monkeypatch.delenv(env_var, raising=False)
