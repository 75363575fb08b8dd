from pathlib import Path

import pytest

from sigilgen.core.runtime_config import set_config_path


@pytest.fixture(autouse=True)
def _isolated_runtime_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """作業ディレクトリや HOME の config.yaml を拾わず、同梱の既定値だけで動かす。"""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    set_config_path(None)
    yield
    set_config_path(None)
