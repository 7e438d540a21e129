"""Shared fixtures: an isolated config dir and data dir per test."""

import json

import pytest


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point SCFV_PLAN_CONFIG_PATH and data_dir at tmp_path."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"

    config_dir.mkdir()
    data_dir.mkdir()

    monkeypatch.setenv("SCFV_PLAN_CONFIG_PATH", str(config_dir))

    settings = {"data_dir": str(data_dir)}
    (config_dir / "settings.json").write_text(json.dumps(settings))

    return {
        "config_dir": config_dir,
        "data_dir": data_dir,
        "projects_dir": data_dir / "projects",
    }
