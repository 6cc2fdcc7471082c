from __future__ import annotations

import os

import pytest
from hypothesis import HealthCheck, settings

import streamchat_cli.config as cfg_mod
from streamchat.config import reset_config

# The isolation fixture below is autouse, so every @given test sees a
# function-scoped fixture. It carries no per-example state.
settings.register_profile("streamchat", suppress_health_check=[HealthCheck.function_scoped_fixture])
settings.load_profile("streamchat")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep real environment variables and ~/.streamchat out of every test."""
    for name in list(os.environ):
        if name.startswith("STREAMCHAT_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr(cfg_mod, "GLOBAL_CONFIG_PATH", tmp_path / "home" / "config.yaml")
    reset_config()
    yield
    reset_config()
