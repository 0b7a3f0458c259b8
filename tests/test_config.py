"""
Tests for environment-driven configuration.
"""

from pathlib import Path

import pytest

from src.database import LOCAL_DB_PATH
from src.gemini.client import MODEL_NAME
from src.session import AppConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "GEMINI_API_KEY",
        "GREETINGS_DB_PATH",
        "GREETINGS_MODEL",
        "GREETINGS_BATCH_DELAY",
        "GREETINGS_LOG_DIR",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = AppConfig.from_env()
    assert config.gemini_api_key is None
    assert config.model == MODEL_NAME
    assert config.db_path == LOCAL_DB_PATH
    assert config.batch_delay == 1.0


def test_values_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("GEMINI_API_KEY", "k")
    monkeypatch.setenv("GREETINGS_DB_PATH", str(tmp_path / "g.db"))
    monkeypatch.setenv("GREETINGS_BATCH_DELAY", "0")
    monkeypatch.setenv("GREETINGS_LOG_DIR", str(tmp_path / "logs"))

    config = AppConfig.from_env()

    assert config.gemini_api_key == "k"
    assert config.db_path == tmp_path / "g.db"
    assert config.batch_delay == 0.0
    assert isinstance(config.log_dir, Path)


def test_bad_delay_is_rejected(monkeypatch):
    monkeypatch.setenv("GREETINGS_BATCH_DELAY", "soon")
    with pytest.raises(ValueError):
        AppConfig.from_env()


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        AppConfig(batch_delay=-1)
