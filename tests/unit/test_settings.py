"""Tests for settings and logging setup."""

import pytest
from loguru import logger

import settings
from app.errors import ConfigError
from settings.logging import setup_logging


class TestJwtSecret:
    def test_missing(self, monkeypatch):
        monkeypatch.delenv("AGENCY_JWT_SECRET", raising=False)
        monkeypatch.setattr(settings, "JWT_SECRET", None)
        with pytest.raises(ConfigError):
            settings.require_jwt_secret()

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("AGENCY_JWT_SECRET", "from-env")
        assert settings.require_jwt_secret() == "from-env"


class TestLogging:
    def test_console_only(self, tmp_path, monkeypatch):
        monkeypatch.setattr("settings.logging.LOG_DIR", tmp_path / "logs")
        setup_logging(level="debug", to_file=False)
        assert not (tmp_path / "logs").exists()

    def test_file_sink(self, tmp_path, monkeypatch):
        monkeypatch.setattr("settings.logging.LOG_DIR", tmp_path / "logs")
        setup_logging(to_file=True, serialize=True)
        logger.info("Cache cleared")
        logger.complete()
        logger.remove()
        files = list((tmp_path / "logs").glob("agency_*.jsonl"))
        assert len(files) == 1
        assert "Cache cleared" in files[0].read_text()
