"""
Tests for structlog configuration.
"""

from __future__ import annotations

import importlib
import json

import pytest
import structlog

import app.main
from app.core.config import get_settings
from app.core.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)


class TestConfigureLogging:
    @pytest.mark.parametrize("level", ["debug", "info", "warning", "error", "INFO"])
    @pytest.mark.parametrize("fmt", ["json", "console"])
    def test_accepts_levels_and_formats(self, level, fmt):
        configure_logging(level, fmt)
        structlog.get_logger().info("logging.configured")

    def test_json_output(self, capsys):
        configure_logging("info", "json")
        structlog.get_logger().info("thing.happened", answer=42)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "thing.happened"
        assert record["answer"] == 42
        assert record["level"] == "info"

    def test_level_filters(self, capsys):
        configure_logging("warning", "json")
        log = structlog.get_logger()
        log.info("quiet.event")
        log.warning("loud.event")

        out = capsys.readouterr().out
        assert "quiet.event" not in out
        assert "loud.event" in out


class TestAppImport:
    @pytest.mark.parametrize("fmt", ["console", "json"])
    def test_app_builds_with_log_format(self, monkeypatch, fmt):
        monkeypatch.setenv("PARLEY_LOG_FORMAT", fmt)
        monkeypatch.setenv("PARLEY_LOG_LEVEL", "debug")
        get_settings.cache_clear()
        try:
            module = importlib.reload(app.main)
            assert get_settings().log_format == fmt
            assert any(route.path == "/api/search" for route in module.app.routes)
        finally:
            monkeypatch.undo()
            get_settings.cache_clear()
            importlib.reload(app.main)
