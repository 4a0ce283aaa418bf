"""Unit tests for settings and logging configuration."""

from typing import Any

import pytest
import structlog
from pydantic import ValidationError

from callcoach.core.config import Settings
from callcoach.core.logging import configure_logging


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: Any) -> None:
        """Test engine defaults."""
        monkeypatch.delenv("CALL_MAX_INTERACTIONS", raising=False)
        monkeypatch.delenv("MAX_UTTERANCE_LENGTH", raising=False)

        config = Settings(_env_file=None)

        assert config.CALL_MAX_INTERACTIONS == 10
        assert config.MAX_UTTERANCE_LENGTH == 1000
        assert config.ENABLE_PROMETHEUS_METRICS is True

    def test_env_override(self, monkeypatch: Any) -> None:
        """Test values are read from the environment."""
        monkeypatch.setenv("CALL_MAX_INTERACTIONS", "4")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = Settings(_env_file=None)

        assert config.CALL_MAX_INTERACTIONS == 4
        assert config.LOG_LEVEL == "DEBUG"

    def test_invalid_log_level(self, monkeypatch: Any) -> None:
        """Test unknown log levels are rejected."""
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_json_renderer(self) -> None:
        """Test JSON rendering is selectable."""
        configure_logging(level="warning", json=True)

        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self) -> None:
        """Test the console renderer is the default."""
        configure_logging(level="INFO", json=False)

        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
