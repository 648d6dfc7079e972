"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest
import structlog
from structlog.testing import capture_logs

from tabletop_prep.core.config import Settings
from tabletop_prep.core.logging import (
    APP_NAME,
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    session_logger,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults around each test."""
    structlog.reset_defaults()
    yield
    clear_context()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output_carries_app_name(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that JSON lines include level, event and app name."""
        configure_logging(level="INFO", json_format=True)
        get_logger("tests.json").info("Session compiled", enemy="Goblin")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "Session compiled"
        assert entry["enemy"] == "Goblin"
        assert entry["level"] == "info"
        assert entry["app"] == APP_NAME

    def test_level_filters_lower_events(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that events below the configured level are dropped."""
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("tests.level")
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_root_logger_level(self) -> None:
        """Test that the standard library root logger follows the level."""
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_noisy_loggers_quietened(self) -> None:
        """Test that HTTP client loggers are held at WARNING or above."""
        configure_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_configure_from_settings(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test configuring from Settings values."""
        configure_from_settings(Settings(log_level="ERROR", json_logs=True))
        logger = get_logger("tests.settings")
        logger.warning("quiet")
        logger.error("loud")

        out = capsys.readouterr().out
        assert "quiet" not in out
        assert json.loads(out.strip().splitlines()[-1])["event"] == "loud"


class TestContext:
    """Tests for bound logging context."""

    def test_session_logger_binds_id(self) -> None:
        """Test that session loggers tag every event with the session id."""
        with capture_logs() as logs:
            session_logger("tests.session", "abc123").info("Offer selected", category="enemy")

        assert logs == [
            {
                "event": "Offer selected",
                "category": "enemy",
                "session_id": "abc123",
                "log_level": "info",
            }
        ]

    def test_bind_and_clear_context(self) -> None:
        """Test that context variables can be bound and cleared."""
        bind_context(session_id="abc123", user="gm")
        assert structlog.contextvars.get_contextvars() == {"session_id": "abc123", "user": "gm"}

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
