"""Tests for structured logging setup."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from personal_notes.logging import get_logger, redact_sensitive, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest left it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    def test_console_only_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_TO_FILE", "false")

        setup_logging()

        assert not any(isinstance(h, RotatingFileHandler) for h in logging.getLogger().handlers)
        assert logging.getLogger("aiohttp.access").level == logging.WARNING

    def test_file_logging(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("LOG_TO_FILE", "true")
        monkeypatch.setenv("LOG_DIRECTORY", str(tmp_path / "logs"))
        monkeypatch.setenv("LOG_FILE_PREFIX", "notes")

        setup_logging()
        get_logger("personal_notes.test").warning("file_logging_check")

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        for handler in file_handlers:
            handler.flush()
        assert "file_logging_check" in (tmp_path / "logs" / "notes.log").read_text()


class TestRedactSensitive:
    def test_sensitive_values_replaced(self) -> None:
        event = {"event": "note_created", "subject": "diary", "encryption_key": "abc", "id": "1"}

        result = redact_sensitive(None, "info", event)

        assert result == {
            "event": "note_created",
            "subject": "[redacted]",
            "encryption_key": "[redacted]",
            "id": "1",
        }

    def test_other_events_untouched(self) -> None:
        event = {"event": "database_initialized", "path": "data/db.sqlite3"}
        assert redact_sensitive(None, "info", dict(event)) == event
