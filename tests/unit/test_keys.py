"""Unit tests for encryption key persistence."""

import base64
import json
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from personal_notes.errors import ConfigurationError
from personal_notes.security.encryption import KEY_SIZE
from personal_notes.security.keys import (
    DEFAULT_NOTES_LIMIT,
    SETTINGS_FILE_MODE,
    KeyStore,
    SettingsRecord,
)


class TestSettingsRecord:
    def test_defaults(self) -> None:
        record = SettingsRecord()
        assert record.encryption_key == ""
        assert record.notes_limit == DEFAULT_NOTES_LIMIT

    @pytest.mark.parametrize("limit", [0, -5])
    def test_non_positive_limit_falls_back(self, limit: int) -> None:
        assert SettingsRecord(notes_limit=limit).effective_notes_limit == DEFAULT_NOTES_LIMIT

    def test_positive_limit_kept(self) -> None:
        assert SettingsRecord(notes_limit=25).effective_notes_limit == 25


class TestKeyStore:
    """Tests for KeyStore class."""

    def test_creates_record_when_missing(self, settings_path: Path) -> None:
        """A missing settings file gets a fresh key."""
        assert not settings_path.exists()

        key = KeyStore(settings_path).load_or_create_key()

        assert len(key) == KEY_SIZE
        assert settings_path.exists()
        data = json.loads(settings_path.read_text())
        assert base64.b64decode(data["encryption_key"]) == key
        assert data["notes_limit"] == DEFAULT_NOTES_LIMIT

    def test_key_persists_across_loads(self, settings_path: Path) -> None:
        """Two stores over the same file see identical key bytes."""
        first = KeyStore(settings_path).load_or_create_key()
        second = KeyStore(settings_path).load_or_create_key()

        assert first == second
        data = json.loads(settings_path.read_text())
        assert len(base64.b64decode(data["encryption_key"])) == KEY_SIZE

    def test_file_mode_is_owner_only(self, settings_path: Path) -> None:
        KeyStore(settings_path).load_or_create_key()

        mode = stat.S_IMODE(os.stat(settings_path).st_mode)
        assert mode == SETTINGS_FILE_MODE

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "settings.json"
        KeyStore(path).load_or_create_key()
        assert path.exists()

    def test_no_temp_files_left_behind(self, settings_path: Path) -> None:
        KeyStore(settings_path).load_or_create_key()
        assert [p.name for p in settings_path.parent.iterdir()] == ["settings.json"]

    def test_loads_existing_key(self, write_settings, key: bytes) -> None:
        path = write_settings(encryption_key=base64.b64encode(key).decode(), notes_limit=3)

        store = KeyStore(path)
        assert store.load_or_create_key() == key
        assert store.notes_limit == 3

    def test_empty_key_regenerates_and_keeps_limit(self, write_settings) -> None:
        path = write_settings(encryption_key="", notes_limit=42)

        key = KeyStore(path).load_or_create_key()

        data = json.loads(path.read_text())
        assert base64.b64decode(data["encryption_key"]) == key
        assert data["notes_limit"] == 42

    def test_malformed_key_raises(self, write_settings) -> None:
        path = write_settings(encryption_key="not base64!!!")

        with pytest.raises(ConfigurationError, match="not valid base64"):
            KeyStore(path).load_or_create_key()

    def test_wrong_length_key_raises(self, write_settings) -> None:
        path = write_settings(encryption_key=base64.b64encode(os.urandom(16)).decode())

        with pytest.raises(ConfigurationError, match="32 bytes, got 16"):
            KeyStore(path).load_or_create_key()

    def test_invalid_key_is_not_overwritten(self, write_settings) -> None:
        """A corrupt key is reported, never silently replaced."""
        bad = base64.b64encode(os.urandom(16)).decode()
        path = write_settings(encryption_key=bad)

        with pytest.raises(ConfigurationError):
            KeyStore(path).load_or_create_key()

        assert json.loads(path.read_text())["encryption_key"] == bad

    def test_bad_json_raises(self, settings_path: Path) -> None:
        settings_path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="malformed"):
            KeyStore(settings_path).load_or_create_key()

    def test_non_utf8_file_raises(self, settings_path: Path) -> None:
        settings_path.write_bytes(b'{"encryption_key": "\xff\xfe"}')

        with pytest.raises(ConfigurationError, match="Failed to read"):
            KeyStore(settings_path).load_or_create_key()

    def test_wrong_field_type_raises(self, write_settings) -> None:
        path = write_settings(encryption_key="", notes_limit="many")

        with pytest.raises(ConfigurationError, match="malformed"):
            KeyStore(path).load_record()

    def test_load_record_missing_returns_none(self, settings_path: Path) -> None:
        assert KeyStore(settings_path).load_record() is None

    def test_notes_limit_default_before_load(self, settings_path: Path) -> None:
        assert KeyStore(settings_path).notes_limit == DEFAULT_NOTES_LIMIT

    def test_write_failure_raises_configuration_error(self, settings_path: Path) -> None:
        with (
            patch("personal_notes.security.keys.os.replace", side_effect=OSError("disk full")),
            pytest.raises(ConfigurationError, match="Failed to write"),
        ):
            KeyStore(settings_path).load_or_create_key()

        assert not settings_path.exists()

    def test_invalid_key_logged(self, write_settings) -> None:
        path = write_settings(encryption_key=base64.b64encode(os.urandom(8)).decode())

        with (
            patch("personal_notes.security.keys.log") as mock_log,
            pytest.raises(ConfigurationError),
        ):
            KeyStore(path).load_or_create_key()

        mock_log.error.assert_called_once()
        assert mock_log.error.call_args.args[0] == "encryption_key_invalid"
