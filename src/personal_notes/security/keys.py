"""Encryption key persistence in the settings record.

The 256-bit key is generated once from the OS CSPRNG and stored base64
encoded in a small JSON settings file next to the other persisted settings.
Subsequent starts load the same bytes back.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ValidationError

from personal_notes.errors import ConfigurationError
from personal_notes.logging import get_logger
from personal_notes.security.encryption import KEY_SIZE

log = get_logger("personal_notes.security.keys")

DEFAULT_NOTES_LIMIT = 10
SETTINGS_FILE_MODE = 0o600


class SettingsRecord(BaseModel):
    """On-disk shape of the settings record."""

    encryption_key: str = ""
    notes_limit: int = DEFAULT_NOTES_LIMIT

    @property
    def effective_notes_limit(self) -> int:
        """Notes limit, never less than 1."""
        if self.notes_limit <= 0:
            return DEFAULT_NOTES_LIMIT
        return self.notes_limit


class KeyStore:
    """Loads the encryption key from the settings record, creating it if absent."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        self._record: SettingsRecord | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def notes_limit(self) -> int:
        """Notes limit from the last loaded record (default when nothing loaded)."""
        if self._record is None:
            return DEFAULT_NOTES_LIMIT
        return self._record.effective_notes_limit

    def load_record(self) -> SettingsRecord | None:
        """Read the settings record, or return None if the file does not exist.

        Raises:
            ConfigurationError: If the file is unreadable or not a valid record.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Failed to read settings file {self._path}: {e}") from e

        try:
            return SettingsRecord.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(f"Settings file {self._path} is malformed: {e}") from e

    def load_or_create_key(self) -> bytes:
        """Return the persisted key, generating and saving one if absent.

        Returns:
            The 32-byte encryption key.

        Raises:
            ConfigurationError: If the stored key is not valid base64 or does
                not decode to exactly 32 bytes.
        """
        record = self.load_record()

        if record is None or not record.encryption_key:
            notes_limit = record.effective_notes_limit if record else DEFAULT_NOTES_LIMIT
            return self._create_key(notes_limit)

        try:
            key = base64.b64decode(record.encryption_key.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            log.error("encryption_key_invalid", path=str(self._path), reason="malformed base64")
            raise ConfigurationError("Stored encryption key is not valid base64") from e

        if len(key) != KEY_SIZE:
            log.error(
                "encryption_key_invalid",
                path=str(self._path),
                reason="wrong length",
                expected=KEY_SIZE,
                actual=len(key),
            )
            raise ConfigurationError(
                f"Stored encryption key must decode to {KEY_SIZE} bytes, got {len(key)}"
            )

        self._record = record
        log.debug("encryption_key_loaded", path=str(self._path))
        return key

    def _create_key(self, notes_limit: int) -> bytes:
        """Generate a new key and persist it with the other settings."""
        key = os.urandom(KEY_SIZE)
        record = SettingsRecord(
            encryption_key=base64.b64encode(key).decode("ascii"),
            notes_limit=notes_limit,
        )
        self._write_record(record)
        self._record = record
        log.info("settings_record_created", path=str(self._path))
        return key

    def _write_record(self, record: SettingsRecord) -> None:
        """Atomically write the record with owner-only permissions."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(record.model_dump(), indent=4)

        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".settings-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.chmod(tmp_name, SETTINGS_FILE_MODE)
            os.replace(tmp_name, self._path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise ConfigurationError(f"Failed to write settings file {self._path}: {e}") from e
