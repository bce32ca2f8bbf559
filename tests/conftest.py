"""Pytest fixtures for personal notes tests."""

import base64
import json
import os
from pathlib import Path

import pytest

from personal_notes.api.server import NotesAPIServer
from personal_notes.security import EncryptionGate, FieldCodec, KeyStore
from personal_notes.storage import Database


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Clear settings cache before each test."""
    from personal_notes.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def key() -> bytes:
    """Generate a random 256-bit key for testing."""
    return os.urandom(32)


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    """Path for a settings record that does not exist yet."""
    return tmp_path / "settings.json"


@pytest.fixture
def write_settings(settings_path: Path):
    """Write an arbitrary settings record to ``settings_path``."""

    def _write(**record) -> Path:
        settings_path.write_text(json.dumps(record))
        return settings_path

    return _write


@pytest.fixture
def valid_gate(settings_path: Path) -> EncryptionGate:
    """Gate initialized with a freshly generated key."""
    gate = EncryptionGate(KeyStore(settings_path))
    gate.initialize()
    return gate


@pytest.fixture
def invalid_gate(write_settings) -> EncryptionGate:
    """Gate whose settings record holds a 16-byte key, never initialized."""
    path = write_settings(encryption_key=base64.b64encode(os.urandom(16)).decode())
    return EncryptionGate(KeyStore(path))


@pytest.fixture
def codec(valid_gate: EncryptionGate) -> FieldCodec:
    return FieldCodec(valid_gate)


@pytest.fixture
def database(tmp_path: Path) -> Database:
    """SQLite database in a temp directory."""
    return Database(tmp_path / "data" / "db.sqlite3")


@pytest.fixture
def make_server(database: Database):
    """Factory for a NotesAPIServer around a given gate."""

    def _make(gate: EncryptionGate, **kwargs) -> NotesAPIServer:
        return NotesAPIServer(gate, database, **kwargs)

    return _make
