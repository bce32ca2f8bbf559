"""Encryption validity gate.

The gate owns the key and a validity flag. The flag only becomes true after
the key survives a known-answer round trip, and every write path asks the
gate before touching storage. A failed self-test leaves the service
readable but refuses all modifications.
"""

from __future__ import annotations

from personal_notes.errors import (
    ConfigurationError,
    DecryptionError,
    EncryptionInitError,
    EncryptionUnavailableError,
)
from personal_notes.logging import get_logger
from personal_notes.security.encryption import CipherEngine
from personal_notes.security.keys import DEFAULT_NOTES_LIMIT, KeyStore

log = get_logger("personal_notes.security.gate")

SELF_TEST_SENTINEL = "encryption-self-test"


class EncryptionGate:
    """Process-wide encryption context, constructed once and injected.

    Written only by :meth:`initialize`, which runs before the HTTP server
    starts accepting requests. Afterwards the state is read-only.
    """

    def __init__(self, key_store: KeyStore) -> None:
        self._key_store = key_store
        self._engine: CipherEngine | None = None
        self._valid = False

    def initialize(self) -> None:
        """Load the key and run the round-trip self-test.

        Raises:
            EncryptionInitError: If the key cannot be loaded or the self-test
                fails. The gate stays invalid.
        """
        if self._valid:
            return

        try:
            key = self._key_store.load_or_create_key()
        except ConfigurationError as e:
            raise EncryptionInitError(f"Failed to load encryption key: {e}") from e

        try:
            engine = CipherEngine(key)
        except ConfigurationError as e:
            raise EncryptionInitError(f"Invalid encryption key: {e}") from e

        try:
            sealed = engine.encrypt_string(SELF_TEST_SENTINEL)
            opened = engine.decrypt_string(sealed)
        except DecryptionError as e:
            raise EncryptionInitError(f"Encryption self-test failed: {e}") from e

        if opened != SELF_TEST_SENTINEL:
            raise EncryptionInitError("Encryption self-test failed: round trip mismatch")

        self._engine = engine
        self._valid = True
        log.info("encryption_gate_valid", settings_path=str(self._key_store.path))

    @property
    def is_valid(self) -> bool:
        return self._valid

    def require_valid(self) -> None:
        """Raise unless the self-test has passed."""
        if not self._valid:
            raise EncryptionUnavailableError()

    @property
    def engine(self) -> CipherEngine:
        """The verified cipher engine.

        Raises:
            EncryptionUnavailableError: If the gate is invalid.
        """
        self.require_valid()
        if self._engine is None:  # pragma: no cover
            raise RuntimeError("initialize() must set the engine with the flag")
        return self._engine

    @property
    def notes_limit(self) -> int:
        if not self._valid:
            return DEFAULT_NOTES_LIMIT
        return self._key_store.notes_limit
