"""AES-256-GCM sealing of individual field values.

Each seal draws a fresh random nonce, which is prepended to the ciphertext.
The string helpers base64-encode the combined nonce+ciphertext+tag so the
result can live in a TEXT column.
"""

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from personal_notes.errors import ConfigurationError, DecryptionError

# AES-256-GCM parameters
NONCE_SIZE = 12  # 96-bit nonce (recommended for GCM)
KEY_SIZE = 32  # 256-bit key
TAG_SIZE = 16  # 128-bit authentication tag


def _check_key(key: bytes) -> None:
    if len(key) != KEY_SIZE:
        raise ConfigurationError(f"Key must be exactly {KEY_SIZE} bytes, got {len(key)}")


class CipherEngine:
    """Seals and opens values with AES-256-GCM under a single key.

    Holds no mutable state beyond the key, so one instance can be shared by
    any number of concurrent requests.
    """

    def __init__(self, key: bytes) -> None:
        """Initialize the engine.

        Args:
            key: 256-bit (32-byte) encryption key.

        Raises:
            ConfigurationError: If key is not exactly 32 bytes.
        """
        _check_key(key)
        self._aesgcm = AESGCM(key)

    def seal(self, plaintext: bytes) -> bytes:
        """Encrypt bytes and return ``nonce || ciphertext || tag``."""
        nonce = os.urandom(NONCE_SIZE)
        return nonce + self._aesgcm.encrypt(nonce, plaintext, None)

    def open(self, blob: bytes) -> bytes:
        """Authenticate and decrypt a sealed blob.

        Args:
            blob: Bytes produced by :meth:`seal`.

        Returns:
            The original plaintext bytes.

        Raises:
            DecryptionError: If the blob is truncated, tampered with, or was
                sealed under a different key.
        """
        if len(blob) < NONCE_SIZE:
            raise DecryptionError("Ciphertext too short")
        if len(blob) < NONCE_SIZE + TAG_SIZE:
            raise DecryptionError("Ciphertext missing authentication tag")

        nonce, ciphertext = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
        try:
            return self._aesgcm.decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise DecryptionError("Authentication failed") from e

    def encrypt_string(self, plaintext: str) -> str:
        """Encrypt a string into a base64 EncryptedField value."""
        sealed = self.seal(plaintext.encode("utf-8"))
        return base64.b64encode(sealed).decode("ascii")

    def decrypt_string(self, encrypted: str) -> str:
        """Decrypt a base64 EncryptedField value back to text.

        Raises:
            DecryptionError: If the value is not valid base64, fails
                authentication, or does not decode as UTF-8.
        """
        try:
            blob = base64.b64decode(encrypted.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise DecryptionError(f"Value is not valid base64: {e}") from e

        plaintext = self.open(blob)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted value is not valid UTF-8") from e

    @staticmethod
    def is_encrypted(value: str) -> bool:
        """Check if a value looks like an EncryptedField.

        This is a heuristic check based on base64 format and length.
        It's not foolproof but helps detect unencrypted legacy data.
        """
        try:
            decoded = base64.b64decode(value.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError):
            return False
        return len(decoded) >= NONCE_SIZE + TAG_SIZE


def seal(plaintext: bytes, key: bytes) -> bytes:
    """Seal ``plaintext`` under ``key`` (fresh nonce per call)."""
    return CipherEngine(key).seal(plaintext)


def open_sealed(blob: bytes, key: bytes) -> bytes:
    """Open a blob produced by :func:`seal`."""
    return CipherEngine(key).open(blob)
