"""Exception hierarchy for the personal notes service."""

from __future__ import annotations

ENCRYPTION_UNAVAILABLE_MESSAGE = (
    "Encryption system is not properly initialized. "
    "Data modification is disabled for security reasons."
)


class NotesError(Exception):
    """Base exception for personal notes errors."""


class ConfigurationError(NotesError):
    """Key material or the settings record is malformed."""


class EncryptionInitError(NotesError):
    """The encryption self-test failed at startup."""


class EncryptionUnavailableError(NotesError):
    """A write was attempted while the encryption gate is invalid."""

    def __init__(self, message: str = ENCRYPTION_UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)


class DecryptionError(NotesError):
    """A stored value could not be decoded or failed authentication."""


class NotFoundError(NotesError):
    """The requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: str | int) -> None:
        super().__init__(f"{entity_type} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(NotesError):
    """Request input failed validation."""
