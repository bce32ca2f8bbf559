"""Field-level encryption policy for notes and categories.

Which attributes are sensitive is declared once on each model class
(``SENSITIVE_FIELDS``). Handlers and repositories never call the cipher
directly; they pass whole entities through :class:`FieldCodec`.

Bulk reads use a drop policy: an entity with any field that fails to decode
or authenticate is left out of the result and a warning is logged. Legacy
plaintext rows therefore never surface as if they were decrypted content.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from typing import TypeVar

from personal_notes.errors import DecryptionError, EncryptionUnavailableError
from personal_notes.logging import get_logger
from personal_notes.models import Category, Note
from personal_notes.security.gate import EncryptionGate

log = get_logger("personal_notes.security.codec")

Entity = TypeVar("Entity", Note, Category)


class FieldCodec:
    """Encrypts sensitive fields on write and decrypts them on read."""

    def __init__(self, gate: EncryptionGate) -> None:
        self._gate = gate

    def encrypt_fields(self, entity: Entity) -> Entity:
        """Return a sealed copy of ``entity``.

        The gate is checked before any field is touched, and the input is
        never mutated, so a failure cannot leave a half-encrypted entity.

        Raises:
            EncryptionUnavailableError: If the gate is invalid.
            ValueError: If the entity is already sealed.
        """
        self._gate.require_valid()
        if entity.sealed:
            raise ValueError(f"{entity.ENTITY_TYPE} {entity.id!r} is already encrypted")

        engine = self._gate.engine
        changes: dict[str, object] = {
            name: engine.encrypt_string(getattr(entity, name) or "")
            for name in entity.SENSITIVE_FIELDS
        }
        return dataclasses.replace(entity, sealed=True, **changes)

    def decrypt_fields(self, entity: Entity) -> Entity:
        """Return a plaintext copy of a sealed entity (strict).

        Raises:
            DecryptionError: If any sensitive field fails to decrypt.
            EncryptionUnavailableError: If the gate is invalid.
            ValueError: If the entity is not sealed.
        """
        if not entity.sealed:
            raise ValueError(f"{entity.ENTITY_TYPE} {entity.id!r} is not encrypted")

        engine = self._gate.engine
        changes: dict[str, object] = {}
        for name in entity.SENSITIVE_FIELDS:
            try:
                changes[name] = engine.decrypt_string(getattr(entity, name) or "")
            except DecryptionError as e:
                raise DecryptionError(
                    f"Failed to decrypt {name} of {entity.ENTITY_TYPE} {entity.id}: {e}"
                ) from e
        return dataclasses.replace(entity, sealed=False, **changes)

    def decrypt_fields_lenient(self, entities: Iterable[Entity]) -> list[Entity]:
        """Decrypt a listing, dropping entities that fail to decrypt."""
        entities = list(entities)
        if not self._gate.is_valid:
            if entities:
                log.warning("decryption_unavailable", skipped=len(entities))
            return []

        result: list[Entity] = []
        for entity in entities:
            try:
                result.append(self.decrypt_fields(entity))
            except DecryptionError:
                log.warning(
                    "decryption_skipped",
                    entity_type=entity.ENTITY_TYPE,
                    entity_id=entity.id,
                )
        return result

    def safe_decrypt(self, value: str | None) -> str:
        """Best-effort decrypt that never raises.

        Returns the input unchanged when the gate is invalid, the value is
        empty, or decryption fails for any reason. Only for display paths
        such as activity-log descriptions.
        """
        if not value:
            return value or ""
        try:
            return self._gate.engine.decrypt_string(value)
        except (DecryptionError, EncryptionUnavailableError):
            return value
