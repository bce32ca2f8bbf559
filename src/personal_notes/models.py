"""Domain entities for notes and categories.

An entity instance is either a plaintext view (``sealed=False``) or the
stored view whose sensitive fields hold EncryptedField values
(``sealed=True``). Only :class:`~personal_notes.security.codec.FieldCodec`
moves an entity across that boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


@dataclass
class Category:
    """A note category."""

    ENTITY_TYPE: ClassVar[str] = "category"
    SENSITIVE_FIELDS: ClassVar[tuple[str, ...]] = ("name",)

    name: str
    id: str = ""
    sealed: bool = field(default=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class Note:
    """A personal note."""

    ENTITY_TYPE: ClassVar[str] = "note"
    SENSITIVE_FIELDS: ClassVar[tuple[str, ...]] = ("subject", "content", "tags")

    subject: str
    content: str = ""
    priority: str = ""
    tags: str = ""
    category_id: str | None = None
    id: str = ""
    sealed: bool = field(default=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject": self.subject,
            "content": self.content,
            "priority": self.priority,
            "tags": self.tags,
            "category_id": self.category_id,
        }
