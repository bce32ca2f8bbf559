"""Pydantic request/response models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from personal_notes.models import Category, Note

# ---------------------------------------------------------------------------
# Category models
# ---------------------------------------------------------------------------


class CategoryIn(BaseModel):
    """Request body for creating or renaming a category."""

    name: str = Field(default="", max_length=500)

    def to_entity(self, category_id: str = "") -> Category:
        return Category(id=category_id, name=self.name)


# ---------------------------------------------------------------------------
# Note models
# ---------------------------------------------------------------------------


class NoteIn(BaseModel):
    """Request body for creating or replacing a note."""

    subject: str = Field(default="", max_length=1000)
    content: str = ""
    priority: str = Field(default="", max_length=50)
    tags: str = ""
    category_id: str | None = None

    @field_validator("category_id")
    @classmethod
    def blank_category_is_none(cls, v: str | None) -> str | None:
        """Treat an empty category id as no category."""
        if v is not None and not v.strip():
            return None
        return v

    def to_entity(self, note_id: str = "") -> Note:
        return Note(
            id=note_id,
            subject=self.subject,
            content=self.content,
            priority=self.priority,
            tags=self.tags,
            category_id=self.category_id,
        )


# ---------------------------------------------------------------------------
# Key generator
# ---------------------------------------------------------------------------


class KeyGenerateRequest(BaseModel):
    """Request body for deriving a display key from text."""

    text: str = ""


class EncryptionStatus(BaseModel):
    """Response body of the encryption status endpoint."""

    encryption_valid: bool
    message: str
