"""SQLite persistence for notes, categories and the activity log."""

from personal_notes.storage.categories import CategoryRepository
from personal_notes.storage.database import Database
from personal_notes.storage.notes import NoteRepository

__all__ = ["CategoryRepository", "Database", "NoteRepository"]
