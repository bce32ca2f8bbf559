"""Note repository."""

from __future__ import annotations

import sqlite3
from typing import Any
from uuid import uuid4

from personal_notes.errors import NotFoundError, ValidationError
from personal_notes.logging import get_logger
from personal_notes.models import Note
from personal_notes.security.encryption import CipherEngine
from personal_notes.storage.database import Database

log = get_logger("personal_notes.storage.notes")

_COLUMNS = "id, subject, content, priority, tags, category_id"


def _row_to_note(row: sqlite3.Row) -> Note:
    return Note(
        id=row["id"],
        subject=row["subject"],
        content=row["content"] or "",
        priority=row["priority"] or "",
        tags=row["tags"] or "",
        category_id=row["category_id"],
        sealed=True,
    )


def _is_sealed(value: str | None) -> bool:
    """Empty values count as sealed."""
    return not value or CipherEngine.is_encrypted(value)


class NoteRepository:
    """CRUD for the ``notes`` table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, note: Note) -> Note:
        """Insert a note under a fresh id and return it.

        Raises:
            ValidationError: If ``category_id`` references no category.
        """
        stored = Note(
            id=str(uuid4()),
            subject=note.subject,
            content=note.content,
            priority=note.priority,
            tags=note.tags,
            category_id=note.category_id,
            sealed=note.sealed,
        )
        try:
            with self._db.connection() as conn:
                conn.execute(
                    f"INSERT INTO notes ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",  # nosec B608
                    (
                        stored.id,
                        stored.subject,
                        stored.content,
                        stored.priority,
                        stored.tags,
                        stored.category_id,
                    ),
                )
                conn.commit()
        except sqlite3.IntegrityError as e:
            raise ValidationError("category not found") from e
        log.debug("note_inserted", note_id=stored.id)
        return stored

    def get_all(self, priority: str | None = None, category_id: str | None = None) -> list[Note]:
        """Fetch notes, optionally filtered by priority and category."""
        query = f"SELECT {_COLUMNS} FROM notes"  # nosec B608
        conditions: list[str] = []
        args: list[Any] = []

        if priority:
            conditions.append("priority = ?")
            args.append(priority)
        if category_id:
            conditions.append("category_id = ?")
            args.append(category_id)

        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY rowid"

        with self._db.connection() as conn:
            rows = conn.execute(query, args).fetchall()
        return [_row_to_note(row) for row in rows]

    def get_by_id(self, note_id: str) -> Note:
        with self._db.connection() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM notes WHERE id = ?",  # nosec B608
                (note_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError("Note", note_id)
        return _row_to_note(row)

    def update(self, note: Note) -> Note:
        """Overwrite every column of an existing note.

        Raises:
            NotFoundError: If no note has ``note.id``.
            ValidationError: If ``category_id`` references no category.
        """
        try:
            with self._db.connection() as conn:
                cursor = conn.execute(
                    """
                    UPDATE notes
                    SET subject = ?, content = ?, priority = ?, tags = ?, category_id = ?
                    WHERE id = ?
                    """,
                    (
                        note.subject,
                        note.content,
                        note.priority,
                        note.tags,
                        note.category_id,
                        note.id,
                    ),
                )
                conn.commit()
        except sqlite3.IntegrityError as e:
            raise ValidationError("category not found") from e
        if cursor.rowcount == 0:
            raise NotFoundError("Note", note.id)
        return note

    def delete(self, note_id: str) -> None:
        with self._db.connection() as conn:
            cursor = conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
            conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Note", note_id)

    def purge_unencoded(self) -> int:
        """Delete notes whose subject, content or tags is not a sealed value.

        Such rows predate field encryption and can never be decrypted.

        Returns:
            Number of notes deleted.
        """
        with self._db.connection() as conn:
            rows = conn.execute("SELECT id, subject, content, tags FROM notes").fetchall()
            broken = [
                row["id"]
                for row in rows
                if not all(_is_sealed(row[col]) for col in ("subject", "content", "tags"))
            ]
            for note_id in broken:
                conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
                log.warning("legacy_note_deleted", note_id=note_id)
            conn.commit()
        return len(broken)
