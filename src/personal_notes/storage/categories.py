"""Category repository."""

from __future__ import annotations

import sqlite3
from uuid import uuid4

from personal_notes.errors import NotFoundError
from personal_notes.logging import get_logger
from personal_notes.models import Category
from personal_notes.storage.database import Database

log = get_logger("personal_notes.storage.categories")


def _row_to_category(row: sqlite3.Row) -> Category:
    return Category(id=row["id"], name=row["name"], sealed=True)


class CategoryRepository:
    """CRUD for the ``categories`` table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, category: Category) -> Category:
        """Insert a category under a fresh id and return it."""
        stored = Category(id=str(uuid4()), name=category.name, sealed=category.sealed)
        with self._db.connection() as conn:
            conn.execute(
                "INSERT INTO categories (id, name) VALUES (?, ?)",
                (stored.id, stored.name),
            )
            conn.commit()
        log.debug("category_inserted", category_id=stored.id)
        return stored

    def get_all(self) -> list[Category]:
        with self._db.connection() as conn:
            rows = conn.execute("SELECT id, name FROM categories ORDER BY rowid").fetchall()
        return [_row_to_category(row) for row in rows]

    def get_by_id(self, category_id: str) -> Category:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT id, name FROM categories WHERE id = ?", (category_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError("Category", category_id)
        return _row_to_category(row)

    def update(self, category: Category) -> Category:
        with self._db.connection() as conn:
            cursor = conn.execute(
                "UPDATE categories SET name = ? WHERE id = ?",
                (category.name, category.id),
            )
            conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Category", category.id)
        return category

    def delete(self, category_id: str) -> None:
        """Delete a category, detaching any notes that reference it."""
        with self._db.connection() as conn:
            conn.execute(
                "UPDATE notes SET category_id = NULL WHERE category_id = ?", (category_id,)
            )
            cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            if cursor.rowcount == 0:
                conn.rollback()
                raise NotFoundError("Category", category_id)
            conn.commit()
