"""SQLite database bootstrap.

Creates the categories, notes and activity_logs tables at `data/db.sqlite3`
by default. Text columns of notes and categories hold whatever string the
repositories are handed; they never know whether it is ciphertext.
"""

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from personal_notes.logging import get_logger

log = get_logger("personal_notes.storage.database")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    subject TEXT NOT NULL,
    content TEXT,
    priority TEXT,
    tags TEXT,
    category_id TEXT,
    FOREIGN KEY (category_id) REFERENCES categories(id)
);

CREATE TABLE IF NOT EXISTS activity_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    action TEXT NOT NULL,
    entity_type TEXT NOT NULL,
    entity_id TEXT NOT NULL,
    description TEXT NOT NULL,
    user_id INTEGER NOT NULL,
    ip_address TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_notes_category ON notes(category_id);
CREATE INDEX IF NOT EXISTS idx_activity_logs_timestamp ON activity_logs(timestamp);
CREATE INDEX IF NOT EXISTS idx_activity_logs_entity_type ON activity_logs(entity_type);
CREATE INDEX IF NOT EXISTS idx_activity_logs_action ON activity_logs(action);
"""


class Database:
    """SQLite handle shared by the repositories.

    Thread-safe via connection-per-operation pattern.
    """

    def __init__(self, db_path: str | Path = "data/db.sqlite3"):
        """Initialize the database.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @property
    def path(self) -> Path:
        return self._db_path

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with self.connection() as conn:
            conn.executescript(_SCHEMA)
            conn.commit()
        log.info("database_initialized", path=str(self._db_path))

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with row factory and foreign keys on."""
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()
