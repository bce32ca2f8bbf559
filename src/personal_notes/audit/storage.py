"""SQLite storage for the activity log."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime, timedelta
from typing import Any

from personal_notes.audit.models import ActivityLog, ActivityLogFilter
from personal_notes.errors import NotFoundError, ValidationError
from personal_notes.logging import get_logger
from personal_notes.storage.database import Database

log = get_logger("personal_notes.audit.storage")

MAX_RETENTION_DAYS = 365_000

_COLUMNS = "id, timestamp, action, entity_type, entity_id, description, user_id, ip_address"


def _to_db_time(value: datetime) -> str:
    """Normalise to a UTC ISO string so lexical order matches time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def _row_to_entry(row: sqlite3.Row) -> ActivityLog:
    return ActivityLog(
        id=row["id"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
        action=row["action"],
        entity_type=row["entity_type"],
        entity_id=row["entity_id"],
        description=row["description"],
        user_id=row["user_id"],
        ip_address=row["ip_address"],
    )


def _where(flt: ActivityLogFilter) -> tuple[str, list[Any]]:
    clauses = ["1=1"]
    args: list[Any] = []
    if flt.entity_type:
        clauses.append("entity_type = ?")
        args.append(flt.entity_type)
    if flt.action:
        clauses.append("action = ?")
        args.append(flt.action)
    if flt.start_date is not None:
        clauses.append("timestamp >= ?")
        args.append(_to_db_time(flt.start_date))
    if flt.end_date is not None:
        clauses.append("timestamp <= ?")
        args.append(_to_db_time(flt.end_date))
    return " AND ".join(clauses), args


class ActivityLogRepository:
    """Append and query activity-log rows."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, entry: ActivityLog) -> int:
        """Insert an entry and return its row id."""
        with self._db.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO activity_logs (
                    timestamp, action, entity_type, entity_id,
                    description, user_id, ip_address
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    _to_db_time(entry.timestamp),
                    entry.action,
                    entry.entity_type,
                    entry.entity_id,
                    entry.description,
                    entry.user_id,
                    entry.ip_address,
                ),
            )
            conn.commit()
        entry.id = cursor.lastrowid
        return cursor.lastrowid or 0

    def get_all(self, flt: ActivityLogFilter | None = None) -> list[ActivityLog]:
        """Return entries newest first."""
        flt = flt or ActivityLogFilter()
        where, args = _where(flt)
        query = (
            f"SELECT {_COLUMNS} FROM activity_logs WHERE {where}"  # nosec B608
            " ORDER BY timestamp DESC, id DESC"
        )

        if flt.limit > 0:
            query += " LIMIT ?"
            args.append(flt.limit)
            if flt.offset > 0:
                query += " OFFSET ?"
                args.append(flt.offset)

        with self._db.connection() as conn:
            rows = conn.execute(query, args).fetchall()
        return [_row_to_entry(row) for row in rows]

    def get_by_id(self, entry_id: int) -> ActivityLog:
        with self._db.connection() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM activity_logs WHERE id = ?",  # nosec B608
                (entry_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError("Activity log", entry_id)
        return _row_to_entry(row)

    def count(self, flt: ActivityLogFilter | None = None) -> int:
        where, args = _where(flt or ActivityLogFilter())
        with self._db.connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM activity_logs WHERE {where}",  # nosec B608
                args,
            ).fetchone()
        return int(row[0])

    def delete_older_than(self, days: int) -> int:
        """Delete entries older than ``days`` days.

        Returns:
            Number of rows deleted.

        Raises:
            ValidationError: If ``days`` is not between 1 and MAX_RETENTION_DAYS.
        """
        if not 0 < days <= MAX_RETENTION_DAYS:
            raise ValidationError("Invalid number of days")
        cutoff = datetime.now(UTC) - timedelta(days=days)
        with self._db.connection() as conn:
            cursor = conn.execute(
                "DELETE FROM activity_logs WHERE timestamp < ?", (_to_db_time(cutoff),)
            )
            conn.commit()
        log.info("activity_logs_purged", days=days, deleted=cursor.rowcount)
        return cursor.rowcount
