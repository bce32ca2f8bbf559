"""Activity-log audit trail.

Entries are queued by request handlers and written by a background worker.
"""

from personal_notes.audit.models import ActivityLog, ActivityLogFilter, AuditAction, EntityType
from personal_notes.audit.recorder import AuditLog
from personal_notes.audit.storage import ActivityLogRepository

__all__ = [
    "ActivityLog",
    "ActivityLogFilter",
    "ActivityLogRepository",
    "AuditAction",
    "AuditLog",
    "EntityType",
]
