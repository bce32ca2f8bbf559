"""Activity-log entry and filter dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class AuditAction(str, Enum):
    """Well-known activity-log actions."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    CHECK = "check"
    GENERATE = "generate"


class EntityType(str, Enum):
    """Entity types recorded in the activity log."""

    NOTE = "note"
    CATEGORY = "category"
    ENCRYPTION = "encryption"
    KEY = "key"


@dataclass
class ActivityLog:
    """A single activity-log row.

    Attributes:
        action: What happened (see :class:`AuditAction`).
        entity_type: What kind of entity it happened to.
        entity_id: Id of the entity, empty for collection-level actions.
        description: Human-readable summary.
        user_id: Actor id. There is no authentication, so always the local user.
        ip_address: Source address of the request.
        timestamp: When the action happened (UTC).
        id: Database row id, set after insert.
    """

    action: str
    entity_type: str
    entity_id: str = ""
    description: str = ""
    user_id: int = 1
    ip_address: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "description": self.description,
            "userId": self.user_id,
            "ipAddress": self.ip_address,
        }


@dataclass
class ActivityLogFilter:
    """Query filters for activity-log listings. Zero limit means no limit."""

    entity_type: str | None = None
    action: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = 0
    offset: int = 0
