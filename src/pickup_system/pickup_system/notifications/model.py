from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ActionKind


@dataclass(frozen=True)
class Notification:
    """Domain entity: one admin-facing notice per committed transition."""

    notification_id: int
    type: ActionKind
    message: str
    is_read: bool
    created_at: datetime
    child_id: Optional[int]
    guardian_id: Optional[int]
    child_name: Optional[str] = None
    guardian_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.notification_id,
            "type": self.type.value,
            "message": self.message,
            "read": self.is_read,
            "timestamp": self.created_at.isoformat(),
            "child_id": self.child_id,
            "child_name": self.child_name,
            "guardian_id": self.guardian_id,
            "guardian_name": self.guardian_name,
        }


@dataclass(frozen=True)
class FeedSummary:
    total: int
    unread: int
    check_ins: int
    pick_ups: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "unread": self.unread,
            "check_in": self.check_ins,
            "pick_up": self.pick_ups,
        }
