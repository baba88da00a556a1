from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ActionKind
from .model import Notification


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        type: ActionKind,
        message: str,
        child_id: int,
        guardian_id: int,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_recent(self, *, type: Optional[ActionKind] = None, limit: int = 100) -> Sequence[Notification]:
        """Newest first."""

        raise NotImplementedError

    def count(self, *, type: Optional[ActionKind] = None, unread_only: bool = False) -> int:
        raise NotImplementedError

    def mark_read(self, notification_id: int) -> bool:
        """False if no such notification. Marking an already read one is fine."""

        raise NotImplementedError

    def mark_all_read(self) -> int:
        raise NotImplementedError

    def delete_all(self) -> int:
        raise NotImplementedError
