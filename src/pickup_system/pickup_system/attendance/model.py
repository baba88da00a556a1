from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ActionKind


@dataclass(frozen=True)
class RecentActivityRow:
    """Read-model for today's activity list on the dashboard."""

    attendance_id: int
    child_id: int
    child_name: str
    guardian_name: Optional[str]
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]

    @property
    def action(self) -> ActionKind:
        return ActionKind.PICK_UP if self.check_out_time else ActionKind.CHECK_IN

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.check_out_time or self.check_in_time
