from __future__ import annotations

from dataclasses import dataclass

from ..attendance.repository import AttendanceLedger
from ..children.repository import GuardianRepository
from ..common.datetime_utils import FacilityClock
from ..core.constants import DEFAULT_RECENT_ACTIVITY_LIMIT
from ..core.enums import ChildStatus


@dataclass(frozen=True)
class DashboardData:
    total_children: int
    present_today: int
    pickup_requests: int
    recent_activities: list[dict]
    present_children: list[dict]

    def to_dict(self) -> dict:
        return {
            "total_children": self.total_children,
            "present_today": self.present_today,
            "pickup_requests": self.pickup_requests,
            "recent_activities": self.recent_activities,
            "present_children": self.present_children,
        }


class DashboardService:
    """Today's snapshot for the admin landing page."""

    def __init__(
        self,
        guardians: GuardianRepository,
        ledger: AttendanceLedger,
        clock: FacilityClock,
        *,
        recent_limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT,
    ):
        self._guardians = guardians
        self._ledger = ledger
        self._clock = clock
        self._recent_limit = int(recent_limit)

    def build(self) -> DashboardData:
        today = self._clock.today()

        recent = [
            {
                "id": r.attendance_id,
                "type": r.action.value,
                "child_id": r.child_id,
                "child_name": r.child_name,
                "guardian_name": r.guardian_name or "Unknown",
                "timestamp": r.timestamp.isoformat() if r.timestamp else None,
            }
            for r in self._ledger.list_records_for_date(today, limit=self._recent_limit)
        ]
        present = [
            {
                "id": c.child_id,
                "name": c.name,
                "guardian_name": c.guardian_name or "Unknown",
                "since": c.updated_at.isoformat() if c.updated_at else None,
            }
            for c in self._guardians.list_children_with_status(ChildStatus.PRESENT)
        ]

        return DashboardData(
            total_children=self._guardians.count_children(),
            present_today=self._guardians.count_children(status=ChildStatus.PRESENT),
            pickup_requests=self._guardians.count_children(status=ChildStatus.PICKUP_REQUESTED),
            recent_activities=recent,
            present_children=present,
        )
