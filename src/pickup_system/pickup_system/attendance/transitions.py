"""Check-in / pick-up state machine.

The guardian scans the same facility code in both directions; what a scan
means is inferred from the child's current status:

    ABSENT            -> PRESENT    (open today's attendance record)
    PRESENT           -> PICKED_UP  (close today's open record)
    PICKED_UP         -> rejected
    PICKUP_REQUESTED  -> rejected
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ActionKind, ChildStatus
from ..core.exceptions import ConflictError
from .repository import LedgerSession


@dataclass(frozen=True)
class TransitionResult:
    action: ActionKind
    from_status: ChildStatus
    to_status: ChildStatus
    attendance_id: Optional[int] = None


class Transition(ABC):
    """Strategy Pattern: one ledger mutation per accepted scan."""

    action: ActionKind
    from_status: ChildStatus
    to_status: ChildStatus

    def __init__(self, child_name: str):
        self.child_name = child_name

    @abstractmethod
    def write_record(self, session: LedgerSession, *, child_id: int, work_date: date, at: datetime) -> Optional[int]:
        raise NotImplementedError

    def apply(self, session: LedgerSession, *, child_id: int, work_date: date, at: datetime) -> TransitionResult:
        attendance_id = self.write_record(session, child_id=child_id, work_date=work_date, at=at)
        flipped = session.set_child_status(
            child_id=child_id,
            status=self.to_status,
            at=at,
            expected=self.from_status,
        )
        if not flipped:
            # Someone else moved the child first; raising rolls back the record write.
            raise ConflictError(f"{self.child_name} was updated by another scan.")
        return TransitionResult(
            action=self.action,
            from_status=self.from_status,
            to_status=self.to_status,
            attendance_id=attendance_id,
        )


class CheckInTransition(Transition):
    action = ActionKind.CHECK_IN
    from_status = ChildStatus.ABSENT
    to_status = ChildStatus.PRESENT

    def write_record(self, session: LedgerSession, *, child_id: int, work_date: date, at: datetime) -> Optional[int]:
        return session.create_open_record(child_id=child_id, work_date=work_date, check_in_time=at)


class PickUpTransition(Transition):
    action = ActionKind.PICK_UP
    from_status = ChildStatus.PRESENT
    to_status = ChildStatus.PICKED_UP

    def write_record(self, session: LedgerSession, *, child_id: int, work_date: date, at: datetime) -> Optional[int]:
        if not session.close_open_record(child_id=child_id, work_date=work_date, check_out_time=at):
            raise ConflictError(f"{self.child_name} has no open attendance record for today.")
        return None


@dataclass
class TransitionEngine:
    """Factory Pattern: choose the transition for the current status, or reject."""

    def for_status(self, status: ChildStatus, *, child_name: str) -> Transition:
        if status == ChildStatus.ABSENT:
            return CheckInTransition(child_name)
        if status == ChildStatus.PRESENT:
            return PickUpTransition(child_name)
        if status == ChildStatus.PICKED_UP:
            raise ConflictError(f"{child_name} has already been picked up.")
        if status == ChildStatus.PICKUP_REQUESTED:
            raise ConflictError(f"{child_name} has a pending pickup request.")
        raise ConflictError(f"{child_name} cannot be checked in or out right now.")
