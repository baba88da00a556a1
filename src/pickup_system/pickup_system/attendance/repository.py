from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import ChildStatus
from .model import RecentActivityRow


class LedgerSession(Protocol):
    """Writes that must commit together (status flip + record write).

    Obtained from ``AttendanceLedger.transaction()``; everything done through
    one session commits on normal exit and rolls back on exception.
    """

    def get_status(self, child_id: int) -> Optional[ChildStatus]:
        """Current status, locked for the rest of the transaction. None if unknown child."""

        raise NotImplementedError

    def create_open_record(self, *, child_id: int, work_date: date, check_in_time: datetime) -> int:
        """Open a record. Raises ConflictError if one is already open for that date."""

        raise NotImplementedError

    def close_open_record(self, *, child_id: int, work_date: date, check_out_time: datetime) -> bool:
        """Close the open record of that date. False if none is open."""

        raise NotImplementedError

    def set_child_status(
        self,
        *,
        child_id: int,
        status: ChildStatus,
        at: datetime,
        expected: Optional[ChildStatus] = None,
    ) -> bool:
        """Conditional write: only applies while the stored status equals ``expected``."""

        raise NotImplementedError


class AttendanceLedger(Protocol):
    def transaction(self) -> ContextManager[LedgerSession]:
        raise NotImplementedError

    def list_records_for_date(self, work_date: date, *, limit: int) -> Sequence[RecentActivityRow]:
        """Most recent first."""

        raise NotImplementedError
