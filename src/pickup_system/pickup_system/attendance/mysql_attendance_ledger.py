from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, Optional, Sequence

from ..core.enums import ChildStatus, RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, naive
from .model import RecentActivityRow
from .repository import AttendanceLedger, LedgerSession


class MySQLLedgerSession(LedgerSession):
    def __init__(self, cur):
        self._cur = cur

    def get_status(self, child_id: int) -> Optional[ChildStatus]:
        # Row lock: a concurrent scan of the same child waits here until we commit.
        self._cur.execute(
            "SELECT status FROM children WHERE child_id=%s FOR UPDATE",
            (int(child_id),),
        )
        r = fetchone(self._cur)
        return ChildStatus(r["status"]) if r else None

    def create_open_record(self, *, child_id: int, work_date: date, check_in_time: datetime) -> int:
        self._cur.execute(
            """
            INSERT INTO attendance_records(child_id, work_date, check_in_time, status)
            VALUES(%s,%s,%s,%s)
            """,
            (int(child_id), work_date, naive(check_in_time), RecordStatus.PRESENT.value),
        )
        return int(self._cur.lastrowid)

    def close_open_record(self, *, child_id: int, work_date: date, check_out_time: datetime) -> bool:
        self._cur.execute(
            """
            UPDATE attendance_records
            SET check_out_time=%s, status=%s
            WHERE child_id=%s AND work_date=%s AND check_out_time IS NULL
            """,
            (naive(check_out_time), RecordStatus.ABSENT.value, int(child_id), work_date),
        )
        return self._cur.rowcount > 0

    def set_child_status(
        self,
        *,
        child_id: int,
        status: ChildStatus,
        at: datetime,
        expected: Optional[ChildStatus] = None,
    ) -> bool:
        if expected is None:
            self._cur.execute(
                "UPDATE children SET status=%s, updated_at=%s WHERE child_id=%s",
                (status.value, naive(at), int(child_id)),
            )
        else:
            self._cur.execute(
                "UPDATE children SET status=%s, updated_at=%s WHERE child_id=%s AND status=%s",
                (status.value, naive(at), int(child_id), expected.value),
            )
        return self._cur.rowcount > 0


class MySQLAttendanceLedger(AttendanceLedger):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[LedgerSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield MySQLLedgerSession(cur)

    def list_records_for_date(self, work_date: date, *, limit: int) -> Sequence[RecentActivityRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ar.attendance_id, ar.child_id, ar.check_in_time, ar.check_out_time,
                       c.name AS child_name, g.name AS guardian_name
                FROM attendance_records ar
                JOIN children c ON c.child_id = ar.child_id
                LEFT JOIN guardians g ON g.guardian_id = c.guardian_id
                WHERE ar.work_date=%s
                ORDER BY COALESCE(ar.check_out_time, ar.check_in_time) DESC
                LIMIT %s
                """,
                (work_date, int(limit)),
            )
            return [
                RecentActivityRow(
                    attendance_id=int(r["attendance_id"]),
                    child_id=int(r["child_id"]),
                    child_name=r["child_name"],
                    guardian_name=r.get("guardian_name"),
                    check_in_time=r.get("check_in_time"),
                    check_out_time=r.get("check_out_time"),
                )
                for r in fetchall(cur)
            ]
