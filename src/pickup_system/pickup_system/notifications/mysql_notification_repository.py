from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ActionKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, naive
from .model import Notification
from .repository import NotificationRepository


def _optional_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _to_notification(r: dict) -> Notification:
    # child_id / guardian_id become NULL once the child or guardian row is deleted.
    return Notification(
        notification_id=int(r["notification_id"]),
        type=ActionKind(r["type"]),
        message=r["message"],
        is_read=bool(r["is_read"]),
        created_at=r["created_at"],
        child_id=_optional_int(r.get("child_id")),
        guardian_id=_optional_int(r.get("guardian_id")),
        child_name=r.get("child_name"),
        guardian_name=r.get("guardian_name"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        type: ActionKind,
        message: str,
        child_id: int,
        guardian_id: int,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(type, message, is_read, created_at, child_id, guardian_id)
                VALUES(%s,%s,0,%s,%s,%s)
                """,
                (type.value, message, naive(created_at), int(child_id), int(guardian_id)),
            )
            return int(cur.lastrowid)

    def list_recent(self, *, type: Optional[ActionKind] = None, limit: int = 100) -> Sequence[Notification]:
        clauses = []
        params: list[object] = []
        if type is not None:
            clauses.append("n.type=%s")
            params.append(type.value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT n.notification_id, n.type, n.message, n.is_read, n.created_at,
                       n.child_id, n.guardian_id,
                       c.name AS child_name, g.name AS guardian_name
                FROM notifications n
                LEFT JOIN children c ON c.child_id = n.child_id
                LEFT JOIN guardians g ON g.guardian_id = n.guardian_id
                {where}
                ORDER BY n.created_at DESC, n.notification_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def count(self, *, type: Optional[ActionKind] = None, unread_only: bool = False) -> int:
        clauses = []
        params: list[object] = []
        if type is not None:
            clauses.append("type=%s")
            params.append(type.value)
        if unread_only:
            clauses.append("is_read=0")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM notifications {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def mark_read(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1 WHERE notification_id=%s",
                (int(notification_id),),
            )
            if cur.rowcount > 0:
                return True
            # rowcount is 0 for an already read row too
            cur.execute(
                "SELECT notification_id FROM notifications WHERE notification_id=%s",
                (int(notification_id),),
            )
            return fetchone(cur) is not None

    def mark_all_read(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE is_read=0")
            return int(cur.rowcount)

    def delete_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notifications")
            return int(cur.rowcount)
