from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ChildStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Child, Guardian, PresentChildRow
from .repository import GuardianRepository


def _to_child(r: dict) -> Child:
    return Child(
        child_id=int(r["child_id"]),
        name=r["name"],
        status=ChildStatus(r["status"]),
        guardian_id=int(r["guardian_id"]),
        updated_at=r.get("updated_at"),
    )


class MySQLGuardianRepository(GuardianRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_guardian(self, guardian_id: int) -> Optional[Guardian]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT guardian_id, name, phone, role
                FROM guardians
                WHERE guardian_id=%s
                """,
                (int(guardian_id),),
            )
            g = fetchone(cur)
            if not g:
                return None

            cur.execute(
                """
                SELECT child_id, name, status, guardian_id, updated_at
                FROM children
                WHERE guardian_id=%s
                ORDER BY child_id ASC
                """,
                (int(guardian_id),),
            )
            children = tuple(_to_child(r) for r in fetchall(cur))

            return Guardian(
                guardian_id=int(g["guardian_id"]),
                name=g["name"],
                phone=g.get("phone") or None,
                role=Role(g["role"]),
                children=children,
            )

    def count_children(self, *, status: Optional[ChildStatus] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute("SELECT COUNT(*) AS n FROM children")
            else:
                cur.execute("SELECT COUNT(*) AS n FROM children WHERE status=%s", (status.value,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def list_children_with_status(self, status: ChildStatus) -> Sequence[PresentChildRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.child_id, c.name, c.updated_at, g.name AS guardian_name
                FROM children c
                LEFT JOIN guardians g ON g.guardian_id = c.guardian_id
                WHERE c.status=%s
                ORDER BY c.name ASC
                """,
                (status.value,),
            )
            return [
                PresentChildRow(
                    child_id=int(r["child_id"]),
                    name=r["name"],
                    guardian_name=r.get("guardian_name"),
                    updated_at=r.get("updated_at"),
                )
                for r in fetchall(cur)
            ]
