from datetime import datetime

from src.pickup_system.pickup_system.core.enums import ActionKind
from src.pickup_system.pickup_system.notifications.mysql_notification_repository import MySQLNotificationRepository


class FakeCursor:
    def __init__(self, rows):
        self._rows = rows
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, rows):
        self.cursor_obj = FakeCursor(rows)
        self.committed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self, rows):
        self.connection = FakeConnection(rows)

    def connect(self):
        return self.connection


def test_list_recent_keeps_notifications_of_deleted_children():
    created = datetime(2025, 3, 10, 9, 0)
    factory = FakeConnFactory(
        [
            {
                "notification_id": 7,
                "type": "CHECK_IN",
                "message": "Omar has been checked in at 09:00 AM.",
                "is_read": 0,
                "created_at": created,
                "child_id": None,
                "guardian_id": None,
                "child_name": None,
                "guardian_name": None,
            },
            {
                "notification_id": 6,
                "type": "PICK_UP",
                "message": "Lina has been picked up at 08:00 AM.",
                "is_read": 1,
                "created_at": created,
                "child_id": 11,
                "guardian_id": 2,
                "child_name": "Lina",
                "guardian_name": "Sara Ahmed",
            },
        ]
    )

    orphan, linked = MySQLNotificationRepository(factory).list_recent(limit=10)

    assert orphan.child_id is None
    assert orphan.guardian_id is None
    assert orphan.to_dict()["child_id"] is None
    assert orphan.type == ActionKind.CHECK_IN
    assert linked.child_id == 11
    assert linked.is_read is True
    assert factory.connection.committed
