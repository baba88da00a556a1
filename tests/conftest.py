from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta

import pytest
import pytz

from src.pickup_system.pickup_system.attendance.model import RecentActivityRow
from src.pickup_system.pickup_system.children.model import Child, Guardian, PresentChildRow
from src.pickup_system.pickup_system.container import assemble_container
from src.pickup_system.pickup_system.core.enums import ActionKind, ChildStatus, Role
from src.pickup_system.pickup_system.core.exceptions import ConflictError, DependencyError
from src.pickup_system.pickup_system.notifications.model import Notification

FACILITY_ID = "KG-001"
TZ = pytz.timezone("Asia/Baghdad")


def at(year, month, day, hour=0, minute=0, second=0) -> datetime:
    return TZ.localize(datetime(year, month, day, hour, minute, second))


class FixedClock:
    def __init__(self, now: datetime):
        self._now = now

    @property
    def timezone(self):
        return TZ

    def now(self) -> datetime:
        return self._now

    def today(self):
        return self._now.date()

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


class FakeStore:
    """Shared in-memory tables for the guardian repo and the ledger."""

    def __init__(self):
        self.lock = threading.RLock()
        self.guardians: dict[int, dict] = {}
        self.children: dict[int, dict] = {}
        self.records: list[dict] = []
        self.mutations: list[tuple[str, int]] = []

    def add_guardian(self, guardian_id, name, *, phone=None, role=Role.GUARDIAN):
        self.guardians[guardian_id] = {"name": name, "phone": phone, "role": role}

    def add_child(self, child_id, name, guardian_id, status=ChildStatus.ABSENT):
        self.children[child_id] = {"name": name, "status": status, "guardian_id": guardian_id, "updated_at": None}

    def status_of(self, child_id) -> ChildStatus:
        return self.children[child_id]["status"]

    def records_for(self, child_id) -> list[dict]:
        return [r for r in self.records if r["child_id"] == child_id]


class InMemoryGuardianRepository:
    def __init__(self, store: FakeStore):
        self._store = store

    def _child(self, child_id) -> Child:
        row = self._store.children[child_id]
        return Child(
            child_id=child_id,
            name=row["name"],
            status=row["status"],
            guardian_id=row["guardian_id"],
            updated_at=row["updated_at"],
        )

    def get_guardian(self, guardian_id):
        row = self._store.guardians.get(int(guardian_id))
        if not row:
            return None
        children = tuple(
            self._child(cid) for cid in sorted(self._store.children) if self._store.children[cid]["guardian_id"] == guardian_id
        )
        return Guardian(
            guardian_id=int(guardian_id),
            name=row["name"],
            phone=row["phone"],
            role=row["role"],
            children=children,
        )

    def count_children(self, *, status=None):
        return sum(1 for c in self._store.children.values() if status is None or c["status"] == status)

    def list_children_with_status(self, status):
        rows = []
        for cid, c in sorted(self._store.children.items(), key=lambda kv: kv[1]["name"]):
            if c["status"] == status:
                guardian = self._store.guardians.get(c["guardian_id"])
                rows.append(
                    PresentChildRow(
                        child_id=cid,
                        name=c["name"],
                        guardian_name=guardian["name"] if guardian else None,
                        updated_at=c["updated_at"],
                    )
                )
        return rows


class InMemoryLedgerSession:
    def __init__(self, store: FakeStore):
        self._store = store

    def get_status(self, child_id):
        row = self._store.children.get(int(child_id))
        return row["status"] if row else None

    def create_open_record(self, *, child_id, work_date, check_in_time):
        for r in self._store.records_for(child_id):
            if r["work_date"] == work_date and r["check_out_time"] is None:
                raise ConflictError("Attendance record already open")
        attendance_id = len(self._store.records) + 1
        self._store.records.append(
            {
                "attendance_id": attendance_id,
                "child_id": child_id,
                "work_date": work_date,
                "check_in_time": check_in_time,
                "check_out_time": None,
            }
        )
        self._store.mutations.append(("check_in", child_id))
        return attendance_id

    def close_open_record(self, *, child_id, work_date, check_out_time):
        for r in self._store.records_for(child_id):
            if r["work_date"] == work_date and r["check_out_time"] is None:
                r["check_out_time"] = check_out_time
                self._store.mutations.append(("pick_up", child_id))
                return True
        return False

    def set_child_status(self, *, child_id, status, at, expected=None):
        row = self._store.children.get(int(child_id))
        if row is None:
            return False
        if expected is not None and row["status"] != expected:
            return False
        row["status"] = status
        row["updated_at"] = at
        return True


class InMemoryLedger:
    """Serializes transactions on one lock and restores a snapshot on error."""

    def __init__(self, store: FakeStore):
        self._store = store
        self.unavailable = False

    @contextmanager
    def transaction(self):
        if self.unavailable:
            raise DependencyError("Database unavailable")
        with self._store.lock:
            snapshot = (
                copy.deepcopy(self._store.children),
                copy.deepcopy(self._store.records),
                list(self._store.mutations),
            )
            try:
                yield InMemoryLedgerSession(self._store)
            except BaseException:
                self._store.children, self._store.records, self._store.mutations = snapshot
                raise

    def list_records_for_date(self, work_date, *, limit):
        rows = []
        for r in self._store.records:
            if r["work_date"] != work_date:
                continue
            child = self._store.children[r["child_id"]]
            guardian = self._store.guardians.get(child["guardian_id"])
            rows.append(
                RecentActivityRow(
                    attendance_id=r["attendance_id"],
                    child_id=r["child_id"],
                    child_name=child["name"],
                    guardian_name=guardian["name"] if guardian else None,
                    check_in_time=r["check_in_time"],
                    check_out_time=r["check_out_time"],
                )
            )
        rows.sort(key=lambda row: row.timestamp, reverse=True)
        return rows[:limit]


class InMemoryNotificationRepository:
    def __init__(self, store: FakeStore):
        self._store = store
        self._rows: list[dict] = []
        self._next_id = 1
        self.unavailable = False

    def create(self, *, type, message, child_id, guardian_id, created_at):
        if self.unavailable:
            raise DependencyError("Database unavailable")
        nid = self._next_id
        self._next_id += 1
        self._rows.append(
            {
                "id": nid,
                "type": ActionKind(type),
                "message": message,
                "is_read": False,
                "created_at": created_at,
                "child_id": child_id,
                "guardian_id": guardian_id,
            }
        )
        return nid

    def _to_model(self, row) -> Notification:
        child = self._store.children.get(row["child_id"])
        guardian = self._store.guardians.get(row["guardian_id"])
        return Notification(
            notification_id=row["id"],
            type=row["type"],
            message=row["message"],
            is_read=row["is_read"],
            created_at=row["created_at"],
            child_id=row["child_id"],
            guardian_id=row["guardian_id"],
            child_name=child["name"] if child else None,
            guardian_name=guardian["name"] if guardian else None,
        )

    def list_recent(self, *, type=None, limit=100):
        rows = [r for r in self._rows if type is None or r["type"] == type]
        rows.sort(key=lambda r: (r["created_at"], r["id"]), reverse=True)
        return [self._to_model(r) for r in rows[:limit]]

    def count(self, *, type=None, unread_only=False):
        return sum(
            1
            for r in self._rows
            if (type is None or r["type"] == type) and (not unread_only or not r["is_read"])
        )

    def mark_read(self, notification_id):
        for r in self._rows:
            if r["id"] == int(notification_id):
                r["is_read"] = True
                return True
        return False

    def mark_all_read(self):
        changed = 0
        for r in self._rows:
            if not r["is_read"]:
                r["is_read"] = True
                changed += 1
        return changed

    def delete_all(self):
        removed = len(self._rows)
        self._rows.clear()
        return removed


class RecordingSms:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.mode = "ok"
        self.block_on = None
        self.gate = threading.Event()

    def send(self, to, message):
        if self.block_on and self.block_on in message:
            self.gate.wait(5)
        if self.mode == "raise":
            raise RuntimeError("SMS provider down")
        if self.mode == "fail":
            return False
        self.sent.append((to, message))
        return True


@pytest.fixture
def store():
    s = FakeStore()
    s.add_guardian(1, "Admin Demo", role=Role.ADMIN)
    s.add_guardian(2, "Sara Ahmed", phone="+9647700000000")
    s.add_guardian(3, "Karim Saleh")
    s.add_child(10, "Omar", 2)
    s.add_child(11, "Lina", 2)
    s.add_child(20, "Yusuf", 3)
    return s


@pytest.fixture
def clock():
    return FixedClock(at(2025, 3, 10, 9, 0))


@pytest.fixture
def sms():
    return RecordingSms()


@pytest.fixture
def guardians_repo(store):
    return InMemoryGuardianRepository(store)


@pytest.fixture
def ledger(store):
    return InMemoryLedger(store)


@pytest.fixture
def notifications_repo(store):
    return InMemoryNotificationRepository(store)


@pytest.fixture
def make_container(guardians_repo, ledger, notifications_repo, sms, clock):
    built = []

    def _make(**overrides):
        kwargs = dict(
            guardians_repo=guardians_repo,
            ledger=ledger,
            notifications_repo=notifications_repo,
            sms=sms,
            clock=clock,
            facility_id=FACILITY_ID,
            scan_workers=0,
            sms_workers=0,
        )
        kwargs.update(overrides)
        container = assemble_container(**kwargs)
        built.append(container)
        return container

    yield _make
    for container in built:
        container.close()


@pytest.fixture
def container(make_container):
    return make_container()


@pytest.fixture
def todays_code(container, clock):
    return container.qr_service.issue_code(FACILITY_ID, clock.today())
