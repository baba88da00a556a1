from datetime import datetime

import pytz

from src.pickup_system.pickup_system.core.enums import ChildStatus, Role

TZ = pytz.timezone("Asia/Baghdad")


def test_empty_day(container):
    data = container.dashboard_service.build()

    assert data.total_children == 3
    assert data.present_today == 0
    assert data.recent_activities == []
    assert data.present_children == []


def test_snapshot_after_scans(container, store, clock, todays_code):
    store.children[20]["status"] = ChildStatus.PICKUP_REQUESTED
    container.checkin_service.scan(guardian_id=2, role=Role.GUARDIAN, code=todays_code)
    clock.set(TZ.localize(datetime(2025, 3, 10, 15, 0)))
    container.checkin_service.scan(guardian_id=2, role=Role.GUARDIAN, code=todays_code, child_ids=[10])

    data = container.dashboard_service.build().to_dict()

    assert data["total_children"] == 3
    assert data["present_today"] == 1
    assert data["pickup_requests"] == 1
    assert data["recent_activities"][0]["type"] == "PICK_UP"
    assert data["recent_activities"][0]["child_name"] == "Omar"
    assert [c["name"] for c in data["present_children"]] == ["Lina"]
    assert data["present_children"][0]["guardian_name"] == "Sara Ahmed"
